"""
Models module - pydantic domain entities held in the CSV-backed caches.

API request/response shapes live in app.schemas instead.
"""
from app.models.entities import (
    ACTIVE_APPLICATION_STATUSES,
    ANY_MAJOR,
    DEFAULT_PASSWORD,
    MAX_ACTIVE_APPLICATIONS,
    MAX_INTERNSHIPS_PER_REPRESENTATIVE,
    MAX_SLOTS,
    Application,
    ApplicationStatus,
    ApprovalStatus,
    CareerCenterStaff,
    CompanyRepresentative,
    InternshipLevel,
    InternshipOpportunity,
    InternshipStatus,
    Student,
    User,
    UserAccount,
    UserRole,
    WithdrawalRequest,
)

__all__ = [
    "ACTIVE_APPLICATION_STATUSES",
    "ANY_MAJOR",
    "DEFAULT_PASSWORD",
    "MAX_ACTIVE_APPLICATIONS",
    "MAX_INTERNSHIPS_PER_REPRESENTATIVE",
    "MAX_SLOTS",
    "Application",
    "ApplicationStatus",
    "ApprovalStatus",
    "CareerCenterStaff",
    "CompanyRepresentative",
    "InternshipLevel",
    "InternshipOpportunity",
    "InternshipStatus",
    "Student",
    "User",
    "UserAccount",
    "UserRole",
    "WithdrawalRequest",
]
