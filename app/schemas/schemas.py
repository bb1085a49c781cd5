"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
Responses never carry passwords.
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import date, datetime

from app.models.entities import (
    ANY_MAJOR,
    MAX_ACTIVE_APPLICATIONS,
    ApplicationStatus,
    ApprovalStatus,
    InternshipLevel,
    InternshipOpportunity,
    InternshipStatus,
    UserRole,
)


# ============================================================
# AUTH SCHEMAS
# ============================================================

class LoginRequest(BaseModel):
    user_id: str = Field(..., min_length=1, description="Student/staff ID, or representative email")
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    name: str
    role: UserRole

class ChangePasswordRequest(BaseModel):
    old_password: str
    new_password: str = Field(..., min_length=6)

class RegisterRepresentativeRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)
    company_name: str = Field(..., min_length=1)
    industry: str = ""
    position: str = ""

class UserResponse(BaseModel):
    user_id: str
    name: str
    email: str
    role: UserRole
    # Student
    major: Optional[str] = None
    year: Optional[int] = None
    application_ids: Optional[List[str]] = None
    accepted_placement_id: Optional[str] = None
    has_accepted_placement: Optional[bool] = None
    # Representative
    company_name: Optional[str] = None
    industry: Optional[str] = None
    position: Optional[str] = None
    status: Optional[ApprovalStatus] = None
    internship_ids: Optional[List[str]] = None
    # Staff
    department: Optional[str] = None


# ============================================================
# INTERNSHIP SCHEMAS
# ============================================================

class InternshipCreate(BaseModel):
    title: str
    description: str = ""
    level: InternshipLevel = InternshipLevel.BASIC
    preferred_major: str = ANY_MAJOR
    opening_date: date
    closing_date: date
    start_date: date
    end_date: date
    total_slots: int = 1

class InternshipUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    level: Optional[InternshipLevel] = None
    preferred_major: Optional[str] = None
    opening_date: Optional[date] = None
    closing_date: Optional[date] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    total_slots: Optional[int] = None

class VisibilityUpdate(BaseModel):
    visible: bool

class InternshipResponse(BaseModel):
    internship_id: str
    title: str
    description: str
    level: InternshipLevel
    preferred_major: str
    opening_date: Optional[date] = None
    closing_date: Optional[date] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    total_slots: int
    filled_slots: int
    available_slots: int
    status: InternshipStatus
    company_name: str
    representative_id: str
    visible: bool

    @classmethod
    def from_entity(cls, internship: InternshipOpportunity) -> "InternshipResponse":
        return cls(
            **internship.model_dump(),
            available_slots=internship.total_slots - internship.filled_slots,
        )


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(BaseModel):
    internship_id: str

class DecisionRequest(BaseModel):
    approve: bool
    comments: Optional[str] = None

class ApplicationResponse(BaseModel):
    application_id: str
    student_id: str
    internship_id: str
    status: ApplicationStatus
    submission_date: Optional[datetime] = None
    status_update_date: Optional[datetime] = None
    placement_accepted: bool
    placement_acceptance_date: Optional[datetime] = None
    representative_comments: str = ""

class ActiveApplicationsResponse(BaseModel):
    active_applications: int
    max_active_applications: int = MAX_ACTIVE_APPLICATIONS


# ============================================================
# WITHDRAWAL SCHEMAS
# ============================================================

class WithdrawalCreate(BaseModel):
    application_id: str
    reason: str = Field(..., min_length=1)

class WithdrawalUpdate(BaseModel):
    reason: str = Field(..., min_length=1)

class WithdrawalCancel(BaseModel):
    reason: Optional[str] = None

class WithdrawalResponse(BaseModel):
    withdrawal_id: str
    application_id: str
    student_id: str
    internship_id: str
    reason: str
    status: ApprovalStatus
    request_date: Optional[datetime] = None
    processed_by: str = ""
    processed_date: Optional[datetime] = None
    staff_comments: str = ""


# ============================================================
# STAFF SCHEMAS
# ============================================================

class StudentCreate(BaseModel):
    student_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    major: str = Field(..., min_length=1)
    year: int = Field(..., ge=1, le=4)
    email: EmailStr
    password: Optional[str] = Field(None, min_length=6)

class RepresentativeCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)
    company_name: str = Field(..., min_length=1)
    industry: str = ""
    position: str = ""

class RepresentativeResponse(BaseModel):
    user_id: str
    name: str
    email: str
    company_name: str
    industry: str
    position: str
    status: ApprovalStatus
    internship_ids: List[str] = []
    registration_date: Optional[datetime] = None
    approved_by_staff_id: Optional[str] = None


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True

class ErrorResponse(BaseModel):
    detail: str
    rule: Optional[str] = None
    entity: Optional[str] = None
    persisted: Optional[List[str]] = None
    failed: Optional[List[str]] = None
