"""
Domain entities.

Plain pydantic models held in the repository caches. They carry data and a
few read-only helpers; every state change goes through the service layer.

Users are a tagged union on `role`: the shared account fields live on
UserAccount, each role adds its own fields, and code dispatches on the role
tag (see `User`).
"""

from datetime import date, datetime
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field

DEFAULT_PASSWORD = "password123"
ANY_MAJOR = "Any"

MAX_ACTIVE_APPLICATIONS = 3
MAX_INTERNSHIPS_PER_REPRESENTATIVE = 5
MAX_SLOTS = 10


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    STUDENT = "STUDENT"
    COMPANY_REPRESENTATIVE = "COMPANY_REPRESENTATIVE"
    CAREER_CENTER_STAFF = "CAREER_CENTER_STAFF"


class ApprovalStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class InternshipLevel(str, Enum):
    BASIC = "BASIC"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"


class InternshipStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    FILLED = "FILLED"


class ApplicationStatus(str, Enum):
    PENDING = "PENDING"
    SUCCESSFUL = "SUCCESSFUL"
    UNSUCCESSFUL = "UNSUCCESSFUL"
    ACCEPTED = "ACCEPTED"
    WITHDRAWN = "WITHDRAWN"


ACTIVE_APPLICATION_STATUSES = (ApplicationStatus.PENDING, ApplicationStatus.SUCCESSFUL)


# ============================================================
# USERS
# ============================================================

class UserAccount(BaseModel):
    """Fields every role shares."""
    user_id: str
    name: str = ""
    email: str = ""
    password: str = DEFAULT_PASSWORD


class Student(UserAccount):
    role: Literal[UserRole.STUDENT] = UserRole.STUDENT
    major: str = ""
    year: int = 1
    application_ids: List[str] = Field(default_factory=list)
    accepted_placement_id: Optional[str] = None

    @property
    def has_accepted_placement(self) -> bool:
        return bool(self.accepted_placement_id)

    @property
    def is_junior(self) -> bool:
        return self.year <= 2


class CompanyRepresentative(UserAccount):
    role: Literal[UserRole.COMPANY_REPRESENTATIVE] = UserRole.COMPANY_REPRESENTATIVE
    company_name: str = ""
    industry: str = ""
    position: str = ""
    status: ApprovalStatus = ApprovalStatus.PENDING
    internship_ids: List[str] = Field(default_factory=list)
    registration_date: Optional[datetime] = None
    approved_by_staff_id: Optional[str] = None

    @property
    def is_approved(self) -> bool:
        return self.status == ApprovalStatus.APPROVED


class CareerCenterStaff(UserAccount):
    role: Literal[UserRole.CAREER_CENTER_STAFF] = UserRole.CAREER_CENTER_STAFF
    department: str = ""


User = Annotated[
    Union[Student, CompanyRepresentative, CareerCenterStaff],
    Field(discriminator="role"),
]


# ============================================================
# INTERNSHIPS
# ============================================================

class InternshipOpportunity(BaseModel):
    internship_id: str
    title: str = ""
    description: str = ""
    level: InternshipLevel = InternshipLevel.BASIC
    preferred_major: str = ANY_MAJOR
    opening_date: Optional[date] = None
    closing_date: Optional[date] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    total_slots: int = 1
    filled_slots: int = 0
    status: InternshipStatus = InternshipStatus.PENDING
    representative_id: str = ""
    company_name: str = ""
    visible: bool = False

    @property
    def has_available_slots(self) -> bool:
        return self.filled_slots < self.total_slots

    @property
    def is_editable(self) -> bool:
        return self.status in (InternshipStatus.PENDING, InternshipStatus.REJECTED)

    def is_within_window(self, today: date) -> bool:
        if self.opening_date and today < self.opening_date:
            return False
        if self.closing_date and today > self.closing_date:
            return False
        return True

    def is_visible_on(self, today: date) -> bool:
        """APPROVED, flagged visible and inside its application window."""
        return (
            self.status == InternshipStatus.APPROVED
            and self.visible
            and self.is_within_window(today)
        )

    def accepts_major(self, major: Optional[str]) -> bool:
        preferred = (self.preferred_major or "").strip()
        if not preferred or preferred.lower() == ANY_MAJOR.lower():
            return True
        return bool(major) and preferred.lower() == major.strip().lower()


# ============================================================
# APPLICATIONS & WITHDRAWALS
# ============================================================

class Application(BaseModel):
    application_id: str
    student_id: str
    internship_id: str
    status: ApplicationStatus = ApplicationStatus.PENDING
    submission_date: Optional[datetime] = None
    status_update_date: Optional[datetime] = None
    placement_accepted: bool = False
    placement_acceptance_date: Optional[datetime] = None
    representative_comments: str = ""

    @property
    def is_active(self) -> bool:
        """Counts toward the per-student application cap."""
        return self.status in ACTIVE_APPLICATION_STATUSES


class WithdrawalRequest(BaseModel):
    withdrawal_id: str
    application_id: str
    student_id: str
    internship_id: str = ""
    reason: str = ""
    status: ApprovalStatus = ApprovalStatus.PENDING
    request_date: Optional[datetime] = None
    processed_by: str = ""
    processed_date: Optional[datetime] = None
    staff_comments: str = ""

    @property
    def is_pending(self) -> bool:
        return self.status == ApprovalStatus.PENDING
