"""
Business rules.

Pure checks over already-loaded entities: no repository access, no I/O.
Each `ensure_*` function either returns quietly or raises a typed error
naming the rule that failed. The workflow services call them while holding
the relevant locks, then stage whatever the rule allows.
"""

from datetime import date
from typing import Iterable, Optional

from email_validator import EmailNotValidError, validate_email

from app.core.errors import (
    BusinessRule,
    BusinessRuleError,
    InvalidInputError,
    UnauthorizedError,
)
from app.models.entities import (
    MAX_ACTIVE_APPLICATIONS,
    MAX_INTERNSHIPS_PER_REPRESENTATIVE,
    MAX_SLOTS,
    Application,
    ApplicationStatus,
    ApprovalStatus,
    CompanyRepresentative,
    InternshipLevel,
    InternshipOpportunity,
    InternshipStatus,
    Student,
    WithdrawalRequest,
)

MIN_PASSWORD_LENGTH = 6
WITHDRAWABLE_STATUSES = (
    ApplicationStatus.PENDING,
    ApplicationStatus.SUCCESSFUL,
    ApplicationStatus.ACCEPTED,
)


# ============================================================
# INPUT
# ============================================================

def require_text(value: Optional[str], field_name: str) -> str:
    text = (value or "").strip()
    if not text:
        raise InvalidInputError(f"{field_name} is required")
    return text


def normalize_email(email: Optional[str]) -> str:
    """Syntax-only check (no DNS lookups). Returns the normalized address."""
    try:
        return validate_email(require_text(email, "Email"), check_deliverability=False).normalized
    except EmailNotValidError as exc:
        raise InvalidInputError(f"Invalid email address: {exc}") from exc


def ensure_password_strength(password: Optional[str]) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidInputError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


def ensure_year(year: int) -> None:
    if not 1 <= year <= 4:
        raise InvalidInputError("Year must be between 1 and 4")


# ============================================================
# APPLYING
# ============================================================

def ensure_eligible(student: Student, internship: InternshipOpportunity) -> None:
    """Year 1-2 students may only take BASIC; the major must match unless 'Any'."""
    if student.is_junior and internship.level != InternshipLevel.BASIC:
        raise BusinessRuleError(
            BusinessRule.INELIGIBLE_LEVEL,
            f"Year {student.year} students can only apply to BASIC internships",
        )
    if not internship.accepts_major(student.major):
        raise BusinessRuleError(
            BusinessRule.INELIGIBLE_MAJOR,
            f"Internship requires major {internship.preferred_major}",
        )


def ensure_accepting_applications(internship: InternshipOpportunity, today: date) -> None:
    if internship.status != InternshipStatus.APPROVED:
        reason = f"is {internship.status.value}"
    elif not internship.visible:
        reason = "is not visible"
    elif not internship.is_within_window(today):
        reason = "is outside its application window"
    elif not internship.has_available_slots:
        reason = "has no free slots"
    else:
        return
    raise BusinessRuleError(
        BusinessRule.INTERNSHIP_NOT_OPEN,
        f"Internship {internship.internship_id} {reason}",
    )


def ensure_can_apply(
    student: Student,
    internship: InternshipOpportunity,
    student_applications: Iterable[Application],
    today: date,
) -> None:
    """
    Run every apply-time check in a fixed order.

    Args:
        student: the applicant
        internship: the target opportunity
        student_applications: all of the student's existing applications
        today: the date used for the opening/closing window
    """
    if student.has_accepted_placement:
        raise BusinessRuleError(
            BusinessRule.PLACEMENT_ALREADY_ACCEPTED,
            "You have already accepted a placement",
        )

    applications = list(student_applications)
    active = sum(1 for a in applications if a.is_active)
    if active >= MAX_ACTIVE_APPLICATIONS:
        raise BusinessRuleError(
            BusinessRule.MAX_ACTIVE_APPLICATIONS,
            f"Maximum {MAX_ACTIVE_APPLICATIONS} active applications allowed",
        )

    if any(
        a.internship_id == internship.internship_id and a.status != ApplicationStatus.WITHDRAWN
        for a in applications
    ):
        raise BusinessRuleError(
            BusinessRule.DUPLICATE_APPLICATION,
            "You have already applied to this internship",
        )

    ensure_eligible(student, internship)
    ensure_accepting_applications(internship, today)


# ============================================================
# INTERNSHIPS
# ============================================================

def ensure_approved_representative(representative: CompanyRepresentative) -> None:
    if not representative.is_approved:
        raise UnauthorizedError(
            f"Representative {representative.user_id} is {representative.status.value}, not APPROVED"
        )


def ensure_internship_quota(owned_count: int) -> None:
    if owned_count >= MAX_INTERNSHIPS_PER_REPRESENTATIVE:
        raise BusinessRuleError(
            BusinessRule.MAX_INTERNSHIPS,
            f"Maximum {MAX_INTERNSHIPS_PER_REPRESENTATIVE} internships allowed per representative",
        )


def ensure_internship_fields(
    total_slots: int,
    opening_date: Optional[date],
    closing_date: Optional[date],
    start_date: Optional[date],
    end_date: Optional[date],
    filled_slots: int = 0,
) -> None:
    if not 1 <= total_slots <= MAX_SLOTS:
        raise BusinessRuleError(
            BusinessRule.INVALID_SLOTS,
            f"Slots must be between 1 and {MAX_SLOTS}",
        )
    if total_slots < filled_slots:
        raise BusinessRuleError(
            BusinessRule.INVALID_SLOTS,
            f"Slots cannot be lower than the {filled_slots} already filled",
        )
    if None in (opening_date, closing_date, start_date, end_date):
        raise InvalidInputError("Opening, closing, start and end dates are required")
    if not opening_date < closing_date <= start_date < end_date:
        raise BusinessRuleError(
            BusinessRule.INVALID_DATE_ORDER,
            "Dates must satisfy opening < closing <= start < end",
        )


def ensure_owner(internship: InternshipOpportunity, representative_id: str) -> None:
    if internship.representative_id != representative_id:
        raise UnauthorizedError(f"You do not own internship {internship.internship_id}")


def ensure_editable(internship: InternshipOpportunity) -> None:
    if not internship.is_editable:
        raise BusinessRuleError(
            BusinessRule.NOT_EDITABLE,
            f"Internship is {internship.status.value}; only PENDING or REJECTED internships can be edited",
        )


def ensure_internship_deletable(internship: InternshipOpportunity, today: date) -> None:
    if internship.is_editable:
        return
    if (
        internship.status == InternshipStatus.APPROVED
        and internship.closing_date is not None
        and today > internship.closing_date
    ):
        return
    raise BusinessRuleError(
        BusinessRule.NOT_DELETABLE,
        "Only PENDING, REJECTED, or APPROVED internships past their closing date can be deleted",
    )


def ensure_visibility_changeable(internship: InternshipOpportunity) -> None:
    if internship.status not in (InternshipStatus.APPROVED, InternshipStatus.FILLED):
        raise BusinessRuleError(
            BusinessRule.INVALID_STATUS_TRANSITION,
            "Visibility can only be changed once the internship is approved",
        )


def fill_slot(internship: InternshipOpportunity) -> None:
    """Consume one slot; the internship becomes FILLED exactly at capacity."""
    if not internship.has_available_slots:
        raise BusinessRuleError(BusinessRule.NO_SLOTS, f"Internship {internship.internship_id} is full")
    internship.filled_slots += 1
    if internship.filled_slots == internship.total_slots:
        internship.status = InternshipStatus.FILLED


def release_slot(internship: InternshipOpportunity) -> None:
    if internship.filled_slots > 0:
        internship.filled_slots -= 1
    if internship.status == InternshipStatus.FILLED and internship.has_available_slots:
        internship.status = InternshipStatus.APPROVED


# ============================================================
# DECISIONS
# ============================================================

def ensure_pending(status, what: str) -> None:
    """Staff/representative decisions happen once; a decided item stays decided."""
    if status.value != "PENDING":
        raise BusinessRuleError(
            BusinessRule.ALREADY_PROCESSED,
            f"{what} has already been processed ({status.value})",
        )


def ensure_application_decidable(application: Application, internship: InternshipOpportunity, approve: bool) -> None:
    if application.status != ApplicationStatus.PENDING:
        raise BusinessRuleError(
            BusinessRule.INVALID_STATUS_TRANSITION,
            f"Application is {application.status.value}; only PENDING applications can be decided",
        )
    if approve and not internship.has_available_slots:
        raise BusinessRuleError(BusinessRule.NO_SLOTS, "No available slots for this internship")


# ============================================================
# PLACEMENT & WITHDRAWAL
# ============================================================

def ensure_application_owner(application: Application, student_id: str) -> None:
    if application.student_id != student_id:
        raise UnauthorizedError("This application does not belong to you")


def ensure_can_accept(
    student: Student,
    application: Application,
    withdrawals: Iterable[WithdrawalRequest],
) -> None:
    ensure_application_owner(application, student.user_id)
    if student.has_accepted_placement:
        raise BusinessRuleError(
            BusinessRule.PLACEMENT_ALREADY_ACCEPTED,
            "You have already accepted a placement",
        )
    if application.status != ApplicationStatus.SUCCESSFUL:
        raise BusinessRuleError(
            BusinessRule.INVALID_STATUS_TRANSITION,
            f"Only SUCCESSFUL applications can be accepted (this one is {application.status.value})",
        )
    if any(w.is_pending for w in withdrawals):
        raise BusinessRuleError(
            BusinessRule.WITHDRAWAL_PENDING,
            "A withdrawal request is pending for this application",
        )


def ensure_withdrawable(application: Application) -> None:
    if application.status not in WITHDRAWABLE_STATUSES:
        raise BusinessRuleError(
            BusinessRule.NOT_WITHDRAWABLE,
            f"Cannot withdraw an application that is {application.status.value}",
        )


def ensure_can_request_withdrawal(
    application: Application,
    student_id: str,
    withdrawals: Iterable[WithdrawalRequest],
) -> None:
    ensure_application_owner(application, student_id)
    ensure_withdrawable(application)
    for withdrawal in withdrawals:
        if withdrawal.is_pending:
            raise BusinessRuleError(
                BusinessRule.WITHDRAWAL_PENDING,
                "A withdrawal request is already pending for this application",
            )
        if withdrawal.status == ApprovalStatus.APPROVED:
            raise BusinessRuleError(
                BusinessRule.ALREADY_PROCESSED,
                "This application has already been withdrawn",
            )


def ensure_withdrawal_owner(withdrawal: WithdrawalRequest, student_id: str) -> None:
    if withdrawal.student_id != student_id:
        raise UnauthorizedError("This withdrawal request does not belong to you")


def ensure_withdrawal_deletable(withdrawal: WithdrawalRequest) -> None:
    if withdrawal.status not in (ApprovalStatus.PENDING, ApprovalStatus.REJECTED):
        raise BusinessRuleError(
            BusinessRule.NOT_DELETABLE,
            f"Cannot delete a withdrawal request that is {withdrawal.status.value}",
        )
