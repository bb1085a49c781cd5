"""
Career Center Staff Service

Approval queues and decisions for representatives, internships and
withdrawal requests, plus account creation on behalf of users.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from app.core.errors import BusinessRule, BusinessRuleError, ResourceNotFoundError
from app.db.repositories import (
    ApplicationRepository,
    InternshipRepository,
    RepresentativeRepository,
    StaffRepository,
    StudentRepository,
    WithdrawalRepository,
)
from app.models.entities import (
    ApplicationStatus,
    ApprovalStatus,
    CareerCenterStaff,
    CompanyRepresentative,
    InternshipOpportunity,
    InternshipStatus,
    Student,
    WithdrawalRequest,
)
from app.services import rules
from app.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

# Initial password for students created by staff
STAFF_CREATED_STUDENT_PASSWORD = "password"

WITHDRAWAL_APPROVED_COMMENT = "Withdrawal approved by staff"
WITHDRAWAL_REJECTED_COMMENT = "Withdrawal rejected by staff"


class StaffService:

    def __init__(
        self,
        students: StudentRepository,
        representatives: RepresentativeRepository,
        staff: StaffRepository,
        internships: InternshipRepository,
        applications: ApplicationRepository,
        withdrawals: WithdrawalRepository,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.students = students
        self.representatives = representatives
        self.staff = staff
        self.internships = internships
        self.applications = applications
        self.withdrawals = withdrawals
        self.clock = clock

    def _staff_member(self, staff_id: str) -> CareerCenterStaff:
        member = self.staff.find_by_id(staff_id)
        if member is None:
            raise ResourceNotFoundError("Staff", staff_id)
        return member

    # ============================================================
    # DECISIONS
    # ============================================================

    def decide_representative(self, staff_id: str, representative_id: str, approve: bool) -> CompanyRepresentative:
        self._staff_member(staff_id)
        with UnitOfWork(self.representatives) as uow:
            representative = uow.get(self.representatives, representative_id)
            if representative is None:
                raise ResourceNotFoundError("Representative", representative_id)
            rules.ensure_pending(representative.status, "Representative")

            representative.status = ApprovalStatus.APPROVED if approve else ApprovalStatus.REJECTED
            representative.approved_by_staff_id = staff_id
            uow.stage(self.representatives, representative)
            uow.commit()

        logger.info("Staff %s %s representative %s", staff_id, representative.status.value, representative_id)
        return representative

    def decide_internship(self, staff_id: str, internship_id: str, approve: bool) -> InternshipOpportunity:
        """Approving also makes the posting visible; rejecting hides it."""
        self._staff_member(staff_id)
        with UnitOfWork(self.internships) as uow:
            internship = uow.get(self.internships, internship_id)
            if internship is None:
                raise ResourceNotFoundError("Internship", internship_id)
            rules.ensure_pending(internship.status, "Internship")

            internship.status = InternshipStatus.APPROVED if approve else InternshipStatus.REJECTED
            internship.visible = approve
            uow.stage(self.internships, internship)
            uow.commit()

        logger.info("Staff %s %s internship %s", staff_id, internship.status.value, internship_id)
        return internship

    def process_withdrawal(
        self,
        staff_id: str,
        withdrawal_id: str,
        approve: bool,
        comments: Optional[str] = None,
    ) -> WithdrawalRequest:
        """
        Decide a PENDING withdrawal request.

        Approval sets the application to WITHDRAWN. When the application was
        an accepted placement, its slot is released (a FILLED internship
        reopens) and the student's placement is cleared. Rejection leaves
        the application exactly as it was. An application that is no longer
        withdrawable (e.g. marked UNSUCCESSFUL meanwhile) cannot be approved.
        """
        self._staff_member(staff_id)
        with UnitOfWork(self.students, self.internships, self.applications, self.withdrawals) as uow:
            request = uow.get(self.withdrawals, withdrawal_id)
            if request is None:
                raise ResourceNotFoundError("Withdrawal request", withdrawal_id)
            rules.ensure_pending(request.status, "Withdrawal request")
            now = self.clock()

            if approve:
                application = uow.get(self.applications, request.application_id)
                if application is None:
                    raise ResourceNotFoundError("Application", request.application_id)
                # the application may have been decided since the request was made
                rules.ensure_withdrawable(application)

                if application.status == ApplicationStatus.ACCEPTED:
                    internship = uow.get(self.internships, application.internship_id)
                    if internship is not None:
                        rules.release_slot(internship)
                        uow.stage(self.internships, internship)

                student = uow.get(self.students, request.student_id)
                if student is not None and student.accepted_placement_id == application.application_id:
                    student.accepted_placement_id = None
                    uow.stage(self.students, student)

                application.status = ApplicationStatus.WITHDRAWN
                application.placement_accepted = False
                application.status_update_date = now
                uow.stage(self.applications, application)

            request.status = ApprovalStatus.APPROVED if approve else ApprovalStatus.REJECTED
            request.processed_by = staff_id
            request.processed_date = now
            request.staff_comments = (comments or "").strip() or (
                WITHDRAWAL_APPROVED_COMMENT if approve else WITHDRAWAL_REJECTED_COMMENT
            )
            uow.stage(self.withdrawals, request)
            uow.commit()

        logger.info("Staff %s %s withdrawal %s", staff_id, request.status.value, withdrawal_id)
        return request

    # ============================================================
    # QUEUES
    # ============================================================

    def pending_representatives(self) -> List[CompanyRepresentative]:
        return self.representatives.find_by_status(ApprovalStatus.PENDING)

    def pending_internships(self) -> List[InternshipOpportunity]:
        return self.internships.find_by_status(InternshipStatus.PENDING)

    def pending_withdrawals(self) -> List[WithdrawalRequest]:
        return self.withdrawals.find_pending()

    def list_companies(self) -> List[str]:
        """Distinct company names of APPROVED representatives, sorted."""
        names = {
            r.company_name.strip()
            for r in self.representatives.find_by_status(ApprovalStatus.APPROVED)
            if r.company_name.strip()
        }
        return sorted(names, key=str.lower)

    # ============================================================
    # ACCOUNTS
    # ============================================================

    def _ensure_unused(self, *identifiers: str) -> None:
        for identifier in identifiers:
            if (
                self.students.exists_by_id(identifier)
                or self.representatives.exists_by_id(identifier)
                or self.staff.exists_by_id(identifier)
                or self.representatives.find_by_email(identifier) is not None
            ):
                raise BusinessRuleError(
                    BusinessRule.DUPLICATE_ACCOUNT,
                    f"An account with ID or email {identifier} already exists",
                )

    def create_student(
        self,
        staff_id: str,
        student_id: str,
        name: str,
        major: str,
        year: int,
        email: str,
        password: Optional[str] = None,
    ) -> Student:
        self._staff_member(staff_id)
        student_id = rules.require_text(student_id, "Student ID")
        name = rules.require_text(name, "Name")
        major = rules.require_text(major, "Major")
        rules.ensure_year(year)
        email = rules.normalize_email(email)
        if password:
            rules.ensure_password_strength(password)

        with UnitOfWork(self.students, self.representatives, self.staff) as uow:
            self._ensure_unused(student_id)
            student = Student(
                user_id=student_id,
                name=name,
                email=email,
                password=password or STAFF_CREATED_STUDENT_PASSWORD,
                major=major,
                year=year,
            )
            uow.stage(self.students, student)
            uow.commit()

        logger.info("Staff %s created student %s", staff_id, student_id)
        return student

    def create_representative(
        self,
        staff_id: str,
        name: str,
        email: str,
        password: str,
        company_name: str,
        industry: str = "",
        position: str = "",
    ) -> CompanyRepresentative:
        """Like self-registration, but the account is APPROVED straight away."""
        self._staff_member(staff_id)
        name = rules.require_text(name, "Name")
        company_name = rules.require_text(company_name, "Company name")
        email = rules.normalize_email(email)
        rules.ensure_password_strength(password)

        with UnitOfWork(self.students, self.representatives, self.staff) as uow:
            self._ensure_unused(email)
            representative = CompanyRepresentative(
                user_id=email,
                name=name,
                email=email,
                password=password,
                company_name=company_name,
                industry=(industry or "").strip(),
                position=(position or "").strip(),
                status=ApprovalStatus.APPROVED,
                registration_date=self.clock(),
                approved_by_staff_id=staff_id,
            )
            uow.stage(self.representatives, representative)
            uow.commit()

        logger.info("Staff %s created representative %s for %s", staff_id, email, company_name)
        return representative
