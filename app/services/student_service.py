"""
Student Service

Browsing, applying, accepting a placement and the student side of the
withdrawal workflow.

Every mutating call runs inside a UnitOfWork so the rule checks and the
writes see the same state.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from app.core.errors import BusinessRuleError, ResourceNotFoundError
from app.db.repositories import (
    ApplicationRepository,
    InternshipRepository,
    StudentRepository,
    WithdrawalRepository,
)
from app.models.entities import (
    Application,
    ApplicationStatus,
    ApprovalStatus,
    InternshipLevel,
    InternshipOpportunity,
    Student,
    WithdrawalRequest,
)
from app.services import rules
from app.services.unit_of_work import UnitOfWork
from app.utils.ids import generate_application_id, generate_withdrawal_id

logger = logging.getLogger(__name__)

AUTO_WITHDRAW_COMMENT = "Automatically withdrawn after accepting another placement."


class StudentService:

    def __init__(
        self,
        students: StudentRepository,
        internships: InternshipRepository,
        applications: ApplicationRepository,
        withdrawals: WithdrawalRepository,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.students = students
        self.internships = internships
        self.applications = applications
        self.withdrawals = withdrawals
        self.clock = clock

    # -------------------------
    # Lookups
    # -------------------------
    def _student(self, student_id: str) -> Student:
        student = self.students.find_by_id(student_id)
        if student is None:
            raise ResourceNotFoundError("Student", student_id)
        return student

    @staticmethod
    def _require(entity, name: str, entity_id: str):
        if entity is None:
            raise ResourceNotFoundError(name, entity_id)
        return entity

    # ============================================================
    # BROWSING
    # ============================================================

    def view_available_internships(
        self,
        student_id: str,
        level: Optional[InternshipLevel] = None,
    ) -> List[InternshipOpportunity]:
        """
        Visible internships this student is eligible for, soonest closing first.

        Eligibility follows the apply rules: year 1-2 see BASIC only and the
        preferred major must match unless it is "Any".
        """
        student = self._student(student_id)
        today = self.clock().date()

        available = []
        for internship in self.internships.find_visible_by_major_and_level(today, student.major, level):
            if not internship.has_available_slots:
                continue
            try:
                rules.ensure_eligible(student, internship)
            except BusinessRuleError:
                continue
            available.append(internship)

        available.sort(key=lambda i: (i.closing_date or today, i.title))
        return available

    def view_applications(self, student_id: str) -> List[Application]:
        self._student(student_id)
        return sorted(
            self.applications.find_by_student_id(student_id),
            key=lambda a: a.submission_date or datetime.min,
            reverse=True,
        )

    def active_application_count(self, student_id: str) -> int:
        return self.applications.count_active_by_student_id(student_id)

    # ============================================================
    # APPLYING
    # ============================================================

    def apply(self, student_id: str, internship_id: str) -> Application:
        with UnitOfWork(self.students, self.internships, self.applications) as uow:
            student = self._require(uow.get(self.students, student_id), "Student", student_id)
            internship = self._require(uow.get(self.internships, internship_id), "Internship", internship_id)
            now = self.clock()

            rules.ensure_can_apply(
                student,
                internship,
                self.applications.find_by_student_id(student_id),
                now.date(),
            )

            application = Application(
                application_id=generate_application_id(),
                student_id=student_id,
                internship_id=internship_id,
                status=ApplicationStatus.PENDING,
                submission_date=now,
                status_update_date=now,
            )
            student.application_ids.append(application.application_id)

            uow.stage(self.students, student)
            uow.stage(self.applications, application)
            uow.commit()

        logger.info("Student %s applied to %s (%s)", student_id, internship_id, application.application_id)
        return application

    def accept_placement(self, student_id: str, application_id: str) -> Application:
        """
        Accept a SUCCESSFUL offer.

        In the same operation: the internship consumes a slot (FILLED at
        capacity), every other active application of the student becomes
        WITHDRAWN, and pending withdrawal requests on those are cancelled.
        """
        with UnitOfWork(self.students, self.internships, self.applications, self.withdrawals) as uow:
            student = self._require(uow.get(self.students, student_id), "Student", student_id)
            application = self._require(uow.get(self.applications, application_id), "Application", application_id)
            rules.ensure_can_accept(
                student,
                application,
                self.withdrawals.find_by_application_id(application_id),
            )
            internship = self._require(
                uow.get(self.internships, application.internship_id), "Internship", application.internship_id
            )
            now = self.clock()

            rules.fill_slot(internship)

            application.status = ApplicationStatus.ACCEPTED
            application.placement_accepted = True
            application.placement_acceptance_date = now
            application.status_update_date = now
            student.accepted_placement_id = application_id

            withdrawn = []
            for other in self.applications.find_by_student_id(student_id):
                if other.application_id == application_id or not other.is_active:
                    continue
                other.status = ApplicationStatus.WITHDRAWN
                other.status_update_date = now
                uow.stage(self.applications, other)
                withdrawn.append(other.application_id)

                for request in self.withdrawals.find_by_application_id(other.application_id):
                    if request.is_pending:
                        request.status = ApprovalStatus.CANCELLED
                        request.processed_by = student_id
                        request.processed_date = now
                        request.staff_comments = AUTO_WITHDRAW_COMMENT
                        uow.stage(self.withdrawals, request)

            uow.stage(self.students, student)
            uow.stage(self.internships, internship)
            uow.stage(self.applications, application)
            uow.commit()

        logger.info(
            "Student %s accepted %s for %s (%d/%d filled); auto-withdrew %s",
            student_id, application_id, internship.internship_id,
            internship.filled_slots, internship.total_slots, withdrawn or "nothing",
        )
        return application

    # ============================================================
    # WITHDRAWALS
    # ============================================================

    def request_withdrawal(self, student_id: str, application_id: str, reason: str) -> WithdrawalRequest:
        reason = rules.require_text(reason, "Reason")
        with UnitOfWork(self.applications, self.withdrawals) as uow:
            application = self._require(uow.get(self.applications, application_id), "Application", application_id)
            rules.ensure_can_request_withdrawal(
                application,
                student_id,
                self.withdrawals.find_by_application_id(application_id),
            )
            request = WithdrawalRequest(
                withdrawal_id=generate_withdrawal_id(),
                application_id=application_id,
                student_id=student_id,
                internship_id=application.internship_id,
                reason=reason,
                status=ApprovalStatus.PENDING,
                request_date=self.clock(),
            )
            uow.stage(self.withdrawals, request)
            uow.commit()

        logger.info("Student %s requested withdrawal %s for %s", student_id, request.withdrawal_id, application_id)
        return request

    def _own_withdrawal(self, uow: UnitOfWork, student_id: str, withdrawal_id: str) -> WithdrawalRequest:
        request = self._require(uow.get(self.withdrawals, withdrawal_id), "Withdrawal request", withdrawal_id)
        rules.ensure_withdrawal_owner(request, student_id)
        return request

    def update_withdrawal_request(self, student_id: str, withdrawal_id: str, reason: str) -> WithdrawalRequest:
        reason = rules.require_text(reason, "Reason")
        with UnitOfWork(self.withdrawals) as uow:
            request = self._own_withdrawal(uow, student_id, withdrawal_id)
            rules.ensure_pending(request.status, "Withdrawal request")
            request.reason = reason
            request.request_date = self.clock()
            uow.stage(self.withdrawals, request)
            uow.commit()
        return request

    def cancel_withdrawal_request(self, student_id: str, withdrawal_id: str, reason: str = "") -> WithdrawalRequest:
        with UnitOfWork(self.withdrawals) as uow:
            request = self._own_withdrawal(uow, student_id, withdrawal_id)
            rules.ensure_pending(request.status, "Withdrawal request")
            request.status = ApprovalStatus.CANCELLED
            request.processed_by = student_id
            request.processed_date = self.clock()
            request.staff_comments = f"Cancelled by student. Reason: {(reason or '').strip() or 'none given'}"
            uow.stage(self.withdrawals, request)
            uow.commit()

        logger.info("Student %s cancelled withdrawal %s", student_id, withdrawal_id)
        return request

    def delete_withdrawal_request(self, student_id: str, withdrawal_id: str) -> None:
        with UnitOfWork(self.withdrawals) as uow:
            request = self._own_withdrawal(uow, student_id, withdrawal_id)
            rules.ensure_withdrawal_deletable(request)
            uow.stage_delete(self.withdrawals, withdrawal_id)
            uow.commit()

    def view_withdrawal_requests(self, student_id: str) -> List[WithdrawalRequest]:
        return sorted(
            self.withdrawals.find_by_student_id(student_id),
            key=lambda w: w.request_date or datetime.min,
            reverse=True,
        )
