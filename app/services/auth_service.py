"""
Authentication Service

Login, password changes and representative self-registration.

Passwords are compared as stored in the CSV files (plaintext), so login is
a straight equality check. Representatives can only log in once staff have
APPROVED them.
"""

import logging
from datetime import datetime
from typing import Callable, Optional, Union

from app.core.errors import (
    BusinessRule,
    BusinessRuleError,
    ResourceNotFoundError,
    UnauthorizedError,
)
from app.db.repositories import RepresentativeRepository, StaffRepository, StudentRepository
from app.models.entities import (
    ApprovalStatus,
    CareerCenterStaff,
    CompanyRepresentative,
    Student,
    UserRole,
)
from app.services import rules
from app.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

AnyUser = Union[Student, CompanyRepresentative, CareerCenterStaff]


class AuthService:

    def __init__(
        self,
        students: StudentRepository,
        representatives: RepresentativeRepository,
        staff: StaffRepository,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.students = students
        self.representatives = representatives
        self.staff = staff
        self.clock = clock

    def _repository_for(self, role: UserRole):
        return {
            UserRole.STUDENT: self.students,
            UserRole.COMPANY_REPRESENTATIVE: self.representatives,
            UserRole.CAREER_CENTER_STAFF: self.staff,
        }[role]

    def find_user(self, user_id: str) -> Optional[AnyUser]:
        """
        Look a user up by ID across every role.

        Representatives can also be found by email, since older files key
        them by email rather than a separate ID.
        """
        user_id = (user_id or "").strip()
        if not user_id:
            return None
        return (
            self.students.find_by_id(user_id)
            or self.representatives.find_by_id(user_id)
            or self.staff.find_by_id(user_id)
            or self.representatives.find_by_email(user_id)
        )

    def login(self, user_id: str, password: str) -> AnyUser:
        user = self.find_user(user_id)
        if user is None or user.password != password:
            logger.info("Failed login for %s", user_id)
            raise UnauthorizedError("Invalid user ID or password")

        if user.role == UserRole.COMPANY_REPRESENTATIVE and not user.is_approved:
            logger.info("Login refused for %s representative %s", user.status.value, user.user_id)
            if user.status == ApprovalStatus.REJECTED:
                raise UnauthorizedError("Your registration has been rejected")
            raise UnauthorizedError("Your account is pending approval by career center staff")

        logger.info("User %s logged in as %s", user.user_id, user.role.value)
        return user

    def change_password(self, user_id: str, old_password: str, new_password: str) -> None:
        user = self.find_user(user_id)
        if user is None:
            raise ResourceNotFoundError("User", user_id)
        if user.password != old_password:
            raise UnauthorizedError("Current password is incorrect")
        rules.ensure_password_strength(new_password)

        repository = self._repository_for(user.role)
        with UnitOfWork(repository) as uow:
            current = uow.get(repository, user.user_id)
            current.password = new_password
            uow.stage(repository, current)
            uow.commit()
        logger.info("Password changed for %s", user.user_id)

    def register_representative(
        self,
        name: str,
        email: str,
        password: str,
        company_name: str,
        industry: str = "",
        position: str = "",
    ) -> CompanyRepresentative:
        """
        Self-registration. The account starts PENDING and is keyed by email.

        Raises:
            InvalidInputError: missing name/company, bad email, weak password
            BusinessRuleError: DUPLICATE_ACCOUNT if the email is taken
        """
        name = rules.require_text(name, "Name")
        company_name = rules.require_text(company_name, "Company name")
        email = rules.normalize_email(email)
        rules.ensure_password_strength(password)

        # lock every user file so the uniqueness check holds until commit
        with UnitOfWork(self.students, self.representatives, self.staff) as uow:
            if self.find_user(email) is not None:
                raise BusinessRuleError(
                    BusinessRule.DUPLICATE_ACCOUNT,
                    f"An account with email {email} already exists",
                )
            representative = CompanyRepresentative(
                user_id=email,
                name=name,
                email=email,
                password=password,
                company_name=company_name,
                industry=(industry or "").strip(),
                position=(position or "").strip(),
                status=ApprovalStatus.PENDING,
                registration_date=self.clock(),
            )
            uow.stage(self.representatives, representative)
            uow.commit()

        logger.info("Representative %s registered for %s, awaiting approval", email, company_name)
        return representative
