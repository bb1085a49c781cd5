"""
Service wiring.

build_container() constructs one repository per entity type, loads each
from its CSV file and hands them to the services. The API keeps the
container on app.state; tests build their own against a temp directory.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from app.core.config import Settings, get_settings
from app.db.repositories import (
    ApplicationRepository,
    InternshipRepository,
    RepresentativeRepository,
    StaffRepository,
    StudentRepository,
    WithdrawalRepository,
)
from app.services.auth_service import AuthService
from app.services.representative_service import RepresentativeService
from app.services.staff_service import StaffService
from app.services.student_service import StudentService

logger = logging.getLogger(__name__)


@dataclass
class Repositories:
    students: StudentRepository
    representatives: RepresentativeRepository
    staff: StaffRepository
    internships: InternshipRepository
    applications: ApplicationRepository
    withdrawals: WithdrawalRepository

    def all(self):
        return (
            self.students,
            self.representatives,
            self.staff,
            self.internships,
            self.applications,
            self.withdrawals,
        )


@dataclass
class ServiceContainer:
    settings: Settings
    repositories: Repositories
    auth: AuthService
    students: StudentService
    representatives: RepresentativeService
    staff: StaffService


def build_repositories(settings: Settings) -> Repositories:
    return Repositories(
        students=StudentRepository(settings.csv_path(settings.students_file)),
        representatives=RepresentativeRepository(settings.csv_path(settings.representatives_file)),
        staff=StaffRepository(settings.csv_path(settings.staff_file)),
        internships=InternshipRepository(settings.csv_path(settings.internships_file)),
        applications=ApplicationRepository(settings.csv_path(settings.applications_file)),
        withdrawals=WithdrawalRepository(settings.csv_path(settings.withdrawals_file)),
    )


def build_container(
    settings: Optional[Settings] = None,
    clock: Callable[[], datetime] = datetime.now,
) -> ServiceContainer:
    """Create, load and wire everything for one process."""
    settings = settings or get_settings()
    repos = build_repositories(settings)
    for repository in repos.all():
        repository.load()
    logger.info("Data directory %s loaded", settings.data_dir)

    return ServiceContainer(
        settings=settings,
        repositories=repos,
        auth=AuthService(repos.students, repos.representatives, repos.staff, clock=clock),
        students=StudentService(
            repos.students, repos.internships, repos.applications, repos.withdrawals, clock=clock
        ),
        representatives=RepresentativeService(
            repos.representatives, repos.internships, repos.applications, clock=clock
        ),
        staff=StaffService(
            repos.students,
            repos.representatives,
            repos.staff,
            repos.internships,
            repos.applications,
            repos.withdrawals,
            clock=clock,
        ),
    )
