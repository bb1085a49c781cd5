"""
Shared fixtures.

Every test gets its own temp data directory and a fixed clock, so dates in
the seeded internships are always inside/outside their windows the same way.
"""

from datetime import date, datetime, timedelta

import pytest

from app.core.config import Settings
from app.models.entities import (
    ApprovalStatus,
    CareerCenterStaff,
    CompanyRepresentative,
    InternshipLevel,
    InternshipOpportunity,
    InternshipStatus,
    Student,
)
from app.services.container import build_container

FIXED_NOW = datetime(2025, 3, 10, 9, 30, 0)
TODAY: date = FIXED_NOW.date()

REP_ID = "rep@acme.com"
PENDING_REP_ID = "hr@globex.com"
STAFF_ID = "STAFF001"


@pytest.fixture
def settings(tmp_path):
    return Settings(data_dir=tmp_path / "data", jwt_secret_key="test-secret", _env_file=None)


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def container(settings, clock):
    return build_container(settings, clock=clock)


@pytest.fixture
def repos(container):
    return container.repositories


@pytest.fixture
def make_internship():
    """Factory for an APPROVED, visible internship open on TODAY."""

    def _make(internship_id, **overrides):
        values = dict(
            internship_id=internship_id,
            title=f"Internship {internship_id}",
            description="Work on real projects",
            level=InternshipLevel.BASIC,
            preferred_major="Any",
            opening_date=TODAY - timedelta(days=10),
            closing_date=TODAY + timedelta(days=10),
            start_date=TODAY + timedelta(days=30),
            end_date=TODAY + timedelta(days=120),
            total_slots=1,
            filled_slots=0,
            status=InternshipStatus.APPROVED,
            representative_id=REP_ID,
            company_name="Acme",
            visible=True,
        )
        values.update(overrides)
        return InternshipOpportunity(**values)

    return _make


@pytest.fixture
def seeded(container, make_internship):
    """
    A small world:

    - students U001 (year 2, CS), U002 (year 1, CS), U003 (year 3, EEE)
    - approved rep at Acme, pending rep at Globex, one staff member
    - INT-BASIC (1 slot, any major), INT-INTER (2 slots, CS only),
      INT-OTHER (BASIC, 3 slots), INT-EXTRA (BASIC, 3 slots)
    """
    repos = container.repositories
    repos.students.save(Student(user_id="U001", name="Alice Tan", email="alice@uni.edu", major="CS", year=2))
    repos.students.save(Student(user_id="U002", name="Bob Lim", email="bob@uni.edu", major="CS", year=1))
    repos.students.save(Student(user_id="U003", name="Cara Ng", email="cara@uni.edu", major="EEE", year=3))
    repos.representatives.save(CompanyRepresentative(
        user_id=REP_ID, name="Rita Rep", email=REP_ID, password="secret1",
        company_name="Acme", industry="Software", position="HR",
        status=ApprovalStatus.APPROVED,
    ))
    repos.representatives.save(CompanyRepresentative(
        user_id=PENDING_REP_ID, name="Gary Globex", email=PENDING_REP_ID, password="secret2",
        company_name="Globex", status=ApprovalStatus.PENDING,
    ))
    repos.staff.save(CareerCenterStaff(user_id=STAFF_ID, name="Sam Staff", email="sam@uni.edu", department="CCDS"))

    for internship in (
        make_internship("INT-BASIC"),
        make_internship("INT-INTER", level=InternshipLevel.INTERMEDIATE, preferred_major="CS", total_slots=2),
        make_internship("INT-OTHER", total_slots=3),
        make_internship("INT-EXTRA", total_slots=3),
    ):
        repos.internships.save(internship)

    rep = repos.representatives.find_by_id(REP_ID)
    rep.internship_ids = ["INT-BASIC", "INT-INTER", "INT-OTHER", "INT-EXTRA"]
    repos.representatives.save(rep)
    return container
