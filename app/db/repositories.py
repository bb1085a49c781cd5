"""
CSV repositories - one per entity type.

Each class fixes the file's column set and maps rows to entities and back.
Loading is lenient: blank or missing cells fall back to defaults, and an
unrecognised status falls back to PENDING with a warning in the log.
"""

import logging
from datetime import date
from enum import Enum
from typing import Dict, List, Mapping, Optional, Type, TypeVar

from app.db.csv_codec import field, join_ids, parse_bool, parse_int, split_ids
from app.db.repository import CsvRepository
from app.models.entities import (
    ANY_MAJOR,
    DEFAULT_PASSWORD,
    Application,
    ApplicationStatus,
    ApprovalStatus,
    CareerCenterStaff,
    CompanyRepresentative,
    InternshipLevel,
    InternshipOpportunity,
    InternshipStatus,
    Student,
    WithdrawalRequest,
)
from app.utils.dates import format_date, format_datetime, parse_date, parse_datetime

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


def parse_enum(
    enum_cls: Type[E],
    raw: str,
    default: E,
    *,
    context: str,
    aliases: Optional[Mapping[str, E]] = None,
) -> E:
    """
    Parse a status/level cell case-insensitively.

    Blank cells silently take the default. Anything unrecognised also takes
    the default but is logged, so bad data is visible rather than hidden.
    """
    text = (raw or "").strip()
    if not text:
        return default
    if aliases and text.lower() in aliases:
        return aliases[text.lower()]
    try:
        return enum_cls(text.upper())
    except ValueError:
        logger.warning("%s: unknown %s %r, defaulting to %s", context, enum_cls.__name__, raw, default.value)
        return default


def _lenient_date(raw: str, context: str) -> Optional[date]:
    try:
        return parse_date(raw)
    except ValueError:
        logger.warning("%s: unparseable date %r, leaving it empty", context, raw)
        return None


def _lenient_datetime(raw: str, context: str):
    try:
        return parse_datetime(raw)
    except ValueError:
        logger.warning("%s: unparseable date-time %r, leaving it empty", context, raw)
        return None


# ============================================================
# STUDENTS
# ============================================================

class StudentRepository(CsvRepository[Student]):
    entity_name = "students"
    headers = (
        "StudentID", "Name", "Password", "Major", "Year", "Email",
        "ApplicationIDs", "AcceptedPlacementID", "HasAcceptedPlacement",
    )

    def entity_id(self, entity: Student) -> str:
        return entity.user_id

    def from_record(self, record: Dict[str, str]) -> Student:
        student_id = field(record, "StudentID", "userId")
        accepted = field(record, "AcceptedPlacementID", "acceptedPlacementId") or None
        # HasAcceptedPlacement=false wins over a stale AcceptedPlacementID
        if not parse_bool(field(record, "HasAcceptedPlacement", "hasAcceptedPlacement"), default=bool(accepted)):
            accepted = None
        return Student(
            user_id=student_id,
            name=field(record, "Name", "name"),
            password=field(record, "Password", "password", default=DEFAULT_PASSWORD),
            major=field(record, "Major", "major"),
            year=parse_int(field(record, "Year", "year", default="1"), 1),
            email=field(record, "Email", "email"),
            application_ids=split_ids(field(record, "ApplicationIDs", "applicationIds")),
            accepted_placement_id=accepted,
        )

    def to_row(self, s: Student) -> List[str]:
        return [
            s.user_id, s.name, s.password, s.major, str(s.year), s.email,
            join_ids(s.application_ids), s.accepted_placement_id or "",
            str(s.has_accepted_placement).lower(),
        ]

    def find_by_major(self, major: str) -> List[Student]:
        return self._filter(lambda s: s.major.lower() == major.lower())

    def find_by_year(self, year: int) -> List[Student]:
        return self._filter(lambda s: s.year == year)


# ============================================================
# COMPANY REPRESENTATIVES
# ============================================================

_REPRESENTATIVE_STATUS_ALIASES = {"active": ApprovalStatus.APPROVED}


class RepresentativeRepository(CsvRepository[CompanyRepresentative]):
    entity_name = "representatives"
    headers = (
        "CompanyRepID", "Name", "CompanyName", "Industry", "Position", "Email",
        "Password", "Status", "OpportunityIDs", "RegistrationDate", "ApprovedByStaffID",
    )

    def entity_id(self, entity: CompanyRepresentative) -> str:
        return entity.user_id

    def from_record(self, record: Dict[str, str]) -> CompanyRepresentative:
        email = field(record, "Email")
        rep_id = field(record, "CompanyRepID", default=email)
        context = f"representative {rep_id}"
        return CompanyRepresentative(
            user_id=rep_id,
            name=field(record, "Name"),
            email=email,
            password=field(record, "Password", default=DEFAULT_PASSWORD),
            company_name=field(record, "CompanyName"),
            industry=field(record, "Industry"),
            position=field(record, "Position"),
            status=parse_enum(
                ApprovalStatus, field(record, "Status"), ApprovalStatus.PENDING,
                context=context, aliases=_REPRESENTATIVE_STATUS_ALIASES,
            ),
            internship_ids=split_ids(field(record, "OpportunityIDs")),
            registration_date=_lenient_datetime(field(record, "RegistrationDate"), context),
            approved_by_staff_id=field(record, "ApprovedByStaffID") or None,
        )

    def to_row(self, r: CompanyRepresentative) -> List[str]:
        return [
            r.user_id, r.name, r.company_name, r.industry, r.position, r.email,
            r.password, r.status.value, join_ids(r.internship_ids),
            format_datetime(r.registration_date), r.approved_by_staff_id or "",
        ]

    def find_by_status(self, status: ApprovalStatus) -> List[CompanyRepresentative]:
        return self._filter(lambda r: r.status == status)

    def find_by_company_name(self, company_name: str) -> List[CompanyRepresentative]:
        return self._filter(lambda r: r.company_name.lower() == company_name.lower())

    def find_by_email(self, email: str) -> Optional[CompanyRepresentative]:
        matches = self._filter(lambda r: r.email.lower() == email.lower())
        return matches[0] if matches else None


# ============================================================
# CAREER CENTER STAFF
# ============================================================

class StaffRepository(CsvRepository[CareerCenterStaff]):
    entity_name = "staff"
    headers = ("StaffID", "Name", "Password", "Department", "Email")

    def entity_id(self, entity: CareerCenterStaff) -> str:
        return entity.user_id

    def from_record(self, record: Dict[str, str]) -> CareerCenterStaff:
        return CareerCenterStaff(
            user_id=field(record, "StaffID", "userId"),
            name=field(record, "Name"),
            password=field(record, "Password", default=DEFAULT_PASSWORD),
            department=field(record, "Department", "Role"),
            email=field(record, "Email"),
        )

    def to_row(self, s: CareerCenterStaff) -> List[str]:
        return [s.user_id, s.name, s.password, s.department, s.email]

    def find_by_email(self, email: str) -> Optional[CareerCenterStaff]:
        matches = self._filter(lambda s: s.email.lower() == email.lower())
        return matches[0] if matches else None


# ============================================================
# INTERNSHIP OPPORTUNITIES
# ============================================================

class InternshipRepository(CsvRepository[InternshipOpportunity]):
    entity_name = "internships"
    headers = (
        "InternshipID", "Title", "Description", "Level", "PreferredMajor",
        "OpeningDate", "ClosingDate", "StartDate", "EndDate", "Status",
        "CompanyName", "RepresentativeID", "Slots", "FilledSlots", "Visibility",
    )

    def entity_id(self, entity: InternshipOpportunity) -> str:
        return entity.internship_id

    def from_record(self, record: Dict[str, str]) -> InternshipOpportunity:
        internship_id = field(record, "InternshipID")
        context = f"internship {internship_id}"
        return InternshipOpportunity(
            internship_id=internship_id,
            title=field(record, "Title"),
            description=field(record, "Description"),
            level=parse_enum(InternshipLevel, field(record, "Level"), InternshipLevel.BASIC, context=context),
            preferred_major=field(record, "PreferredMajor", default=ANY_MAJOR),
            opening_date=_lenient_date(field(record, "OpeningDate"), context),
            closing_date=_lenient_date(field(record, "ClosingDate"), context),
            start_date=_lenient_date(field(record, "StartDate"), context),
            end_date=_lenient_date(field(record, "EndDate"), context),
            status=parse_enum(InternshipStatus, field(record, "Status"), InternshipStatus.PENDING, context=context),
            company_name=field(record, "CompanyName"),
            representative_id=field(record, "RepresentativeID", "CreatedBy", "CompanyRepEmail"),
            total_slots=parse_int(field(record, "Slots", default="1"), 1),
            filled_slots=parse_int(field(record, "FilledSlots", default="0"), 0),
            visible=parse_bool(field(record, "Visibility")),
        )

    def to_row(self, i: InternshipOpportunity) -> List[str]:
        return [
            i.internship_id, i.title, i.description, i.level.value, i.preferred_major,
            format_date(i.opening_date), format_date(i.closing_date),
            format_date(i.start_date), format_date(i.end_date), i.status.value,
            i.company_name, i.representative_id, str(i.total_slots),
            str(i.filled_slots), str(i.visible).lower(),
        ]

    def find_by_status(self, status: InternshipStatus) -> List[InternshipOpportunity]:
        return self._filter(lambda i: i.status == status)

    def find_by_representative_id(self, representative_id: str) -> List[InternshipOpportunity]:
        return self._filter(lambda i: i.representative_id == representative_id)

    def count_by_representative_id(self, representative_id: str) -> int:
        with self.read_locked():
            return sum(1 for i in self._cache.values() if i.representative_id == representative_id)

    def find_all_visible(self, today: date) -> List[InternshipOpportunity]:
        return self._filter(lambda i: i.is_visible_on(today))

    def find_visible_by_major_and_level(
        self, today: date, major: Optional[str] = None, level: Optional[InternshipLevel] = None
    ) -> List[InternshipOpportunity]:
        return self._filter(
            lambda i: i.is_visible_on(today)
            and (not major or major.lower() == ANY_MAJOR.lower() or i.accepts_major(major))
            and (level is None or i.level == level)
        )

    def find_by_company_name(self, company_name: str) -> List[InternshipOpportunity]:
        return self._filter(lambda i: i.company_name.lower() == company_name.lower())


# ============================================================
# APPLICATIONS
# ============================================================

_APPLICATION_STATUS_ALIASES = {"rejected": ApplicationStatus.UNSUCCESSFUL}


class ApplicationRepository(CsvRepository[Application]):
    entity_name = "applications"
    headers = (
        "ApplicationID", "StudentID", "InternshipID", "Status", "SubmissionDate",
        "StatusUpdateDate", "PlacementAccepted", "PlacementAcceptanceDate",
        "RepresentativeComments",
    )

    def entity_id(self, entity: Application) -> str:
        return entity.application_id

    def from_record(self, record: Dict[str, str]) -> Application:
        application_id = field(record, "ApplicationID")
        context = f"application {application_id}"
        return Application(
            application_id=application_id,
            student_id=field(record, "StudentID"),
            internship_id=field(record, "InternshipID"),
            status=parse_enum(
                ApplicationStatus, field(record, "Status"), ApplicationStatus.PENDING,
                context=context, aliases=_APPLICATION_STATUS_ALIASES,
            ),
            submission_date=_lenient_datetime(field(record, "SubmissionDate", "ApplicationDate"), context),
            status_update_date=_lenient_datetime(field(record, "StatusUpdateDate"), context),
            placement_accepted=parse_bool(field(record, "PlacementAccepted")),
            placement_acceptance_date=_lenient_datetime(field(record, "PlacementAcceptanceDate"), context),
            representative_comments=field(record, "RepresentativeComments"),
        )

    def to_row(self, a: Application) -> List[str]:
        return [
            a.application_id, a.student_id, a.internship_id, a.status.value,
            format_datetime(a.submission_date), format_datetime(a.status_update_date),
            str(a.placement_accepted).lower(), format_datetime(a.placement_acceptance_date),
            a.representative_comments,
        ]

    def find_by_student_id(self, student_id: str) -> List[Application]:
        return self._filter(lambda a: a.student_id == student_id)

    def find_by_internship_id(self, internship_id: str) -> List[Application]:
        return self._filter(lambda a: a.internship_id == internship_id)

    def find_by_status(self, status: ApplicationStatus) -> List[Application]:
        return self._filter(lambda a: a.status == status)

    def count_active_by_student_id(self, student_id: str) -> int:
        with self.read_locked():
            return sum(1 for a in self._cache.values() if a.student_id == student_id and a.is_active)

    def find_accepted_placements(self) -> List[Application]:
        return self._filter(lambda a: a.placement_accepted)


# ============================================================
# WITHDRAWAL REQUESTS
# ============================================================

class WithdrawalRepository(CsvRepository[WithdrawalRequest]):
    entity_name = "withdrawals"
    headers = (
        "WithdrawalID", "ApplicationID", "StudentID", "InternshipID", "Reason",
        "Status", "RequestDate", "ProcessedBy", "ProcessedDate", "StaffComments",
    )

    def entity_id(self, entity: WithdrawalRequest) -> str:
        return entity.withdrawal_id

    def from_record(self, record: Dict[str, str]) -> WithdrawalRequest:
        withdrawal_id = field(record, "WithdrawalID")
        context = f"withdrawal {withdrawal_id}"
        return WithdrawalRequest(
            withdrawal_id=withdrawal_id,
            application_id=field(record, "ApplicationID"),
            student_id=field(record, "StudentID"),
            internship_id=field(record, "InternshipID"),
            reason=field(record, "Reason"),
            status=parse_enum(ApprovalStatus, field(record, "Status"), ApprovalStatus.PENDING, context=context),
            request_date=_lenient_datetime(field(record, "RequestDate"), context),
            processed_by=field(record, "ProcessedBy"),
            processed_date=_lenient_datetime(field(record, "ProcessedDate"), context),
            staff_comments=field(record, "StaffComments"),
        )

    def to_row(self, w: WithdrawalRequest) -> List[str]:
        return [
            w.withdrawal_id, w.application_id, w.student_id, w.internship_id, w.reason,
            w.status.value, format_datetime(w.request_date), w.processed_by,
            format_datetime(w.processed_date), w.staff_comments,
        ]

    def find_by_student_id(self, student_id: str) -> List[WithdrawalRequest]:
        return self._filter(lambda w: w.student_id == student_id)

    def find_by_application_id(self, application_id: str) -> List[WithdrawalRequest]:
        return self._filter(lambda w: w.application_id == application_id)

    def find_pending(self) -> List[WithdrawalRequest]:
        return self._filter(lambda w: w.is_pending)
