"""
Company Representative Service

Posting and maintaining internships, and deciding on applications to them.
"""

import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from app.core.errors import InvalidInputError, ResourceNotFoundError
from app.db.repositories import (
    ApplicationRepository,
    InternshipRepository,
    RepresentativeRepository,
)
from app.models.entities import (
    ANY_MAJOR,
    Application,
    ApplicationStatus,
    CompanyRepresentative,
    InternshipLevel,
    InternshipOpportunity,
    InternshipStatus,
)
from app.services import rules
from app.services.unit_of_work import UnitOfWork
from app.utils.ids import generate_internship_id

logger = logging.getLogger(__name__)

# Fields a representative may change on an existing posting
EDITABLE_FIELDS = (
    "title",
    "description",
    "level",
    "preferred_major",
    "opening_date",
    "closing_date",
    "start_date",
    "end_date",
    "total_slots",
)


class RepresentativeService:

    def __init__(
        self,
        representatives: RepresentativeRepository,
        internships: InternshipRepository,
        applications: ApplicationRepository,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.representatives = representatives
        self.internships = internships
        self.applications = applications
        self.clock = clock

    def _representative(self, representative_id: str) -> CompanyRepresentative:
        representative = self.representatives.find_by_id(representative_id)
        if representative is None:
            raise ResourceNotFoundError("Representative", representative_id)
        return representative

    def _owned_internship(self, uow: UnitOfWork, representative_id: str, internship_id: str) -> InternshipOpportunity:
        internship = uow.get(self.internships, internship_id)
        if internship is None:
            raise ResourceNotFoundError("Internship", internship_id)
        rules.ensure_owner(internship, representative_id)
        return internship

    # ============================================================
    # INTERNSHIPS
    # ============================================================

    def create_internship(
        self,
        representative_id: str,
        *,
        title: str,
        description: str = "",
        level: InternshipLevel = InternshipLevel.BASIC,
        preferred_major: str = ANY_MAJOR,
        opening_date: Optional[date] = None,
        closing_date: Optional[date] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        total_slots: int = 1,
    ) -> InternshipOpportunity:
        """
        Post a new internship. It starts PENDING and hidden until staff approve it.

        Raises:
            UnauthorizedError: the representative is not APPROVED
            BusinessRuleError: MAX_INTERNSHIPS, INVALID_SLOTS, INVALID_DATE_ORDER
        """
        title = rules.require_text(title, "Title")
        with UnitOfWork(self.representatives, self.internships) as uow:
            representative = uow.get(self.representatives, representative_id)
            if representative is None:
                raise ResourceNotFoundError("Representative", representative_id)
            rules.ensure_approved_representative(representative)
            rules.ensure_internship_quota(self.internships.count_by_representative_id(representative_id))
            rules.ensure_internship_fields(total_slots, opening_date, closing_date, start_date, end_date)

            internship = InternshipOpportunity(
                internship_id=generate_internship_id(),
                title=title,
                description=(description or "").strip(),
                level=level,
                preferred_major=(preferred_major or "").strip() or ANY_MAJOR,
                opening_date=opening_date,
                closing_date=closing_date,
                start_date=start_date,
                end_date=end_date,
                total_slots=total_slots,
                filled_slots=0,
                status=InternshipStatus.PENDING,
                representative_id=representative_id,
                company_name=representative.company_name,
                visible=False,
            )
            representative.internship_ids.append(internship.internship_id)

            uow.stage(self.representatives, representative)
            uow.stage(self.internships, internship)
            uow.commit()

        logger.info("Representative %s created internship %s", representative_id, internship.internship_id)
        return internship

    def update_internship(
        self, representative_id: str, internship_id: str, changes: Dict[str, Any]
    ) -> InternshipOpportunity:
        """
        Edit a PENDING or REJECTED posting. A REJECTED one goes back to
        PENDING for another review.
        """
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise InvalidInputError(f"Cannot update field(s): {', '.join(sorted(unknown))}")

        with UnitOfWork(self.internships) as uow:
            internship = self._owned_internship(uow, representative_id, internship_id)
            rules.ensure_editable(internship)

            fields = {**internship.model_dump(), **changes}
            # null clears the free-text fields
            if fields["description"] is None:
                fields["description"] = ""
            if fields["preferred_major"] is None:
                fields["preferred_major"] = ANY_MAJOR
            try:
                updated = InternshipOpportunity.model_validate(fields)
            except ValidationError as exc:
                raise InvalidInputError(f"Invalid internship update: {exc.errors()[0]['msg']}") from exc

            updated.title = rules.require_text(updated.title, "Title")
            updated.preferred_major = updated.preferred_major.strip() or ANY_MAJOR
            rules.ensure_internship_fields(
                updated.total_slots,
                updated.opening_date,
                updated.closing_date,
                updated.start_date,
                updated.end_date,
                filled_slots=updated.filled_slots,
            )
            if updated.status == InternshipStatus.REJECTED:
                updated.status = InternshipStatus.PENDING

            uow.stage(self.internships, updated)
            uow.commit()

        logger.info("Representative %s updated internship %s", representative_id, internship_id)
        return updated

    def delete_internship(self, representative_id: str, internship_id: str) -> None:
        with UnitOfWork(self.representatives, self.internships) as uow:
            internship = self._owned_internship(uow, representative_id, internship_id)
            rules.ensure_internship_deletable(internship, self.clock().date())

            representative = uow.get(self.representatives, representative_id)
            if representative is not None and internship_id in representative.internship_ids:
                representative.internship_ids.remove(internship_id)
                uow.stage(self.representatives, representative)
            uow.stage_delete(self.internships, internship_id)
            uow.commit()

        logger.info("Representative %s deleted internship %s", representative_id, internship_id)

    def set_visibility(self, representative_id: str, internship_id: str, visible: bool) -> InternshipOpportunity:
        with UnitOfWork(self.internships) as uow:
            internship = self._owned_internship(uow, representative_id, internship_id)
            rules.ensure_visibility_changeable(internship)
            internship.visible = visible
            uow.stage(self.internships, internship)
            uow.commit()
        return internship

    def view_my_internships(self, representative_id: str) -> List[InternshipOpportunity]:
        self._representative(representative_id)
        return self.internships.find_by_representative_id(representative_id)

    # ============================================================
    # APPLICATIONS
    # ============================================================

    def view_applications_for_internship(self, representative_id: str, internship_id: str) -> List[Application]:
        internship = self.internships.find_by_id(internship_id)
        if internship is None:
            raise ResourceNotFoundError("Internship", internship_id)
        rules.ensure_owner(internship, representative_id)
        return self.applications.find_by_internship_id(internship_id)

    def decide_application(
        self,
        representative_id: str,
        application_id: str,
        approve: bool,
        comments: str = "",
    ) -> Application:
        """
        Mark a PENDING application SUCCESSFUL or UNSUCCESSFUL.

        Approval needs a free slot but does not consume it; the slot is
        taken when the student accepts the offer.
        """
        with UnitOfWork(self.internships, self.applications) as uow:
            application = uow.get(self.applications, application_id)
            if application is None:
                raise ResourceNotFoundError("Application", application_id)
            internship = self._owned_internship(uow, representative_id, application.internship_id)
            rules.ensure_application_decidable(application, internship, approve)

            application.status = ApplicationStatus.SUCCESSFUL if approve else ApplicationStatus.UNSUCCESSFUL
            application.status_update_date = self.clock()
            application.representative_comments = (comments or "").strip()
            uow.stage(self.applications, application)
            uow.commit()

        logger.info(
            "Representative %s marked application %s %s",
            representative_id, application_id, application.status.value,
        )
        return application
