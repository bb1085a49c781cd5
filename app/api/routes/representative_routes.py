"""
Company Representative Routes

POST /representatives/internships - Post a new internship (goes to staff for approval)
GET /representatives/internships - Get my internships
PUT /representatives/internships/{internship_id} - Edit a PENDING/REJECTED internship
DELETE /representatives/internships/{internship_id} - Delete an internship
PATCH /representatives/internships/{internship_id}/visibility - Show/hide an approved internship
GET /representatives/internships/{internship_id}/applications - Applications received
POST /representatives/applications/{application_id}/decision - Mark SUCCESSFUL/UNSUCCESSFUL
"""

from fastapi import APIRouter, Depends
from typing import List

from app.core.auth import get_current_representative, get_services
from app.models.entities import CompanyRepresentative
from app.services.container import ServiceContainer
from app.schemas.schemas import (
    ApplicationResponse, DecisionRequest, InternshipCreate, InternshipResponse,
    InternshipUpdate, MessageResponse, VisibilityUpdate
)

router = APIRouter(prefix="/representatives", tags=["Company Representatives"])


@router.post("/internships", response_model=InternshipResponse, status_code=201)
def create_internship(
    data: InternshipCreate,
    rep: CompanyRepresentative = Depends(get_current_representative),
    services: ServiceContainer = Depends(get_services),
):
    internship = services.representatives.create_internship(rep.user_id, **data.model_dump())
    return InternshipResponse.from_entity(internship)


@router.get("/internships", response_model=List[InternshipResponse])
def my_internships(
    rep: CompanyRepresentative = Depends(get_current_representative),
    services: ServiceContainer = Depends(get_services),
):
    return [InternshipResponse.from_entity(i) for i in services.representatives.view_my_internships(rep.user_id)]


@router.put("/internships/{internship_id}", response_model=InternshipResponse)
def update_internship(
    internship_id: str,
    data: InternshipUpdate,
    rep: CompanyRepresentative = Depends(get_current_representative),
    services: ServiceContainer = Depends(get_services),
):
    """Only the fields sent are changed. A REJECTED internship goes back to PENDING."""
    internship = services.representatives.update_internship(
        rep.user_id, internship_id, data.model_dump(exclude_unset=True)
    )
    return InternshipResponse.from_entity(internship)


@router.delete("/internships/{internship_id}", response_model=MessageResponse)
def delete_internship(
    internship_id: str,
    rep: CompanyRepresentative = Depends(get_current_representative),
    services: ServiceContainer = Depends(get_services),
):
    services.representatives.delete_internship(rep.user_id, internship_id)
    return MessageResponse(message="Internship deleted")


@router.patch("/internships/{internship_id}/visibility", response_model=InternshipResponse)
def set_visibility(
    internship_id: str,
    data: VisibilityUpdate,
    rep: CompanyRepresentative = Depends(get_current_representative),
    services: ServiceContainer = Depends(get_services),
):
    internship = services.representatives.set_visibility(rep.user_id, internship_id, data.visible)
    return InternshipResponse.from_entity(internship)


@router.get("/internships/{internship_id}/applications", response_model=List[ApplicationResponse])
def internship_applications(
    internship_id: str,
    rep: CompanyRepresentative = Depends(get_current_representative),
    services: ServiceContainer = Depends(get_services),
):
    return services.representatives.view_applications_for_internship(rep.user_id, internship_id)


@router.post("/applications/{application_id}/decision", response_model=ApplicationResponse)
def decide_application(
    application_id: str,
    data: DecisionRequest,
    rep: CompanyRepresentative = Depends(get_current_representative),
    services: ServiceContainer = Depends(get_services),
):
    return services.representatives.decide_application(
        rep.user_id, application_id, data.approve, data.comments or ""
    )
