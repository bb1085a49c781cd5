"""
Student Routes

GET /students/internships - Visible internships I am eligible for
POST /students/applications - Apply to an internship
GET /students/applications - Get my applications
GET /students/applications/active-count - Count toward the 3-application cap
POST /students/applications/{application_id}/accept - Accept a placement offer
POST /students/withdrawals - Request withdrawal of an application
GET /students/withdrawals - Get my withdrawal requests
PUT /students/withdrawals/{withdrawal_id} - Change the reason of a pending request
POST /students/withdrawals/{withdrawal_id}/cancel - Cancel a pending request
DELETE /students/withdrawals/{withdrawal_id} - Delete a pending/rejected request
"""

from fastapi import APIRouter, Depends
from typing import List, Optional

from app.core.auth import get_current_student, get_services
from app.models.entities import InternshipLevel, Student
from app.services.container import ServiceContainer
from app.schemas.schemas import (
    ActiveApplicationsResponse, ApplicationCreate, ApplicationResponse, InternshipResponse,
    MessageResponse, WithdrawalCancel, WithdrawalCreate, WithdrawalResponse, WithdrawalUpdate
)

router = APIRouter(prefix="/students", tags=["Students"])


@router.get("/internships", response_model=List[InternshipResponse])
def list_internships(
    level: Optional[InternshipLevel] = None,
    student: Student = Depends(get_current_student),
    services: ServiceContainer = Depends(get_services),
):
    """Internships open to the current student, optionally filtered by level."""
    internships = services.students.view_available_internships(student.user_id, level=level)
    return [InternshipResponse.from_entity(i) for i in internships]


@router.post("/applications", response_model=ApplicationResponse, status_code=201)
def apply(
    data: ApplicationCreate,
    student: Student = Depends(get_current_student),
    services: ServiceContainer = Depends(get_services),
):
    return services.students.apply(student.user_id, data.internship_id)


@router.get("/applications", response_model=List[ApplicationResponse])
def my_applications(
    student: Student = Depends(get_current_student),
    services: ServiceContainer = Depends(get_services),
):
    """All my applications, newest first."""
    return services.students.view_applications(student.user_id)


@router.get("/applications/active-count", response_model=ActiveApplicationsResponse)
def active_count(
    student: Student = Depends(get_current_student),
    services: ServiceContainer = Depends(get_services),
):
    return ActiveApplicationsResponse(
        active_applications=services.students.active_application_count(student.user_id)
    )


@router.post("/applications/{application_id}/accept", response_model=ApplicationResponse)
def accept_placement(
    application_id: str,
    student: Student = Depends(get_current_student),
    services: ServiceContainer = Depends(get_services),
):
    """Accept a SUCCESSFUL offer. Other active applications are withdrawn."""
    return services.students.accept_placement(student.user_id, application_id)


@router.post("/withdrawals", response_model=WithdrawalResponse, status_code=201)
def request_withdrawal(
    data: WithdrawalCreate,
    student: Student = Depends(get_current_student),
    services: ServiceContainer = Depends(get_services),
):
    return services.students.request_withdrawal(student.user_id, data.application_id, data.reason)


@router.get("/withdrawals", response_model=List[WithdrawalResponse])
def my_withdrawals(
    student: Student = Depends(get_current_student),
    services: ServiceContainer = Depends(get_services),
):
    return services.students.view_withdrawal_requests(student.user_id)


@router.put("/withdrawals/{withdrawal_id}", response_model=WithdrawalResponse)
def update_withdrawal(
    withdrawal_id: str,
    data: WithdrawalUpdate,
    student: Student = Depends(get_current_student),
    services: ServiceContainer = Depends(get_services),
):
    return services.students.update_withdrawal_request(student.user_id, withdrawal_id, data.reason)


@router.post("/withdrawals/{withdrawal_id}/cancel", response_model=WithdrawalResponse)
def cancel_withdrawal(
    withdrawal_id: str,
    data: WithdrawalCancel,
    student: Student = Depends(get_current_student),
    services: ServiceContainer = Depends(get_services),
):
    return services.students.cancel_withdrawal_request(student.user_id, withdrawal_id, data.reason or "")


@router.delete("/withdrawals/{withdrawal_id}", response_model=MessageResponse)
def delete_withdrawal(
    withdrawal_id: str,
    student: Student = Depends(get_current_student),
    services: ServiceContainer = Depends(get_services),
):
    services.students.delete_withdrawal_request(student.user_id, withdrawal_id)
    return MessageResponse(message="Withdrawal request deleted")
