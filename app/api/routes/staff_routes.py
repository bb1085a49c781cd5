"""
Career Center Staff Routes

GET /staff/representatives/pending - Representatives awaiting approval
POST /staff/representatives/{representative_id}/decision - Approve/reject a representative
GET /staff/internships/pending - Internships awaiting approval
POST /staff/internships/{internship_id}/decision - Approve/reject an internship
GET /staff/withdrawals/pending - Withdrawal requests awaiting a decision
POST /staff/withdrawals/{withdrawal_id}/decision - Approve/reject a withdrawal
POST /staff/students - Create a student account
POST /staff/representatives - Create an (already approved) representative account
GET /staff/companies - Companies with approved representatives
"""

from fastapi import APIRouter, Depends
from typing import List

from app.core.auth import get_current_staff, get_services
from app.models.entities import CareerCenterStaff
from app.services.container import ServiceContainer
from app.schemas.schemas import (
    DecisionRequest, InternshipResponse, RepresentativeCreate, RepresentativeResponse,
    StudentCreate, UserResponse, WithdrawalResponse
)

router = APIRouter(prefix="/staff", tags=["Career Center Staff"])


# ============================================================
# APPROVAL QUEUES
# ============================================================

@router.get("/representatives/pending", response_model=List[RepresentativeResponse])
def pending_representatives(
    staff: CareerCenterStaff = Depends(get_current_staff),
    services: ServiceContainer = Depends(get_services),
):
    return services.staff.pending_representatives()


@router.post("/representatives/{representative_id}/decision", response_model=RepresentativeResponse)
def decide_representative(
    representative_id: str,
    data: DecisionRequest,
    staff: CareerCenterStaff = Depends(get_current_staff),
    services: ServiceContainer = Depends(get_services),
):
    return services.staff.decide_representative(staff.user_id, representative_id, data.approve)


@router.get("/internships/pending", response_model=List[InternshipResponse])
def pending_internships(
    staff: CareerCenterStaff = Depends(get_current_staff),
    services: ServiceContainer = Depends(get_services),
):
    return [InternshipResponse.from_entity(i) for i in services.staff.pending_internships()]


@router.post("/internships/{internship_id}/decision", response_model=InternshipResponse)
def decide_internship(
    internship_id: str,
    data: DecisionRequest,
    staff: CareerCenterStaff = Depends(get_current_staff),
    services: ServiceContainer = Depends(get_services),
):
    """Approved internships become visible to students immediately."""
    internship = services.staff.decide_internship(staff.user_id, internship_id, data.approve)
    return InternshipResponse.from_entity(internship)


@router.get("/withdrawals/pending", response_model=List[WithdrawalResponse])
def pending_withdrawals(
    staff: CareerCenterStaff = Depends(get_current_staff),
    services: ServiceContainer = Depends(get_services),
):
    return services.staff.pending_withdrawals()


@router.post("/withdrawals/{withdrawal_id}/decision", response_model=WithdrawalResponse)
def process_withdrawal(
    withdrawal_id: str,
    data: DecisionRequest,
    staff: CareerCenterStaff = Depends(get_current_staff),
    services: ServiceContainer = Depends(get_services),
):
    return services.staff.process_withdrawal(staff.user_id, withdrawal_id, data.approve, data.comments)


# ============================================================
# ACCOUNTS
# ============================================================

@router.post("/students", response_model=UserResponse, status_code=201)
def create_student(
    data: StudentCreate,
    staff: CareerCenterStaff = Depends(get_current_staff),
    services: ServiceContainer = Depends(get_services),
):
    student = services.staff.create_student(
        staff.user_id,
        student_id=data.student_id,
        name=data.name,
        major=data.major,
        year=data.year,
        email=data.email,
        password=data.password,
    )
    return UserResponse(**student.model_dump(exclude={"password"}), has_accepted_placement=False)


@router.post("/representatives", response_model=RepresentativeResponse, status_code=201)
def create_representative(
    data: RepresentativeCreate,
    staff: CareerCenterStaff = Depends(get_current_staff),
    services: ServiceContainer = Depends(get_services),
):
    return services.staff.create_representative(staff.user_id, **data.model_dump())


@router.get("/companies", response_model=List[str])
def list_companies(
    staff: CareerCenterStaff = Depends(get_current_staff),
    services: ServiceContainer = Depends(get_services),
):
    return services.staff.list_companies()
