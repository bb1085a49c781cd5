"""
Authentication Routes

POST /auth/login - Login and get JWT token
GET /auth/me - Get current user info
POST /auth/change-password - Change own password
POST /auth/register-representative - Company representative self-registration
"""

from fastapi import APIRouter, Depends

from app.core.auth import create_access_token, get_current_user, get_services
from app.services.container import ServiceContainer
from app.schemas.schemas import (
    ChangePasswordRequest, LoginRequest, MessageResponse, RegisterRepresentativeRequest,
    RepresentativeResponse, TokenResponse, UserResponse
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=TokenResponse)
def login(request: LoginRequest, services: ServiceContainer = Depends(get_services)):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    user = services.auth.login(request.user_id, request.password)
    token = create_access_token(
        data={"sub": user.user_id, "role": user.role.value},
        settings=services.settings,
    )
    return TokenResponse(access_token=token, user_id=user.user_id, name=user.name, role=user.role)


@router.get("/me", response_model=UserResponse)
def get_me(user=Depends(get_current_user)):
    """Get current authenticated user's info."""
    data = user.model_dump(exclude={"password", "registration_date", "approved_by_staff_id"})
    if hasattr(user, "has_accepted_placement"):
        data["has_accepted_placement"] = user.has_accepted_placement
    return UserResponse(**data)


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    request: ChangePasswordRequest,
    user=Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    services.auth.change_password(user.user_id, request.old_password, request.new_password)
    return MessageResponse(message="Password changed successfully")


@router.post("/register-representative", response_model=RepresentativeResponse, status_code=201)
def register_representative(
    request: RegisterRepresentativeRequest,
    services: ServiceContainer = Depends(get_services),
):
    """
    Register a company representative account.

    The account must be approved by career center staff before login.
    """
    return services.auth.register_representative(
        name=request.name,
        email=request.email,
        password=request.password,
        company_name=request.company_name,
        industry=request.industry,
        position=request.position,
    )
