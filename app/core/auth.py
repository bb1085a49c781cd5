"""
Authentication Utility - JWT handling and role dependencies.

Provides:
- JWT token creation/verification
- FastAPI dependencies for protected routes, one per role

Passwords themselves are checked by AuthService; the CSV files store them
as plain text.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Union
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.core.config import Settings
from app.models.entities import CareerCenterStaff, CompanyRepresentative, Student, UserRole
from app.services.container import ServiceContainer

# Bearer token extractor
bearer_scheme = HTTPBearer()


def get_services(request: Request) -> ServiceContainer:
    """FastAPI dependency - the container built in create_app()."""
    return request.app.state.services


def create_access_token(data: dict, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Settings) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    services: ServiceContainer = Depends(get_services),
) -> Union[Student, CompanyRepresentative, CareerCenterStaff]:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @router.get("/protected")
        def route(user = Depends(get_current_user)):
            return user
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(credentials.credentials, services.settings)
    if not payload:
        raise credentials_exception

    user_id = payload.get("sub")
    if not user_id:
        raise credentials_exception

    user = services.auth.find_user(user_id)
    if user is None or user.role.value != payload.get("role"):
        raise credentials_exception

    return user


def get_current_student(user=Depends(get_current_user)) -> Student:
    """Dependency - Require student role."""
    if user.role != UserRole.STUDENT:
        raise HTTPException(status_code=403, detail="Students only")
    return user


def get_current_representative(user=Depends(get_current_user)) -> CompanyRepresentative:
    """Dependency - Require an APPROVED company representative."""
    if user.role != UserRole.COMPANY_REPRESENTATIVE:
        raise HTTPException(status_code=403, detail="Company representatives only")
    if not user.is_approved:
        raise HTTPException(status_code=403, detail="Account not approved")
    return user


def get_current_staff(user=Depends(get_current_user)) -> CareerCenterStaff:
    """Dependency - Require career center staff role."""
    if user.role != UserRole.CAREER_CENTER_STAFF:
        raise HTTPException(status_code=403, detail="Career center staff only")
    return user
