# backend/app/routes/v1/auth.py
"""
Authentication routes - API v1

Versioned authentication endpoints under /api/v1/auth.
Handles registration, password login and the caller's own profile.

Endpoints:
    POST /register                       → Create a student or instructor account
    POST /login                          → OAuth2 password login
    GET /me                              → Current profile
    PATCH /me                            → Update names, phone, skill level
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from ...api.dependencies.auth import get_current_user
from ...api.dependencies.services import get_auth_service
from ...auth import create_access_token
from ...models.profile import Profile
from ...schemas.auth import ProfileResponse, ProfileUpdate, RegisterRequest, TokenResponse
from ...services.auth_service import AuthService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["auth-v1"])


@router.post("/register", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> ProfileResponse:
    """
    Register a new account.

    Duplicate emails give 409. A welcome email is sent best-effort.
    """
    profile = auth_service.register_user(
        email=payload.email,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
        phone=payload.phone,
        role=payload.role,
        skill_level=payload.skill_level,
    )
    return ProfileResponse.model_validate(profile)


@router.post("/login", response_model=TokenResponse)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    """OAuth2 password login; the username field carries the email."""
    profile = auth_service.authenticate_user(form_data.username, form_data.password)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not profile.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user")

    token = create_access_token(profile.id)
    logger.info(f"Profile {profile.id} logged in")
    return TokenResponse(access_token=token)


@router.get("/me", response_model=ProfileResponse)
def read_me(current_user: Profile = Depends(get_current_user)) -> ProfileResponse:
    return ProfileResponse.model_validate(current_user)


@router.patch("/me", response_model=ProfileResponse)
def update_me(
    payload: ProfileUpdate,
    current_user: Profile = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> ProfileResponse:
    updates = payload.model_dump(exclude_unset=True)
    profile = auth_service.update_profile(current_user, updates)
    return ProfileResponse.model_validate(profile)
