"""Routes handling registration, login and the caller's own account."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...deps import AuthServiceDependency, CurrentUserDependency
from ...schemas import (
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    MessageResponse,
    ProfileUpdateRequest,
    ProfileUpdateResponse,
    RegisterRequest,
    UserEnvelope,
    UserPublic,
)
from ...services import AuthResult

router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_response(message: str, result: AuthResult) -> AuthResponse:
    return AuthResponse(
        message=message,
        token=result.token.token,
        user=UserPublic.from_document(result.user),
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user account",
)
async def register(payload: RegisterRequest, auth_service: AuthServiceDependency) -> AuthResponse:
    result = await auth_service.register(
        name=payload.name,
        email=payload.email,
        password=payload.password,
    )
    return _auth_response("User registered successfully.", result)


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Authenticate using email and password",
)
async def login(payload: LoginRequest, auth_service: AuthServiceDependency) -> AuthResponse:
    result = await auth_service.login(email=payload.email, password=payload.password)
    return _auth_response("Login successful.", result)


@router.get("/me", response_model=UserEnvelope, summary="Return the authenticated account")
async def read_me(current_user: CurrentUserDependency) -> UserEnvelope:
    return UserEnvelope(user=UserPublic.from_document(current_user))


@router.put("/profile", response_model=ProfileUpdateResponse, summary="Update name, email or preferences")
async def update_profile(
    payload: ProfileUpdateRequest,
    current_user: CurrentUserDependency,
    auth_service: AuthServiceDependency,
) -> ProfileUpdateResponse:
    preferences = payload.preferences.model_dump(exclude_none=True) if payload.preferences else None
    user = await auth_service.update_profile(
        current_user,
        name=payload.name,
        email=payload.email,
        preferences=preferences,
    )
    return ProfileUpdateResponse(message="Profile updated successfully.", user=UserPublic.from_document(user))


@router.post("/change-password", response_model=MessageResponse, summary="Replace the account password")
async def change_password(
    payload: ChangePasswordRequest,
    current_user: CurrentUserDependency,
    auth_service: AuthServiceDependency,
) -> MessageResponse:
    await auth_service.change_password(
        current_user,
        current_password=payload.current_password,
        new_password=payload.new_password,
    )
    return MessageResponse(message="Password changed successfully.")
