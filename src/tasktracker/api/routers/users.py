"""Routes for account self-management: profile, preferences, export."""

from __future__ import annotations

from fastapi import APIRouter

from ...deps import CurrentUserDependency, OptionalUserDependency, UserServiceDependency
from ...models import UserPreferences
from ...schemas import (
    AccountDeactivateRequest,
    AvatarResponse,
    AvatarUpdate,
    CategoriesResponse,
    ExportedUser,
    MessageResponse,
    PreferencesRead,
    PreferencesResponse,
    PreferencesUpdate,
    TaskRead,
    UserExportData,
    UserExportResponse,
    UserProfileResponse,
    UserPublic,
    UserStats,
)

router = APIRouter(prefix="/users", tags=["users"])


def _preferences(preferences: UserPreferences) -> PreferencesRead:
    return PreferencesRead(
        theme=preferences.theme,
        default_category=preferences.default_category,
        notifications=preferences.notifications,
    )


@router.get("/profile", response_model=UserProfileResponse, summary="Profile with task counters")
async def read_profile(current_user: CurrentUserDependency, service: UserServiceDependency) -> UserProfileResponse:
    counts = await service.task_counts(current_user)
    return UserProfileResponse(
        user=UserPublic.from_document(current_user),
        stats=UserStats(
            total_tasks=counts.total,
            completed_tasks=counts.completed,
            pending_tasks=counts.pending,
        ),
    )


@router.put("/preferences", response_model=PreferencesResponse, summary="Merge preference changes")
async def update_preferences(
    payload: PreferencesUpdate,
    current_user: CurrentUserDependency,
    service: UserServiceDependency,
) -> PreferencesResponse:
    preferences = await service.update_preferences(
        current_user,
        theme=payload.theme,
        default_category=payload.default_category,
        notifications=payload.notifications,
    )
    return PreferencesResponse(message="Preferences updated successfully.", preferences=_preferences(preferences))


@router.put("/avatar", response_model=AvatarResponse, summary="Set the avatar URL")
async def update_avatar(
    payload: AvatarUpdate,
    current_user: CurrentUserDependency,
    service: UserServiceDependency,
) -> AvatarResponse:
    avatar = await service.update_avatar(current_user, str(payload.avatar))
    return AvatarResponse(message="Avatar updated successfully.", avatar=avatar)


@router.delete("/account", response_model=MessageResponse, summary="Deactivate the account")
async def deactivate_account(
    payload: AccountDeactivateRequest,
    current_user: CurrentUserDependency,
    service: UserServiceDependency,
) -> MessageResponse:
    await service.deactivate_account(current_user, payload.password)
    return MessageResponse(message="Account deactivated successfully.")


@router.get("/export", response_model=UserExportResponse, summary="Download the account and all its tasks")
async def export_data(current_user: CurrentUserDependency, service: UserServiceDependency) -> UserExportResponse:
    export = await service.export_data(current_user)
    return UserExportResponse(
        message="Data exported successfully.",
        data=UserExportData(
            user=ExportedUser(
                name=export.user.name,
                email=export.user.email,
                preferences=_preferences(export.user.preferences),
                created_at=export.user.created_at,
            ),
            tasks=[TaskRead.from_document(task, now=export.exported_at) for task in export.tasks],
            exported_at=export.exported_at,
        ),
    )


@router.get("/categories", response_model=CategoriesResponse, summary="Available task categories")
async def list_categories(current_user: OptionalUserDependency, service: UserServiceDependency) -> CategoriesResponse:
    default = current_user.preferences.default_category if current_user is not None else None
    return CategoriesResponse(categories=service.categories(), default_category=default)
