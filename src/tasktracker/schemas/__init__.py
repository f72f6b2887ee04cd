"""Pydantic request and response models."""

from .auth import (
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    ProfileUpdateRequest,
    ProfileUpdateResponse,
    RegisterRequest,
    TokenPayload,
)
from .common import APIModel, MessageResponse
from .system import ErrorResponse, HealthCheckResponse, RootResponse
from .task import (
    CategoryBreakdown,
    DashboardStats,
    Pagination,
    PriorityBreakdown,
    ReminderSchema,
    SubtaskCreate,
    SubtaskProgress,
    SubtaskRead,
    SubtaskWrite,
    TaskCreate,
    TaskListResponse,
    TaskMutationResponse,
    TaskRead,
    TaskStats,
    TaskUpdate,
    WeekdayCount,
)
from .user import (
    AccountDeactivateRequest,
    AvatarResponse,
    AvatarUpdate,
    CategoriesResponse,
    ExportedUser,
    PreferencesPatch,
    PreferencesRead,
    PreferencesResponse,
    PreferencesUpdate,
    UserEnvelope,
    UserExportData,
    UserExportResponse,
    UserProfileResponse,
    UserPublic,
    UserStats,
)

__all__ = [
    "APIModel",
    "AccountDeactivateRequest",
    "AuthResponse",
    "AvatarResponse",
    "AvatarUpdate",
    "CategoriesResponse",
    "CategoryBreakdown",
    "ChangePasswordRequest",
    "DashboardStats",
    "ErrorResponse",
    "ExportedUser",
    "HealthCheckResponse",
    "LoginRequest",
    "MessageResponse",
    "Pagination",
    "PreferencesPatch",
    "PreferencesRead",
    "PreferencesResponse",
    "PreferencesUpdate",
    "PriorityBreakdown",
    "ProfileUpdateRequest",
    "ProfileUpdateResponse",
    "RegisterRequest",
    "ReminderSchema",
    "RootResponse",
    "SubtaskCreate",
    "SubtaskProgress",
    "SubtaskRead",
    "SubtaskWrite",
    "TaskCreate",
    "TaskListResponse",
    "TaskMutationResponse",
    "TaskRead",
    "TaskStats",
    "TaskUpdate",
    "TokenPayload",
    "UserEnvelope",
    "UserExportData",
    "UserExportResponse",
    "UserProfileResponse",
    "UserPublic",
    "UserStats",
    "WeekdayCount",
]
