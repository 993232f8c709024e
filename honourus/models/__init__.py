from .api_validation import (
    SignUpRequest,
    SignInRequest,
    TaskCreate,
    TaskUpdate,
    TaskOut,
    RecognitionCreate,
    RecognitionOut,
    UserUpdate,
    UserOut,
    ActivityOut,
    TeamCreate,
    TeamOut,
    IntegrationOut,
    IntegrationSettingsUpdate,
    UnsungHeroRequest,
    HeatmapRequest,
    IntegrationConnectRequest,
    IntegrationCallbackRequest,
)

__all__ = [
    "SignUpRequest",
    "SignInRequest",
    "TaskCreate",
    "TaskUpdate",
    "TaskOut",
    "RecognitionCreate",
    "RecognitionOut",
    "UserUpdate",
    "UserOut",
    "ActivityOut",
    "TeamCreate",
    "TeamOut",
    "IntegrationOut",
    "IntegrationSettingsUpdate",
    "UnsungHeroRequest",
    "HeatmapRequest",
    "IntegrationConnectRequest",
    "IntegrationCallbackRequest",
]
