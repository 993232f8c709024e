"""
Pydantic models for API request validation and response shaping.

The web client speaks camelCase (assigneeId, requiresProof, ...). Models
accept and emit camelCase aliases while Python code uses snake_case field
names that line up with the database columns.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


TaskStatus = Literal["todo", "in-progress", "in-review", "completed", "rejected"]
TaskPriority = Literal["low", "medium", "high"]
TaskType = Literal["feature", "bug", "improvement", "research", "ideation"]
RecognitionType = Literal["achievement", "collaboration", "innovation", "leadership"]
UserRole = Literal["member", "manager", "admin"]
IntegrationService = Literal["jira", "clickup"]


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase keys."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _strip_required(value: str) -> str:
    stripped = value.strip()
    if not stripped:
        raise ValueError("cannot be empty")
    return stripped


def _reject_nulls(model: BaseModel, fields) -> None:
    """Fields that may be omitted but never sent as null."""
    for name in fields:
        if name in model.model_fields_set and getattr(model, name) is None:
            raise ValueError(f"{name} cannot be null")


# ============================================
# AUTH
# ============================================

class SignUpRequest(CamelModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    role: UserRole = "member"
    department: Optional[str] = Field(None, max_length=100)

    @field_validator("email", "name")
    @classmethod
    def validate_not_blank(cls, v):
        return _strip_required(v)


class SignInRequest(CamelModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


# ============================================
# TASKS
# ============================================

class TaskCreate(CamelModel):
    """Task creation payload. Proof always starts out not uploaded."""
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = Field(None, max_length=10000)
    task_type: TaskType = Field("feature", alias="type")
    priority: TaskPriority = "medium"
    status: TaskStatus = "todo"
    assignee_id: Optional[str] = None
    reviewer_id: Optional[str] = None
    team_id: Optional[str] = None
    credits: int = Field(0, ge=0)
    requires_proof: bool = False
    tags: List[str] = Field(default_factory=list)
    due_date: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        return _strip_required(v)


TASK_NOT_NULL_FIELDS = (
    "title", "description", "task_type", "priority", "status",
    "credits", "requires_proof", "proof_uploaded",
)


class TaskUpdate(CamelModel):
    """Partial task update. Only fields present in the request are applied."""
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = Field(None, max_length=10000)
    task_type: Optional[TaskType] = Field(None, alias="type")
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    assignee_id: Optional[str] = None
    reviewer_id: Optional[str] = None
    credits: Optional[int] = Field(None, ge=0)
    requires_proof: Optional[bool] = None
    proof_uploaded: Optional[bool] = None
    proof_url: Optional[str] = None
    review_notes: Optional[str] = None
    rejection_reason: Optional[str] = None
    tags: Optional[List[str]] = None
    due_date: Optional[datetime] = None
    submitted_at: Optional[datetime] = None

    @model_validator(mode="after")
    def validate_no_nulls(self):
        _reject_nulls(self, TASK_NOT_NULL_FIELDS)
        return self

    def to_updates(self) -> Dict[str, Any]:
        """Column -> value for the fields the client sent."""
        return self.model_dump(exclude_unset=True)


class TaskOut(CamelModel):
    id: str
    title: str
    description: Optional[str] = ""
    task_type: str = Field(..., serialization_alias="type")
    priority: str
    status: str
    assignee_id: Optional[str] = None
    created_by: str
    reviewer_id: Optional[str] = None
    team_id: Optional[str] = None
    credits: int = 0
    requires_proof: bool = False
    proof_uploaded: bool = False
    proof_url: Optional[str] = None
    review_notes: Optional[str] = None
    rejection_reason: Optional[str] = None
    tags: Optional[List[str]] = None
    due_date: Optional[datetime] = None
    submitted_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================
# RECOGNITIONS
# ============================================

class RecognitionCreate(CamelModel):
    to_user_id: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1, max_length=2000)
    credits: int = Field(..., gt=0)
    recognition_type: RecognitionType = Field(..., alias="type")

    @field_validator("message")
    @classmethod
    def validate_message(cls, v):
        return _strip_required(v)


class RecognitionOut(CamelModel):
    id: str
    from_user_id: str
    to_user_id: str
    message: str
    credits: int
    recognition_type: str = Field(..., serialization_alias="type")
    created_at: Optional[datetime] = None


# ============================================
# USERS
# ============================================

class UserUpdate(CamelModel):
    """Editable profile fields. The credit counter is never client-writable."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    department: Optional[str] = Field(None, max_length=100)
    avatar: Optional[str] = None
    role: Optional[UserRole] = None

    @model_validator(mode="after")
    def validate_no_nulls(self):
        _reject_nulls(self, ("name", "role"))
        return self

    def to_updates(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class UserOut(CamelModel):
    id: str
    name: str
    email: str
    avatar: Optional[str] = None
    role: str
    department: Optional[str] = None
    credits: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ActivityOut(CamelModel):
    id: int
    user_id: str
    activity_type: str
    details: Optional[Dict[str, Any]] = None
    credits_earned: int = 0
    created_at: Optional[datetime] = None


# ============================================
# TEAMS
# ============================================

class TeamCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _strip_required(v)


class TeamOut(CamelModel):
    id: str
    name: str
    description: Optional[str] = ""
    leader_id: str
    member_ids: List[str] = Field(default_factory=list)
    channel_ids: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None


# ============================================
# INTEGRATIONS
# ============================================

class IntegrationOut(BaseModel):
    """Integration as returned to clients. Tokens are never included."""
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    user_id: str
    service: str
    workspace_id: Optional[str] = ""
    workspace_name: Optional[str] = ""
    workspace_url: Optional[str] = None
    settings: Dict[str, Any] = Field(default_factory=dict)
    is_active: bool = True
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class IntegrationSettingsUpdate(BaseModel):
    status_mappings: Dict[str, str] = Field(default_factory=dict)
    credit_rules: List[Dict[str, Any]] = Field(default_factory=list)
    selected_projects: List[str] = Field(default_factory=list)


# ============================================
# STANDALONE FUNCTIONS
# ============================================

class UnsungHeroRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    team_id: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None


class HeatmapRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    year: int = Field(..., ge=1, le=9998)
    requester_id: Optional[str] = None


class IntegrationConnectRequest(BaseModel):
    service: IntegrationService
    user_id: str = Field(..., min_length=1)
    redirect_uri: str = Field(..., min_length=1)


class IntegrationCallbackRequest(BaseModel):
    service: IntegrationService
    code: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
