"""
SQLAlchemy models for PostgreSQL database.

Schema includes:
- Users with their credit counter
- Tasks with proof and review metadata
- Recognitions sent between users
- Teams
- Third-party task tracker integrations and pending OAuth states
- Activity log (credit ledger)
"""

from datetime import datetime
from typing import Optional, List
from sqlalchemy import (
    String,
    Text,
    Integer,
    Boolean,
    DateTime,
    ForeignKey,
    JSON,
    Index,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, relationship, Mapped, mapped_column
from sqlalchemy.sql import func
import enum


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


# ==================== ENUMS ====================

class UserRoleEnum(str, enum.Enum):
    MEMBER = "member"
    MANAGER = "manager"
    ADMIN = "admin"


class TaskPriorityEnum(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskStatusEnum(str, enum.Enum):
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    IN_REVIEW = "in-review"
    COMPLETED = "completed"
    REJECTED = "rejected"


class TaskTypeEnum(str, enum.Enum):
    FEATURE = "feature"
    BUG = "bug"
    IMPROVEMENT = "improvement"
    RESEARCH = "research"
    IDEATION = "ideation"


class RecognitionTypeEnum(str, enum.Enum):
    ACHIEVEMENT = "achievement"
    COLLABORATION = "collaboration"
    INNOVATION = "innovation"
    LEADERSHIP = "leadership"


class IntegrationServiceEnum(str, enum.Enum):
    JIRA = "jira"
    CLICKUP = "clickup"


class ActivityTypeEnum(str, enum.Enum):
    TASK_COMPLETED = "task_completed"
    RECOGNITION_RECEIVED = "recognition_received"


# ==================== USERS ====================

class UserDB(Base):
    """Workspace user profile. The id is the identity provider's user id."""
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    avatar: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    role: Mapped[str] = mapped_column(String(20), default="member")
    department: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Only ever incremented, see repositories.users.add_credits
    credits: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        Index("idx_users_role", "role"),
    )


# ==================== TASKS ====================

class TaskDB(Base):
    """Main task table."""
    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)  # task_<hex>

    # Core fields
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")

    # Classification
    task_type: Mapped[str] = mapped_column(String(30), default="feature")
    priority: Mapped[str] = mapped_column(String(20), default="medium")
    status: Mapped[str] = mapped_column(String(30), default="todo")

    # Assignment
    assignee_id: Mapped[Optional[str]] = mapped_column(String(64), ForeignKey("users.id"), nullable=True)
    created_by: Mapped[str] = mapped_column(String(64), nullable=False)
    reviewer_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    team_id: Mapped[Optional[str]] = mapped_column(String(64), ForeignKey("teams.id"), nullable=True)

    # Reward
    credits: Mapped[int] = mapped_column(Integer, default=0)

    # Proof and review
    requires_proof: Mapped[bool] = mapped_column(Boolean, default=False)
    proof_uploaded: Mapped[bool] = mapped_column(Boolean, default=False)
    proof_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    review_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    tags: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)

    # Timing
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    submitted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    assignee: Mapped[Optional["UserDB"]] = relationship("UserDB", foreign_keys=[assignee_id])

    __table_args__ = (
        Index("idx_tasks_status", "status"),
        Index("idx_tasks_assignee", "assignee_id"),
        Index("idx_tasks_team", "team_id"),
        Index("idx_tasks_created", "created_at"),
        Index("idx_tasks_assignee_status_updated", "assignee_id", "status", "updated_at"),
    )


# ==================== RECOGNITIONS ====================

class RecognitionDB(Base):
    """Peer recognition. Immutable once created."""
    __tablename__ = "recognitions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)  # recognition_<hex>
    from_user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    to_user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    credits: Mapped[int] = mapped_column(Integer, nullable=False)
    recognition_type: Mapped[str] = mapped_column(String(30), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("idx_recognitions_to_user", "to_user_id", "created_at"),
        Index("idx_recognitions_from_user", "from_user_id"),
    )


# ==================== TEAMS ====================

class TeamDB(Base):
    """Teams. The creator is the leader and first member."""
    __tablename__ = "teams"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)  # team_<hex>
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    leader_id: Mapped[str] = mapped_column(String(64), nullable=False)
    member_ids: Mapped[List[str]] = mapped_column(JSON, default=list)
    channel_ids: Mapped[List[str]] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("idx_teams_leader", "leader_id"),
    )


# ==================== INTEGRATIONS ====================

class IntegrationDB(Base):
    """
    Connection to a third-party task tracker (Jira, ClickUp).

    Tokens are Fernet-encrypted when ENCRYPTION_KEY is configured.
    """
    __tablename__ = "integrations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    service: Mapped[str] = mapped_column(String(20), nullable=False)

    access_token: Mapped[str] = mapped_column(Text, nullable=False)
    refresh_token: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    workspace_id: Mapped[str] = mapped_column(String(100), default="")
    workspace_name: Mapped[str] = mapped_column(String(255), default="")
    workspace_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # status_mappings, credit_rules, selected_projects
    settings: Mapped[dict] = mapped_column(JSON, default=dict)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "service", name="uq_integration_user_service"),
        Index("idx_integrations_user_active", "user_id", "is_active"),
    )


class OAuthStateDB(Base):
    """Pending OAuth authorization. Rows past expires_at are ignored."""
    __tablename__ = "oauth_states"

    state: Mapped[str] = mapped_column(String(100), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    service: Mapped[str] = mapped_column(String(20), nullable=False)
    redirect_uri: Mapped[str] = mapped_column(Text, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("idx_oauth_states_expires", "expires_at"),
    )


# ==================== ACTIVITY LOG ====================

class ActivityLogDB(Base):
    """Append-only credit ledger. One row per credit award."""
    __tablename__ = "activity_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    activity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    details: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    credits_earned: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("idx_activity_user_created", "user_id", "created_at"),
    )
