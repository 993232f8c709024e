"""
HTTP API for the Honourus web client.

Every route except health and auth requires ``Authorization: Bearer <token>``.
Error bodies are ``{"error": message}``; unexpected failures are logged and
reported as a generic 500.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from config import settings
from ..analytics.summary import get_user_analytics
from ..database import get_database
from ..database.exceptions import EntityNotFoundError
from ..database.repositories import (
    get_integration_repository,
    get_recognition_repository,
    get_task_repository,
    get_team_repository,
    get_user_repository,
)
from ..integrations.supabase_auth import AuthProviderError, get_auth_client
from ..integrations.task_trackers import SUPPORTED_SERVICES
from ..middleware.slowapi_limiter import limiter
from ..models.api_validation import (
    ActivityOut,
    IntegrationOut,
    IntegrationSettingsUpdate,
    RecognitionCreate,
    RecognitionOut,
    SignInRequest,
    SignUpRequest,
    TaskCreate,
    TaskOut,
    TaskUpdate,
    TeamCreate,
    TeamOut,
    UserOut,
    UserUpdate,
)
from ..utils.datetime_utils import utc_now
from .dependencies import AuthenticatedUser, get_current_user
from .errors import APIError, ForbiddenError, NotFoundError, UpstreamError, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix=settings.api_prefix)

ADMIN_ROLE = "admin"


def _dump(model_cls, obj) -> Dict[str, Any]:
    return model_cls.model_validate(obj).model_dump(mode="json", by_alias=True)


async def _require_self_or_admin(caller: AuthenticatedUser, user_id: str, message: str) -> Optional[Any]:
    """Raise 403 unless the caller is ``user_id`` or an admin. Returns the caller's profile."""
    profile = await get_user_repository().get_by_id(caller.id)
    if caller.id != user_id and (profile is None or profile.role != ADMIN_ROLE):
        raise ForbiddenError(message)
    return profile


# ============================================================================
# Health
# ============================================================================

@router.get("/health")
async def health_check():
    """Liveness plus database status."""
    try:
        db_health = await get_database().health_check()
    except Exception as e:
        db_health = {"status": "error", "error": str(e)}

    return {
        "status": "healthy",
        "timestamp": utc_now().isoformat(),
        "database": db_health.get("status", "unknown"),
    }


# ============================================================================
# Auth
# ============================================================================

@router.post("/auth/signup")
@limiter.limit(settings.auth_rate_limit)
async def sign_up(request: Request, response: Response, data: SignUpRequest):
    """Create an identity (email auto-confirmed) and its profile row."""
    try:
        try:
            identity = await get_auth_client().create_user(
                email=data.email,
                password=data.password,
                user_metadata={
                    "name": data.name,
                    "role": data.role,
                    "department": data.department,
                    "credits": 0,
                },
            )
        except AuthProviderError as e:
            logger.info(f"Signup error: {e.message}")
            raise UpstreamError(e.message)

        await get_user_repository().create(
            user_id=identity["id"],
            name=data.name,
            email=data.email,
            role=data.role,
            department=data.department,
        )

        return {"user": identity, "message": "User created successfully"}

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Signup error: {e}", exc_info=True)
        raise APIError("Internal server error during signup")


@router.post("/auth/signin")
@limiter.limit(settings.auth_rate_limit)
async def sign_in(request: Request, response: Response, data: SignInRequest):
    """Password sign-in. userData falls back to identity metadata."""
    try:
        try:
            result = await get_auth_client().sign_in_with_password(data.email, data.password)
        except AuthProviderError as e:
            logger.info(f"Signin error: {e.message}")
            raise UpstreamError(e.message)

        identity = result["user"]
        profile = await get_user_repository().get_by_id(identity.get("id"))

        if profile is not None:
            user_data = _dump(UserOut, profile)
        else:
            metadata = identity.get("user_metadata") or {}
            user_data = {
                "id": identity.get("id"),
                "name": metadata.get("name") or "User",
                "email": identity.get("email"),
                "role": metadata.get("role") or "member",
                "department": metadata.get("department"),
                "credits": metadata.get("credits") or 0,
            }

        return {"user": identity, "session": result["session"], "userData": user_data}

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Signin error: {e}", exc_info=True)
        raise APIError("Internal server error during signin")


# ============================================================================
# Tasks
# ============================================================================

@router.get("/tasks")
async def list_tasks(
    status: Optional[str] = None,
    assignee_id: Optional[str] = Query(None, alias="assigneeId"),
    user: AuthenticatedUser = Depends(get_current_user),
):
    try:
        tasks = await get_task_repository().get_all(status=status, assignee_id=assignee_id)
        return {"tasks": [_dump(TaskOut, task) for task in tasks]}
    except Exception as e:
        logger.error(f"Get tasks error: {e}", exc_info=True)
        raise APIError("Error fetching tasks")


@router.post("/tasks")
async def create_task(data: TaskCreate, user: AuthenticatedUser = Depends(get_current_user)):
    try:
        task = await get_task_repository().create(data.model_dump(), created_by=user.id)
        return {"task": _dump(TaskOut, task), "message": "Task created successfully"}
    except Exception as e:
        logger.error(f"Create task error: {e}", exc_info=True)
        raise APIError("Error creating task")


@router.put("/tasks/{task_id}")
async def update_task(
    task_id: str,
    data: TaskUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
):
    """
    Partial task update.

    Moving a task into ``completed`` credits the assignee (or the caller when
    the task is unassigned) with the task's stored credits, provided the
    stored task required proof and proof was uploaded.
    """
    try:
        task, awarded = await get_task_repository().update(
            task_id, data.to_updates(), acting_user_id=user.id
        )
        return {
            "task": _dump(TaskOut, task),
            "creditsAwarded": awarded,
            "message": "Task updated successfully",
        }
    except EntityNotFoundError:
        raise NotFoundError("Task not found")
    except Exception as e:
        logger.error(f"Update task error: {e}", exc_info=True)
        raise APIError("Error updating task")


# ============================================================================
# Recognitions
# ============================================================================

@router.get("/recognitions")
async def list_recognitions(user: AuthenticatedUser = Depends(get_current_user)):
    try:
        recognitions = await get_recognition_repository().get_all()
        return {"recognitions": [_dump(RecognitionOut, r) for r in recognitions]}
    except Exception as e:
        logger.error(f"Get recognitions error: {e}", exc_info=True)
        raise APIError("Error fetching recognitions")


@router.post("/recognitions")
async def send_recognition(data: RecognitionCreate, user: AuthenticatedUser = Depends(get_current_user)):
    """Send a recognition. Its credits always go to the recipient."""
    try:
        recognition = await get_recognition_repository().create(
            from_user_id=user.id,
            to_user_id=data.to_user_id,
            message=data.message,
            credits=data.credits,
            recognition_type=data.recognition_type,
        )
        return {"recognition": _dump(RecognitionOut, recognition), "message": "Recognition sent successfully"}
    except Exception as e:
        logger.error(f"Send recognition error: {e}", exc_info=True)
        raise APIError("Error sending recognition")


# ============================================================================
# Users
# ============================================================================

@router.get("/users/{user_id}")
async def get_user(user_id: str, user: AuthenticatedUser = Depends(get_current_user)):
    try:
        profile = await get_user_repository().get_by_id(user_id)
    except Exception as e:
        logger.error(f"Get user error: {e}", exc_info=True)
        raise APIError("Error fetching user")

    if profile is None:
        raise NotFoundError("User not found")
    return {"user": _dump(UserOut, profile)}


@router.put("/users/{user_id}")
async def update_user(
    user_id: str,
    data: UserUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
):
    """Update a profile. Self or admin only; only admins may change roles."""
    try:
        caller_profile = await _require_self_or_admin(user, user_id, "Unauthorized to update this profile")

        updates = data.to_updates()
        if "role" in updates and (caller_profile is None or caller_profile.role != ADMIN_ROLE):
            raise ForbiddenError("Only admins can change roles")

        profile = await get_user_repository().update(user_id, updates)
        if profile is None:
            raise NotFoundError("User not found")

        return {"user": _dump(UserOut, profile), "message": "Profile updated successfully"}

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Update user error: {e}", exc_info=True)
        raise APIError("Error updating user profile")


@router.get("/users/{user_id}/activity")
async def get_user_activity(
    user_id: str,
    limit: int = Query(50, ge=1, le=200),
    user: AuthenticatedUser = Depends(get_current_user),
):
    """Credit ledger entries, newest first."""
    try:
        await _require_self_or_admin(user, user_id, "Unauthorized to view this activity")
        entries = await get_user_repository().get_activity(user_id, limit=limit)
        return {"activity": [_dump(ActivityOut, entry) for entry in entries]}
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Get activity error: {e}", exc_info=True)
        raise APIError("Error fetching activity")


# ============================================================================
# Teams
# ============================================================================

@router.get("/teams")
async def list_teams(user: AuthenticatedUser = Depends(get_current_user)):
    try:
        teams = await get_team_repository().get_all()
        return {"teams": [_dump(TeamOut, team) for team in teams]}
    except Exception as e:
        logger.error(f"Get teams error: {e}", exc_info=True)
        raise APIError("Error fetching teams")


@router.post("/teams")
async def create_team(data: TeamCreate, user: AuthenticatedUser = Depends(get_current_user)):
    try:
        team = await get_team_repository().create(
            name=data.name,
            leader_id=user.id,
            description=data.description or "",
        )
        return {"team": _dump(TeamOut, team), "message": "Team created successfully"}
    except Exception as e:
        logger.error(f"Create team error: {e}", exc_info=True)
        raise APIError("Error creating team")


# ============================================================================
# Analytics
# ============================================================================

@router.get("/analytics")
async def get_analytics(user: AuthenticatedUser = Depends(get_current_user)):
    try:
        return {"analytics": await get_user_analytics(user.id)}
    except Exception as e:
        logger.error(f"Get analytics error: {e}", exc_info=True)
        raise APIError("Error fetching analytics")


# ============================================================================
# Integrations
# ============================================================================

def _check_service(service: str) -> None:
    if service not in SUPPORTED_SERVICES:
        raise ValidationError(f"Unsupported service: {service}")


@router.get("/integrations")
async def list_integrations(user: AuthenticatedUser = Depends(get_current_user)):
    try:
        integrations = await get_integration_repository().get_active(user.id)
        return {"integrations": [IntegrationOut.model_validate(i).model_dump(mode="json") for i in integrations]}
    except Exception as e:
        logger.error(f"Get integrations error: {e}", exc_info=True)
        raise APIError("Error fetching integrations")


@router.put("/integrations/{service}/settings")
async def update_integration_settings(
    service: str,
    data: IntegrationSettingsUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
):
    _check_service(service)
    try:
        integration = await get_integration_repository().update_settings(
            user.id, service, data.model_dump()
        )
    except Exception as e:
        logger.error(f"Update integration settings error: {e}", exc_info=True)
        raise APIError("Error updating integration settings")

    if integration is None:
        raise NotFoundError(f"No active {service} integration")

    return {
        "integration": IntegrationOut.model_validate(integration).model_dump(mode="json"),
        "message": "Integration settings updated",
    }


@router.delete("/integrations/{service}")
async def disconnect_integration(service: str, user: AuthenticatedUser = Depends(get_current_user)):
    _check_service(service)
    try:
        disconnected = await get_integration_repository().deactivate(user.id, service)
    except Exception as e:
        logger.error(f"Disconnect integration error: {e}", exc_info=True)
        raise APIError("Error disconnecting integration")

    if not disconnected:
        raise NotFoundError(f"No active {service} integration")

    return {"message": f"{service} integration disconnected"}
