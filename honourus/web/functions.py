"""
Standalone function endpoints (analytics and task tracker OAuth).

These are called by the web client directly rather than through the main
API. Any failure is reported as 400 with the error message.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from config import settings
from ..analytics.heatmap import generate_contribution_heatmap
from ..analytics.unsung_hero import generate_unsung_hero_report
from ..models.api_validation import (
    HeatmapRequest,
    IntegrationCallbackRequest,
    IntegrationConnectRequest,
    IntegrationOut,
    UnsungHeroRequest,
)
from ..services.oauth_flow import complete_callback, start_connect

logger = logging.getLogger(__name__)

router = APIRouter(prefix=settings.functions_prefix)


def _failure(name: str, error: Exception) -> JSONResponse:
    logger.error(f"Error in {name}: {error}")
    return JSONResponse(status_code=400, content={"error": str(error)})


@router.post("/analytics-unsung-hero")
async def analytics_unsung_hero(data: UnsungHeroRequest):
    """Rank assignees by completion rate, volume and task-type diversity."""
    logger.info(f"Unsung hero report requested by {data.user_id}")
    try:
        report = await generate_unsung_hero_report(
            team_id=data.team_id,
            date_from=data.date_from,
            date_to=data.date_to,
        )
        return {"report": report}
    except Exception as e:
        return _failure("analytics-unsung-hero", e)


@router.post("/analytics-contribution-heatmap")
async def analytics_contribution_heatmap(data: HeatmapRequest):
    """Daily contribution buckets for one user and year."""
    logger.info(f"Heatmap for {data.user_id}/{data.year} requested by {data.requester_id}")
    try:
        heatmap = await generate_contribution_heatmap(data.user_id, data.year)
        return {"heatmap": heatmap}
    except Exception as e:
        return _failure("analytics-contribution-heatmap", e)


@router.post("/integrations-connect")
async def integrations_connect(data: IntegrationConnectRequest):
    try:
        auth_url = await start_connect(data.service, data.user_id, data.redirect_uri)
        return {"authUrl": auth_url}
    except Exception as e:
        return _failure("integrations-connect", e)


@router.post("/integrations-callback")
async def integrations_callback(data: IntegrationCallbackRequest):
    try:
        integration = await complete_callback(data.service, data.code, data.state, data.user_id)
        return {"integration": IntegrationOut.model_validate(integration).model_dump(mode="json")}
    except Exception as e:
        return _failure("integrations-callback", e)
