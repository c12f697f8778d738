"""Status and uptime API for the dashboard."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..config import settings
from ..schemas.status import (
    CurrentStatus,
    DailyUptimeResponse,
    HealthSummary,
    IncidentResponse,
    UptimeWindow,
    UptimeWindows,
)
from ..services.uptime import UptimeService, get_uptime_service

router = APIRouter(prefix="/api/status", tags=["status"])


@router.get("", response_model=CurrentStatus)
async def get_current_status(uptime: UptimeService = Depends(get_uptime_service)):
    """Current status. The manual override takes precedence."""
    return CurrentStatus(status=await uptime.current_status())


@router.get("/uptime", response_model=UptimeWindow)
async def get_rolling_uptime(
    hours: float = Query(24, gt=0, le=24 * 365),
    uptime: UptimeService = Depends(get_uptime_service),
):
    """Uptime percentage over the trailing ``hours``."""
    return UptimeWindow(hours=hours, uptime=await uptime.rolling_uptime(hours))


@router.get("/uptime/windows", response_model=UptimeWindows)
async def get_uptime_windows(uptime: UptimeService = Depends(get_uptime_service)):
    return UptimeWindows(
        uptime_24h=await uptime.rolling_uptime(24),
        uptime_7d=await uptime.rolling_uptime(24 * 7),
        uptime_30d=await uptime.rolling_uptime(24 * 30),
    )


@router.get("/daily", response_model=List[DailyUptimeResponse])
async def get_daily_summary(
    days: int = Query(30, ge=1, le=365),
    uptime: UptimeService = Depends(get_uptime_service),
):
    """Per-day uptime, oldest first. Days without checks show 100% and 0 checks."""
    summary = await uptime.daily_summary(days)
    return [DailyUptimeResponse.model_validate(day) for day in summary]


@router.get("/incidents/latest", response_model=Optional[IncidentResponse])
async def get_latest_incident(uptime: UptimeService = Depends(get_uptime_service)):
    incident = await uptime.latest_incident()
    if incident is None:
        return None
    return IncidentResponse.model_validate(incident)


@router.get("/summary", response_model=HealthSummary)
async def get_health_summary(uptime: UptimeService = Depends(get_uptime_service)):
    return HealthSummary(text=await uptime.health_summary(settings.target_name))
