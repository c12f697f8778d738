"""Settings API endpoints."""
import logging

from fastapi import APIRouter, Depends, HTTPException

from ..schemas.settings import SettingsResponse, SettingsUpdate, StatusOverrideUpdate
from ..services.scheduler import SchedulerService, get_scheduler
from ..services.store import MonitorStore, StoreError, get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/settings", tags=["settings"])

NULLABLE_FIELDS = ("channel_id", "keepalive_url")


@router.get("", response_model=SettingsResponse)
async def get_settings(store: MonitorStore = Depends(get_store)):
    """Get the probe settings."""
    try:
        row = await store.get_settings()
    except StoreError:
        raise HTTPException(status_code=500, detail="Could not read settings")
    return SettingsResponse.model_validate(row)


@router.put("", response_model=SettingsResponse)
async def update_settings(
    update: SettingsUpdate,
    store: MonitorStore = Depends(get_store),
    scheduler: SchedulerService = Depends(get_scheduler),
):
    """Update the probe settings and restart the probe timer."""
    changes = {}
    for key, value in update.model_dump(exclude_unset=True).items():
        if key in NULLABLE_FIELDS:
            # Empty strings clear the optional fields
            changes[key] = value or None
        elif value is not None:
            changes[key] = value

    try:
        row = await store.update_settings(**changes)
    except StoreError:
        raise HTTPException(status_code=500, detail="Could not save settings")

    await scheduler.restart()
    return SettingsResponse.model_validate(row)


@router.put("/override", response_model=SettingsResponse)
async def set_status_override(
    update: StatusOverrideUpdate,
    store: MonitorStore = Depends(get_store),
):
    """Set or clear the manual status override."""
    try:
        row = await store.set_status_override(update.status)
    except StoreError:
        raise HTTPException(status_code=500, detail="Could not save override")
    logger.info(f"Status override set to {row.status_override!r}")
    return SettingsResponse.model_validate(row)
