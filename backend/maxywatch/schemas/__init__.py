"""Pydantic schemas for API request/response models."""
from .settings import (
    SettingsResponse,
    SettingsUpdate,
    StatusOverrideUpdate,
)
from .status import (
    CurrentStatus,
    UptimeWindow,
    UptimeWindows,
    DailyUptimeResponse,
    IncidentResponse,
    HealthSummary,
    RunCheckResponse,
)

__all__ = [
    "SettingsResponse",
    "SettingsUpdate",
    "StatusOverrideUpdate",
    "CurrentStatus",
    "UptimeWindow",
    "UptimeWindows",
    "DailyUptimeResponse",
    "IncidentResponse",
    "HealthSummary",
    "RunCheckResponse",
]
