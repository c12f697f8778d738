"""Status and uptime schemas for dashboard."""
from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel


class CurrentStatus(BaseModel):
    """Current status, override first."""
    status: str  # online, down, or the override text


class UptimeWindow(BaseModel):
    """Rolling uptime over a trailing window."""
    hours: float
    uptime: float  # Percentage


class UptimeWindows(BaseModel):
    """Standard dashboard windows."""
    uptime_24h: float
    uptime_7d: float
    uptime_30d: float


class DailyUptimeResponse(BaseModel):
    """Uptime for one UTC day."""
    day: date
    uptime: float
    checks: int

    class Config:
        from_attributes = True


class IncidentResponse(BaseModel):
    """A downtime span."""
    id: int
    start_ts: datetime
    end_ts: Optional[datetime] = None
    duration_seconds: Optional[int] = None

    class Config:
        from_attributes = True


class HealthSummary(BaseModel):
    """Plain-text health summary."""
    text: str


class RunCheckResponse(BaseModel):
    """Result of a manually triggered check."""
    ok: bool
    message: str
