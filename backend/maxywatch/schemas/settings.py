"""Settings schemas for API."""
from typing import Optional, Literal
from pydantic import BaseModel, Field


class SettingsResponse(BaseModel):
    """Schema for settings response."""
    channel_id: Optional[str] = None
    probe_mode: str = "prefix"  # prefix, mention, raw
    command: str = ".ping"
    check_interval_seconds: int = 150
    response_timeout_ms: int = 5000
    response_match: str = "pong"  # Regex, or plain text if not a valid regex
    status_override: Optional[str] = None
    keepalive_url: Optional[str] = None
    keepalive_interval_seconds: int = 300

    class Config:
        from_attributes = True


class SettingsUpdate(BaseModel):
    """Schema for updating settings. Only fields that are sent are changed."""
    channel_id: Optional[str] = Field(None, max_length=32)
    probe_mode: Optional[Literal["prefix", "mention", "raw"]] = None
    command: Optional[str] = Field(None, min_length=1, max_length=200)
    check_interval_seconds: Optional[int] = Field(None, ge=10, le=86400)
    response_timeout_ms: Optional[int] = Field(None, ge=500, le=60000)
    response_match: Optional[str] = Field(None, min_length=1, max_length=200)
    keepalive_url: Optional[str] = Field(None, max_length=500)
    keepalive_interval_seconds: Optional[int] = Field(None, ge=60, le=86400)


class StatusOverrideUpdate(BaseModel):
    """Set or clear (null / empty) the status shown instead of the computed one."""
    status: Optional[str] = Field(None, max_length=50)
