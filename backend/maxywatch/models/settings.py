"""Settings model - probe configuration edited from the dashboard."""
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint

from ..database import Base


class MonitorSettings(Base):
    """Single-row table holding the probe configuration (id is always 1)."""

    __tablename__ = "monitor_settings"
    __table_args__ = (CheckConstraint("id = 1", name="single_row"),)

    id = Column(Integer, primary_key=True, default=1)
    channel_id = Column(String, nullable=True)  # Channel the probe is sent to
    probe_mode = Column(String, default="prefix")  # prefix, mention, raw
    command = Column(String, default=".ping")
    check_interval_seconds = Column(Integer, default=150)
    response_timeout_ms = Column(Integer, default=5000)
    response_match = Column(String, default="pong")  # Regex or plain text
    status_override = Column(String, nullable=True)  # Shown instead of computed status
    keepalive_url = Column(String, nullable=True)
    keepalive_interval_seconds = Column(Integer, default=300)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


# Default settings
DEFAULT_SETTINGS = {
    "channel_id": None,
    "probe_mode": "prefix",
    "command": ".ping",
    "check_interval_seconds": 150,
    "response_timeout_ms": 5000,
    "response_match": "pong",
    "status_override": None,
    "keepalive_url": None,
    "keepalive_interval_seconds": 300,
}
