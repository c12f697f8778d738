"""Database models."""
from .settings import MonitorSettings
from .check_record import CheckRecord
from .incident import Incident
from .alert import Alert

__all__ = ["MonitorSettings", "CheckRecord", "Incident", "Alert"]
