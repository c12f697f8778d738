"""Alert model - log of sent owner notifications."""
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime

from ..database import Base


class Alert(Base):
    """Record of a direct message sent to the owner."""

    __tablename__ = "alerts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    alert_type = Column(String, nullable=False)  # down, up
    sent_at = Column(DateTime, default=datetime.utcnow)
    payload = Column(String, nullable=True)  # Message text
    success = Column(Integer, nullable=True)  # 1=success, 0=failed
