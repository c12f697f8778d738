"""CheckRecord model - one row per completed probe cycle."""
from datetime import datetime
from sqlalchemy import Column, Integer, Boolean, DateTime

from ..database import Base


class CheckRecord(Base):
    """Outcome of a single probe cycle. Append-only."""

    __tablename__ = "check_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    checked_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    up = Column(Boolean, nullable=False)
