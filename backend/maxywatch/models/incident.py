"""Incident model - contiguous downtime spans."""
from datetime import datetime
from sqlalchemy import Column, Integer, DateTime

from ..database import Base


class Incident(Base):
    """A downtime span. ``end_ts`` is NULL while the incident is ongoing."""

    __tablename__ = "incidents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    start_ts = Column(DateTime, default=datetime.utcnow, nullable=False)
    end_ts = Column(DateTime, nullable=True)

    @property
    def is_open(self) -> bool:
        return self.end_ts is None

    @property
    def duration_seconds(self) -> int | None:
        """Whole seconds between start and end, None while ongoing."""
        if self.end_ts is None:
            return None
        return int((self.end_ts - self.start_ts).total_seconds())
