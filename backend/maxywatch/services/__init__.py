"""Services for probing, scheduling, alerting and uptime reporting."""
from .store import MonitorStore, StoreError
from .messaging import InboundMessage, MessageHub
from .correlator import ResponseCorrelator
from .checker import CheckerService
from .transitions import TransitionPolicy
from .alerter import AlerterService
from .scheduler import SchedulerService
from .uptime import UptimeService
from .chat_commands import HealthCommandHandler

__all__ = [
    "MonitorStore",
    "StoreError",
    "InboundMessage",
    "MessageHub",
    "ResponseCorrelator",
    "CheckerService",
    "TransitionPolicy",
    "AlerterService",
    "SchedulerService",
    "UptimeService",
    "HealthCommandHandler",
]
