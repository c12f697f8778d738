"""Messaging capabilities the monitor depends on.

The monitor only needs three things from the chat platform: post a message
to a channel, direct-message a user, and observe inbound messages. The
Discord adapter in ``discord_gateway`` implements ``Messenger`` and publishes
inbound messages to a ``MessageHub``.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional, Protocol

logger = logging.getLogger(__name__)


@dataclass
class InboundMessage:
    """A message observed on the platform."""
    author_id: str
    body: str
    channel_id: Optional[str] = None
    author_is_bot: bool = False
    timestamp: datetime = field(default_factory=datetime.utcnow)


MessageHandler = Callable[[InboundMessage], None]
Unsubscribe = Callable[[], None]


class Messenger(Protocol):
    """Outbound messaging. Both methods return False instead of raising on delivery failure."""

    async def send_to_channel(self, channel_id: str, text: str) -> bool:
        ...

    async def send_direct_message(self, user_id: str, text: str) -> bool:
        ...


class MessageStream(Protocol):
    """Inbound message subscription."""

    def subscribe(self, handler: MessageHandler) -> Unsubscribe:
        ...


class MessageHub:
    """In-process fan-out of inbound messages to synchronous handlers.

    Handlers run inline in ``publish`` so a handler that resolves a waiter
    and unsubscribes does so before the next message is delivered.
    """

    def __init__(self):
        self._handlers: List[MessageHandler] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)

    def subscribe(self, handler: MessageHandler) -> Unsubscribe:
        self._handlers.append(handler)

        def unsubscribe():
            # Idempotent
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def publish(self, message: InboundMessage):
        for handler in list(self._handlers):
            try:
                handler(message)
            except Exception:
                logger.exception("Inbound message handler failed")


# Global instance
message_hub = MessageHub()
