"""Response correlator - waits for the target bot to answer a probe."""
import asyncio
import logging
import re
from typing import Optional

from .messaging import InboundMessage, MessageStream, message_hub

logger = logging.getLogger(__name__)


def matches_response(pattern: str, body: str) -> bool:
    """Case-insensitive regex match, falling back to substring for invalid patterns.

    Operators may enter either an expression (``pong|alive``) or a plain word
    that happens not to be valid regex syntax (``:)``).
    """
    body = body or ""
    try:
        compiled = re.compile(pattern, re.IGNORECASE)
    except re.error:
        return pattern.lower() in body.lower()
    return compiled.search(body) is not None


class ResponseWaiter:
    """A subscription armed before the probe is sent.

    Replies that arrive while the send is still in flight are kept, so a
    fast bot cannot answer before anyone is listening.
    """

    def __init__(self, stream: MessageStream, expected_author_id: str, pattern: str):
        self.expected_author_id = str(expected_author_id)
        self.pattern = pattern
        self._matched: asyncio.Future = asyncio.get_running_loop().create_future()
        self._released = False
        self._unsubscribe = stream.subscribe(self._on_message)

    @property
    def released(self) -> bool:
        return self._released

    def _on_message(self, message: InboundMessage):
        if self._matched.done():
            return
        if str(message.author_id) != self.expected_author_id:
            return
        if matches_response(self.pattern, message.body):
            self._matched.set_result(True)
            # Release before any other message is delivered
            self.release()

    def release(self):
        """Drop the subscription. Safe to call more than once."""
        if not self._released:
            self._released = True
            self._unsubscribe()

    async def wait(self, timeout_ms: int) -> bool:
        """True on a match, False once ``timeout_ms`` elapses. Always releases."""
        try:
            return await asyncio.wait_for(self._matched, timeout=timeout_ms / 1000)
        except asyncio.TimeoutError:
            logger.debug(f"No response matching '{self.pattern}' within {timeout_ms}ms")
            return False
        finally:
            self.release()


class ResponseCorrelator:
    """Races the next matching inbound message against a timeout."""

    def __init__(self, stream: Optional[MessageStream] = None):
        self.stream = stream or message_hub

    def arm(self, expected_author_id: str, pattern: str) -> ResponseWaiter:
        """Start listening now. Call ``wait`` on the result once the probe is out."""
        return ResponseWaiter(self.stream, expected_author_id, pattern)

    async def await_match(self, expected_author_id: str, pattern: str, timeout_ms: int) -> bool:
        """Resolve True on the first matching message from ``expected_author_id``.

        Resolves False once ``timeout_ms`` elapses without a match. The
        subscription only lives for the duration of the call and is released
        exactly once.
        """
        return await self.arm(expected_author_id, pattern).wait(timeout_ms)


# Global instance
response_correlator = ResponseCorrelator()
