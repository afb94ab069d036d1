# confirmation.py
# One-at-a-time confirmation handshake between the executor and a human.
#
# The executor side awaits request(); the UI side awaits receive() and answers
# with respond(). close() is the only cancellation primitive: it declines
# whatever is pending and every request made afterwards.
#
# There is no timeout. A request stays pending until respond() or close().

import asyncio
import logging
from typing import Awaitable, Callable

from career_agent.models import ConfirmationRequest

logger = logging.getLogger(__name__)

ConfirmationHandler = Callable[[ConfirmationRequest], Awaitable[bool]]


class ConfirmationPendingError(Exception):
    """Raised when a second confirmation is requested while one is outstanding."""


class NoPendingConfirmationError(Exception):
    """Raised when respond() is called with nothing to answer."""


class ConfirmationChannel:
    """
    Paired request/response channel carrying at most one confirmation.

    Example:
        channel = ConfirmationChannel()
        executor = AgentExecutor(registry, provider,
                                 on_confirmation_request=channel.request)

        # elsewhere, on the UI side
        request = await channel.receive()
        channel.respond(approved=True)
    """

    def __init__(self) -> None:
        self._requests: asyncio.Queue[ConfirmationRequest | None] = asyncio.Queue()
        self._future: asyncio.Future[bool] | None = None
        self._pending: ConfirmationRequest | None = None
        self._closed = False

    @property
    def pending(self) -> ConfirmationRequest | None:
        return self._pending

    @property
    def closed(self) -> bool:
        return self._closed

    async def request(self, request: ConfirmationRequest) -> bool:
        """Publish a request and wait for the answer. False once closed."""
        if self._closed:
            logger.debug("Channel closed, declining %r", request.tool_name)
            return False
        if self._future is not None:
            raise ConfirmationPendingError(
                f"Confirmation for {self._pending.tool_name!r} is still pending."
            )

        self._future = asyncio.get_running_loop().create_future()
        self._pending = request
        self._requests.put_nowait(request)
        try:
            return await self._future
        finally:
            self._future = None
            self._pending = None

    async def receive(self) -> ConfirmationRequest | None:
        """Wait for the next request. None means the channel was closed."""
        while True:
            if self._closed and self._requests.empty():
                return None
            item = await self._requests.get()
            if item is None:
                # Leave the sentinel for any other receiver.
                self._requests.put_nowait(None)
                return None
            if item is self._pending:
                return item
            # Stale: already resolved by close() before anyone received it.

    def respond(self, approved: bool) -> None:
        if self._future is None or self._future.done():
            raise NoPendingConfirmationError("No confirmation is pending.")
        self._future.set_result(bool(approved))

    def close(self) -> None:
        """Decline anything pending and reject all later requests."""
        if self._closed:
            return
        self._closed = True
        if self._future is not None and not self._future.done():
            logger.info("Session closed, declining %r", self._pending.tool_name)
            self._future.set_result(False)
        self._requests.put_nowait(None)
