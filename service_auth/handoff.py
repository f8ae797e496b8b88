"""
One-Shot Handoff
================
Single-slot channel between the outbound-call worker and the request flow.

One producer, one consumer, exactly one value: a second ``send`` or a second
``receive`` is a programming error and raises ``HandoffError``.
"""

import asyncio
from typing import Generic, Optional, TypeVar

from .exceptions import HandoffError

T = TypeVar("T")


class OneShot(Generic[T]):
    """Capacity-one handoff closed by its single send."""

    def __init__(self):
        self._future: Optional[asyncio.Future] = None
        self._sent = False
        self._received = False

    def _get_future(self) -> asyncio.Future:
        if self._future is None:
            self._future = asyncio.get_running_loop().create_future()
        return self._future

    @property
    def closed(self) -> bool:
        """True once the value has been sent."""
        return self._sent

    def send(self, value: T) -> None:
        if self._sent:
            raise HandoffError("one-shot handoff already carries a value")
        self._sent = True
        self._get_future().set_result(value)

    async def receive(self) -> T:
        if self._received:
            raise HandoffError("one-shot handoff already consumed")
        self._received = True
        # A cancelled consumer must not cancel the producer's slot
        return await asyncio.shield(self._get_future())
