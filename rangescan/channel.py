from __future__ import annotations

import asyncio
from typing import Optional

from rangescan.errors import ChannelFailure
from rangescan.models import ScanResult

_CLOSED = object()


class ResultSender:
    """One worker's handle on the shared intake. Close it when the worker is done."""

    def __init__(self, channel: "ResultChannel"):
        self._channel = channel
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, result: ScanResult) -> None:
        if self._closed:
            raise ChannelFailure(f"send on a closed sender: {result}")
        if self._channel.intake_closed:
            raise ChannelFailure(f"result intake closed with a pending result: {result}")
        await self._channel._queue.put(result)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if not self._channel.intake_closed:
            await self._channel._queue.put(_CLOSED)


class ResultChannel:
    """Many senders, one receiver. The stream ends once every sender has closed."""

    def __init__(self, maxsize: int = 0):
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._open_senders = 0
        self.intake_closed = False

    def sender(self) -> ResultSender:
        if self.intake_closed:
            raise ChannelFailure("cannot open a sender on a closed intake")
        self._open_senders += 1
        return ResultSender(self)

    @property
    def open_senders(self) -> int:
        return self._open_senders

    async def recv(self) -> Optional[ScanResult]:
        """Next result, or None when all senders are closed."""
        while self._open_senders > 0:
            item = await self._queue.get()
            if item is _CLOSED:
                self._open_senders -= 1
                continue
            return item
        return None

    def close(self) -> None:
        """Stop accepting results. Any later send raises ChannelFailure."""
        self.intake_closed = True
