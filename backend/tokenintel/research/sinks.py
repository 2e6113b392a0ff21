"""
Progress sinks for the research workflow
"""

import asyncio
from typing import Any, Dict, List, Optional, Protocol

_CLOSED = object()


class ProgressSink(Protocol):
    def send(self, message: Dict[str, Any]) -> None:
        ...


class QueueProgressSink:
    """
    Non-blocking sink backed by an ``asyncio.Queue``; iterate it to drain
    messages in emission order until ``close()``.
    """

    def __init__(self, queue: Optional[asyncio.Queue] = None):
        self.queue = queue or asyncio.Queue()

    def send(self, message: Dict[str, Any]) -> None:
        self.queue.put_nowait(message)

    def close(self) -> None:
        self.queue.put_nowait(_CLOSED)

    def __aiter__(self):
        return self

    async def __anext__(self) -> Dict[str, Any]:
        message = await self.queue.get()
        if message is _CLOSED:
            raise StopAsyncIteration
        return message


class ListProgressSink:
    """Collects messages in a list."""

    def __init__(self):
        self.messages: List[Dict[str, Any]] = []

    def send(self, message: Dict[str, Any]) -> None:
        self.messages.append(message)

    def close(self) -> None:
        pass
