"""Single-publisher, multi-subscriber transcript snapshot stream."""

from __future__ import annotations

import asyncio
from typing import AsyncIterator

_CLOSED = object()


def _offer(queue: asyncio.Queue, snapshot: str) -> None:
    # every snapshot is the full transcript, so a newer one replaces the pending one
    if not queue.empty():
        queue.get_nowait()
    queue.put_nowait(snapshot)


class TranscriptBroadcast:
    """Fan out immutable transcript snapshots to any number of subscribers.

    Only the engine's state owner publishes. Each subscriber holds at most one
    pending snapshot, the latest; a late subscriber first receives the latest
    snapshot.
    """

    def __init__(self) -> None:
        self._queues: list[asyncio.Queue] = []
        self._latest: str | None = None
        self._closed = False
        self._error: BaseException | None = None

    @property
    def latest(self) -> str | None:
        return self._latest

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, snapshot: str) -> None:
        if self._closed:
            return
        self._latest = snapshot
        for queue in self._queues:
            _offer(queue, snapshot)

    def close(self, error: BaseException | None = None) -> None:
        """Complete every subscription; ``error`` is raised to subscribers if given."""
        if self._closed:
            return
        self._closed = True
        self._error = error
        for queue in self._queues:
            queue.put_nowait(_CLOSED)

    def subscribe(self) -> AsyncIterator[str]:
        # room for one pending snapshot plus the close marker
        queue: asyncio.Queue = asyncio.Queue(maxsize=2)
        if self._latest is not None:
            queue.put_nowait(self._latest)
        if self._closed:
            queue.put_nowait(_CLOSED)
        else:
            self._queues.append(queue)
        return self._drain(queue)

    async def _drain(self, queue: asyncio.Queue) -> AsyncIterator[str]:
        try:
            while True:
                item = await queue.get()
                if item is _CLOSED:
                    if self._error is not None:
                        raise self._error
                    return
                yield item
        finally:
            if queue in self._queues:
                self._queues.remove(queue)
