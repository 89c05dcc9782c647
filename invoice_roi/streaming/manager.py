"""StreamManager -- per-session event buffering and SSE subscriber management."""

from __future__ import annotations

import asyncio
from collections import defaultdict
from typing import Any, AsyncGenerator, Optional

from .events import NotificationType, SSEEvent

# Pushed to subscriber queues when a session ends
_CLOSED = None


class StreamManager:
    """Manages SSE notification distribution for calculator sessions.

    Each open session_id has:
    - A list of subscriber queues (asyncio.Queue instances)
    - A buffer of all emitted events for replay on reconnect
    - A monotonically increasing sequence counter
    """

    def __init__(self) -> None:
        self._open: set[str] = set()
        self._subscribers: dict[str, list[asyncio.Queue[Optional[SSEEvent]]]] = defaultdict(list)
        self._buffers: dict[str, list[SSEEvent]] = defaultdict(list)
        self._sequences: dict[str, int] = defaultdict(int)

    def open(self, session_id: str) -> None:
        """Start accepting notifications for a session."""
        self._open.add(session_id)

    async def subscribe(self, session_id: str) -> asyncio.Queue[Optional[SSEEvent]]:
        """Create and return a new subscriber queue for a session."""
        queue: asyncio.Queue[Optional[SSEEvent]] = asyncio.Queue()
        self._subscribers[session_id].append(queue)
        return queue

    async def unsubscribe(
        self, session_id: str, queue: asyncio.Queue[Optional[SSEEvent]]
    ) -> None:
        """Remove a subscriber queue from a session."""
        subs = self._subscribers.get(session_id, [])
        if queue in subs:
            subs.remove(queue)

    async def emit(self, session_id: str, event: SSEEvent) -> None:
        """Broadcast an event to all subscribers and buffer it for replay."""
        self._buffers[session_id].append(event)
        for queue in self._subscribers[session_id]:
            await queue.put(event)

    async def notify(
        self, session_id: str, event_type: NotificationType, data: dict[str, Any]
    ) -> Optional[SSEEvent]:
        """Build the next event in the session's sequence and emit it.

        Sessions that were never opened, or already discarded, are skipped
        and None is returned.
        """
        if session_id not in self._open:
            return None
        self._sequences[session_id] += 1
        event = SSEEvent(
            event_type=event_type,
            data=data,
            sequence_id=self._sequences[session_id],
        )
        await self.emit(session_id, event)
        return event

    def history(self, session_id: str, after: int | None = None) -> list[SSEEvent]:
        """Buffered events for a session, oldest first, optionally after a sequence id."""
        events = self._buffers.get(session_id, [])
        if after is None:
            return list(events)
        return [e for e in events if e.sequence_id > after]

    def discard(self, session_id: str) -> None:
        """Close a finished session: end its streams and drop its buffer and counters."""
        self._open.discard(session_id)
        for queue in self._subscribers.pop(session_id, []):
            queue.put_nowait(_CLOSED)
        self._buffers.pop(session_id, None)
        self._sequences.pop(session_id, None)

    async def event_generator(
        self, session_id: str, last_event_id: int | None = None
    ) -> AsyncGenerator[str, None]:
        """Async generator yielding SSE strings for a session.

        If last_event_id is provided, replays buffered events with
        sequence_id > last_event_id before switching to live events.
        Returns once the session is discarded.
        """
        queue = await self.subscribe(session_id)
        try:
            # SSE comment as connection heartbeat (ignored by browsers)
            yield ": connected\n\n"

            if last_event_id is not None:
                for event in self.history(session_id, after=last_event_id):
                    yield event.to_sse_string()

            while True:
                event = await queue.get()
                if event is _CLOSED:
                    return
                yield event.to_sse_string()
        finally:
            await self.unsubscribe(session_id, queue)
