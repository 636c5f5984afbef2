"""Manifest change events.

File-system changes to manifests are modelled as messages on an asyncio
queue rather than callbacks, so the workspace logic does not depend on any
particular watcher implementation. A watcher (or a test) publishes events;
a consumer task delivers them to a handler in order.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    CREATED = "created"
    CHANGED = "changed"
    DELETED = "deleted"


@dataclass(frozen=True)
class ManifestEvent:
    """A change to one manifest file.

    Attributes:
        kind: What happened to the file.
        path: Path of the pubspec.yaml that changed.
    """

    kind: EventKind
    path: Path

    @property
    def project_dir(self) -> Path:
        return self.path.parent


EventHandler = Callable[[ManifestEvent], Awaitable[None]]


class EventChannel:
    """FIFO channel of manifest events terminated by close()."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[Optional[ManifestEvent]] = asyncio.Queue()

    def publish(self, event: ManifestEvent) -> None:
        self._queue.put_nowait(event)

    def close(self) -> None:
        """Stop the consumer once the events already queued are handled."""
        self._queue.put_nowait(None)

    async def consume(self, handler: EventHandler) -> int:
        """Deliver events to ``handler`` until the channel is closed.

        A handler failure is logged and does not stop delivery of later
        events.

        Returns:
            Number of events delivered.
        """
        delivered = 0
        while True:
            event = await self._queue.get()
            try:
                if event is None:
                    return delivered
                try:
                    await handler(event)
                except Exception:
                    logger.exception("Error handling %s event for %s", event.kind.value, event.path)
                delivered += 1
            finally:
                self._queue.task_done()
