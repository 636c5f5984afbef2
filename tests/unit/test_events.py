"""Unit tests for the manifest event channel."""

import asyncio
from pathlib import Path

from smart_pub.events import EventChannel, EventKind, ManifestEvent


def _event(kind: EventKind, name: str) -> ManifestEvent:
    return ManifestEvent(kind, Path("/work") / name / "pubspec.yaml")


def test_project_dir():
    assert _event(EventKind.CHANGED, "app").project_dir == Path("/work/app")


async def test_events_delivered_in_order():
    channel = EventChannel()
    seen = []

    async def handler(event):
        seen.append(event)

    events = [_event(EventKind.CREATED, "a"), _event(EventKind.CHANGED, "a"), _event(EventKind.DELETED, "a")]
    for event in events:
        channel.publish(event)
    channel.close()

    assert await channel.consume(handler) == 3
    assert seen == events


async def test_handler_failure_does_not_stop_delivery(caplog):
    channel = EventChannel()
    seen = []

    async def handler(event):
        if event.project_dir.name == "bad":
            raise RuntimeError("boom")
        seen.append(event.project_dir.name)

    channel.publish(_event(EventKind.CHANGED, "bad"))
    channel.publish(_event(EventKind.CHANGED, "good"))
    channel.close()

    assert await channel.consume(handler) == 2
    assert seen == ["good"]
    assert "Error handling changed event" in caplog.text


async def test_consumer_waits_for_events():
    channel = EventChannel()
    seen = []

    async def handler(event):
        seen.append(event.kind)

    consumer = asyncio.create_task(channel.consume(handler))
    await asyncio.sleep(0)
    channel.publish(_event(EventKind.CREATED, "late"))
    channel.close()

    assert await consumer == 1
    assert seen == [EventKind.CREATED]
