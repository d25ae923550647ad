"""Shared test fixtures and helpers for the broadcast control tests."""

from __future__ import annotations

import os

# Console-only logging during tests (must be set before any logger exists)
os.environ["YTLIVE_LOG_DIR"] = ""

from datetime import datetime, timezone  # noqa: E402
from typing import Dict, Iterable, List, Optional, Tuple  # noqa: E402

import pytest  # noqa: E402

from core.actions import ActionHandler  # noqa: E402
from core.errors import RemoteTransitionFailure  # noqa: E402
from services.youtube.models.broadcast import BroadcastStatusUpdate  # noqa: E402
from shared.broadcasts.models import (  # noqa: E402
    Broadcast,
    BroadcastLifecycle,
    StateMemory,
    Stream,
    StreamHealth,
)


def at(hour: int, minute: int = 0) -> datetime:
    """A UTC timestamp on a fixed day."""
    return datetime(2026, 10, 18, hour, minute, tzinfo=timezone.utc)


def make_broadcast(
    broadcast_id: str,
    status: BroadcastLifecycle = BroadcastLifecycle.READY,
    *,
    scheduled: Optional[datetime] = None,
    actual: Optional[datetime] = None,
    stream: Optional[str] = None,
    name: Optional[str] = None,
) -> Broadcast:
    return Broadcast(
        id=broadcast_id,
        name=name or f"Broadcast {broadcast_id}",
        status=status,
        scheduled_start_time=scheduled,
        actual_start_time=actual,
        bound_stream_id=stream,
    )


def make_memory(
    broadcasts: Iterable[Broadcast], streams: Iterable[Stream] = ()
) -> StateMemory:
    return StateMemory.build(broadcasts, streams)


class FakeBroadcastAPI:
    """In-memory stand-in for YouTubeBroadcastAPI."""

    def __init__(
        self,
        broadcasts: Iterable[Broadcast] = (),
        streams: Iterable[Stream] = (),
    ) -> None:
        self.broadcasts: List[Broadcast] = list(broadcasts)
        self.streams: Dict[str, Stream] = {s.id: s for s in streams}
        self.transitions: List[Tuple[str, BroadcastLifecycle]] = []
        self.list_calls = 0
        self.fail_listing: Optional[Exception] = None
        self.reject_transition: Optional[str] = None

    async def list_broadcasts(self) -> List[Broadcast]:
        self.list_calls += 1
        if self.fail_listing:
            raise self.fail_listing
        return list(self.broadcasts)

    async def list_broadcast_statuses(self, ids) -> List[BroadcastStatusUpdate]:
        if self.fail_listing:
            raise self.fail_listing
        wanted = set(ids)
        return [
            BroadcastStatusUpdate(b.id, b.status, b.actual_start_time)
            for b in self.broadcasts
            if b.id in wanted
        ]

    async def list_streams(self, ids) -> List[Stream]:
        if self.fail_listing:
            raise self.fail_listing
        return [self.streams[i] for i in ids if i in self.streams]

    async def transition(self, broadcast_id: str, target: BroadcastLifecycle) -> None:
        self.transitions.append((broadcast_id, target))
        if self.reject_transition:
            raise RemoteTransitionFailure(
                broadcast_id, target.value, self.reject_transition, status_code=403
            )
        self.broadcasts = [
            Broadcast(
                id=b.id,
                name=b.name,
                status=target,
                scheduled_start_time=b.scheduled_start_time,
                actual_start_time=b.actual_start_time
                or (at(12) if target != BroadcastLifecycle.COMPLETE else None),
                bound_stream_id=b.bound_stream_id,
            )
            if b.id == broadcast_id
            else b
            for b in self.broadcasts
        ]


class RecordingHandler(ActionHandler):
    """ActionHandler that records which operation was called with which id."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, Optional[str]]] = []

    async def start_broadcast_test(self, broadcast_id: str) -> None:
        self.calls.append(("start_broadcast_test", broadcast_id))

    async def make_broadcast_live(self, broadcast_id: str) -> None:
        self.calls.append(("make_broadcast_live", broadcast_id))

    async def finish_broadcast(self, broadcast_id: str) -> None:
        self.calls.append(("finish_broadcast", broadcast_id))

    async def toggle_broadcast(self, broadcast_id: str) -> None:
        self.calls.append(("toggle_broadcast", broadcast_id))

    async def reload_everything(self) -> None:
        self.calls.append(("reload_everything", None))

    async def refresh_feedbacks(self) -> None:
        self.calls.append(("refresh_feedbacks", None))


@pytest.fixture
def handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def healthy_stream() -> Stream:
    return Stream(id="stream-1", health=StreamHealth.GOOD)
