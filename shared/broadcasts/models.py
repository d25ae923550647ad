"""Broadcast and stream state definitions.

This module centralizes the runtime's interpretation of YouTube broadcast
lifecycle and stream health. States are intentionally minimal and
feedback-friendly:

- READY    : Broadcast is scheduled and can be tested or started
- TESTING  : Broadcast is in preview (only visible to the owner)
- LIVE     : Broadcast is public and on air
- COMPLETE : Broadcast has ended (terminal)

Transitional remote states (testStarting, liveStarting) collapse into the
state they lead to, since the remote service already accepted the move.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional


class BroadcastLifecycle(Enum):
    READY = "ready"
    TESTING = "testing"
    LIVE = "live"
    COMPLETE = "complete"

    @classmethod
    def from_value(cls, value: Any) -> Optional["BroadcastLifecycle"]:
        if isinstance(value, cls):
            return value

        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if normalized in {member.name.lower(), member.value}:
                    return member
            return _REMOTE_LIFECYCLE_ALIASES.get(normalized)

        return None

    @property
    def rank(self) -> int:
        return _LIFECYCLE_ORDER.index(self)

    def next(self) -> Optional["BroadcastLifecycle"]:
        """Return the single forward successor, or None when terminal."""
        idx = self.rank + 1
        if idx >= len(_LIFECYCLE_ORDER):
            return None
        return _LIFECYCLE_ORDER[idx]


_LIFECYCLE_ORDER = (
    BroadcastLifecycle.READY,
    BroadcastLifecycle.TESTING,
    BroadcastLifecycle.LIVE,
    BroadcastLifecycle.COMPLETE,
)

# Remote lifeCycleStatus values (lowercased) that are not member values
_REMOTE_LIFECYCLE_ALIASES: Dict[str, BroadcastLifecycle] = {
    "created": BroadcastLifecycle.READY,
    "teststarting": BroadcastLifecycle.TESTING,
    "livestarting": BroadcastLifecycle.LIVE,
    "revoked": BroadcastLifecycle.COMPLETE,
}


class StreamHealth(Enum):
    GOOD = "good"
    OK = "ok"
    BAD = "bad"
    NO_DATA = "noData"

    @classmethod
    def from_value(cls, value: Any) -> "StreamHealth":
        if isinstance(value, cls):
            return value

        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if normalized in {member.name.lower(), member.value.lower()}:
                    return member

        return cls.NO_DATA


@dataclass(frozen=True)
class Broadcast:
    id: str
    name: str
    status: BroadcastLifecycle
    scheduled_start_time: Optional[datetime] = None
    actual_start_time: Optional[datetime] = None
    bound_stream_id: Optional[str] = None


@dataclass(frozen=True)
class Stream:
    id: str
    health: StreamHealth = StreamHealth.NO_DATA


@dataclass(frozen=True)
class StateMemory:
    """
    Immutable snapshot of every known broadcast and stream.

    Mappings are read-only views; a new snapshot is built for every change.
    """

    broadcasts: Mapping[str, Broadcast]
    streams: Mapping[str, Stream]

    @classmethod
    def build(
        cls,
        broadcasts: Iterable[Broadcast],
        streams: Iterable[Stream],
    ) -> "StateMemory":
        return cls(
            broadcasts=MappingProxyType({b.id: b for b in broadcasts}),
            streams=MappingProxyType({s.id: s for s in streams}),
        )

    @classmethod
    def empty(cls) -> "StateMemory":
        return cls.build((), ())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StateMemory):
            return NotImplemented
        return dict(self.broadcasts) == dict(other.broadcasts) and dict(
            self.streams
        ) == dict(other.streams)

    def __hash__(self) -> int:
        return hash((frozenset(self.broadcasts.items()), frozenset(self.streams.items())))


def parse_timestamp(raw: Optional[str]) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp into an aware UTC datetime."""
    if not raw or not isinstance(raw, str):
        return None
    try:
        ts = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


__all__ = [
    "BroadcastLifecycle",
    "StreamHealth",
    "Broadcast",
    "Stream",
    "StateMemory",
    "parse_timestamp",
]
