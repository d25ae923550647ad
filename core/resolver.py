"""
Implicit ("current") broadcast resolution.

When the operator does not pick a broadcast, actions apply to the broadcast
that has been waiting longest in the relevant lifecycle state: earliest
scheduled start for READY, earliest actual start for TESTING/LIVE.
Broadcasts missing the relevant timestamp are never picked ahead of one that
has it.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from shared.broadcasts.models import Broadcast, BroadcastLifecycle, StateMemory

IMPLICIT_TARGETS = frozenset({"current", "live"})


class TieBreak(Enum):
    SCHEDULED_START = "scheduled_start_time"
    ACTUAL_START = "actual_start_time"

    def other(self) -> "TieBreak":
        if self is TieBreak.SCHEDULED_START:
            return TieBreak.ACTUAL_START
        return TieBreak.SCHEDULED_START

    @classmethod
    def for_status(cls, status: BroadcastLifecycle) -> "TieBreak":
        if status == BroadcastLifecycle.READY:
            return cls.SCHEDULED_START
        return cls.ACTUAL_START


# Lookup order per action: first status with a candidate wins
RESOLUTION_ORDER: Dict[str, Tuple[BroadcastLifecycle, ...]] = {
    "init_broadcast": (BroadcastLifecycle.READY,),
    "start_broadcast": (BroadcastLifecycle.TESTING, BroadcastLifecycle.READY),
    "stop_broadcast": (BroadcastLifecycle.LIVE,),
    "toggle_broadcast": (
        BroadcastLifecycle.LIVE,
        BroadcastLifecycle.TESTING,
        BroadcastLifecycle.READY,
    ),
}


def is_implicit_target(value: Any) -> bool:
    return isinstance(value, str) and value.strip().lower() in IMPLICIT_TARGETS


def _age_key(broadcast: Broadcast, tie_break: TieBreak) -> tuple:
    primary: Optional[datetime] = getattr(broadcast, tie_break.value)
    secondary: Optional[datetime] = getattr(broadcast, tie_break.other().value)
    # (missing?, value) pairs put missing timestamps last without inventing one
    return (
        primary is None,
        primary.timestamp() if primary else 0.0,
        secondary is None,
        secondary.timestamp() if secondary else 0.0,
        broadcast.id,
    )


def filter_broadcasts(
    memory: StateMemory,
    target_status: BroadcastLifecycle,
    tie_break: Optional[TieBreak] = None,
) -> Optional[str]:
    """
    Return the id of the oldest broadcast in `target_status`, or None.
    """
    tie_break = tie_break or TieBreak.for_status(target_status)
    candidates = [
        b for b in memory.broadcasts.values() if b.status == target_status
    ]
    if not candidates:
        return None

    return min(candidates, key=lambda b: _age_key(b, tie_break)).id


def resolve_implicit(action: str, memory: StateMemory) -> Optional[str]:
    """
    Pick the broadcast an action applies to when no explicit id was given.
    """
    for status in RESOLUTION_ORDER.get(action, ()):
        broadcast_id = filter_broadcasts(memory, status)
        if broadcast_id is not None:
            return broadcast_id
    return None
