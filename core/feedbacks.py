"""Read-only feedback values derived from the cache snapshot.

These are the values a control surface shows on its buttons: the lifecycle
status of a broadcast and the health of the stream bound to it. Ids accept
the `current`/`live` sentinel, resolved like the "advance to next phase"
action so a single button can follow whatever is on air.
"""

from __future__ import annotations

from typing import Dict, Optional

from core.resolver import is_implicit_target, resolve_implicit
from shared.broadcasts.models import BroadcastLifecycle, StateMemory, StreamHealth


def _resolve(memory: StateMemory, broadcast_id: Optional[str]) -> Optional[str]:
    if is_implicit_target(broadcast_id):
        return resolve_implicit("toggle_broadcast", memory)
    return broadcast_id


def broadcast_status(
    memory: StateMemory, broadcast_id: Optional[str]
) -> Optional[BroadcastLifecycle]:
    broadcast = memory.broadcasts.get(_resolve(memory, broadcast_id) or "")
    return broadcast.status if broadcast else None


def stream_health(
    memory: StateMemory, broadcast_id: Optional[str]
) -> Optional[StreamHealth]:
    broadcast = memory.broadcasts.get(_resolve(memory, broadcast_id) or "")
    if broadcast is None or not broadcast.bound_stream_id:
        return None
    stream = memory.streams.get(broadcast.bound_stream_id)
    return stream.health if stream else None


def status_summary(memory: StateMemory) -> Dict[BroadcastLifecycle, int]:
    counts = {status: 0 for status in BroadcastLifecycle}
    for broadcast in memory.broadcasts.values():
        counts[broadcast.status] += 1
    return counts
