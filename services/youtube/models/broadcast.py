from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from shared.broadcasts.models import (
    Broadcast,
    BroadcastLifecycle,
    Stream,
    StreamHealth,
    parse_timestamp,
)
from shared.logging.logger import get_logger

log = get_logger("youtube.models")


@dataclass(frozen=True)
class BroadcastStatusUpdate:
    """
    Lightweight status carrier for feedback refreshes.

    Only the fields that change during a broadcast's lifetime are kept.
    """

    id: str
    status: BroadcastLifecycle
    actual_start_time: Optional[datetime] = None


def normalize_broadcast(item: Dict[str, Any]) -> Optional[Broadcast]:
    """
    Convert a liveBroadcast resource into a Broadcast.

    Returns None for resources without an id or with an unknown lifecycle.
    """
    broadcast_id = item.get("id")
    if not broadcast_id:
        return None

    snippet = item.get("snippet") or {}
    status = item.get("status") or {}
    content = item.get("contentDetails") or {}

    lifecycle = BroadcastLifecycle.from_value(status.get("lifeCycleStatus"))
    if lifecycle is None:
        log.warning(
            f"[{broadcast_id}] Skipping broadcast with unknown lifecycle "
            f"'{status.get('lifeCycleStatus')}'"
        )
        return None

    return Broadcast(
        id=broadcast_id,
        name=snippet.get("title") or broadcast_id,
        status=lifecycle,
        scheduled_start_time=parse_timestamp(snippet.get("scheduledStartTime")),
        actual_start_time=parse_timestamp(snippet.get("actualStartTime")),
        bound_stream_id=content.get("boundStreamId") or None,
    )


def normalize_status(item: Dict[str, Any]) -> Optional[BroadcastStatusUpdate]:
    broadcast_id = item.get("id")
    if not broadcast_id:
        return None

    lifecycle = BroadcastLifecycle.from_value(
        (item.get("status") or {}).get("lifeCycleStatus")
    )
    if lifecycle is None:
        return None

    return BroadcastStatusUpdate(
        id=broadcast_id,
        status=lifecycle,
        actual_start_time=parse_timestamp(
            (item.get("snippet") or {}).get("actualStartTime")
        ),
    )


def normalize_stream(item: Dict[str, Any]) -> Optional[Stream]:
    stream_id = item.get("id")
    if not stream_id:
        return None

    health = ((item.get("status") or {}).get("healthStatus") or {}).get("status")
    return Stream(id=stream_id, health=StreamHealth.from_value(health))
