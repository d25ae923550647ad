"""
Error kinds raised by the broadcast control core.

Local validation errors (unknown/undefined id, unknown action, toggling a
finished broadcast) are raised before any network call. Remote and refresh
failures wrap the collaborator error that caused them.
"""

from __future__ import annotations

from typing import Optional


class BroadcastControlError(RuntimeError):
    """Base class for every error surfaced by the control core."""


class UnknownBroadcastId(BroadcastControlError):
    """Explicit or resolved broadcast id is not present in the cache."""

    def __init__(self, broadcast_id: Optional[str], action: Optional[str] = None):
        self.broadcast_id = broadcast_id
        self.action = action
        if broadcast_id:
            msg = f"Action has unknown broadcast ID: {broadcast_id}"
        else:
            msg = "Action has unknown broadcast ID: no matching broadcast"
        if action:
            msg = f"{msg} (action={action})"
        super().__init__(msg)


class UndefinedBroadcastId(BroadcastControlError):
    """Action requires a target broadcast but none was given."""

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"Action has undefined broadcast ID (action={action})")


class UnknownAction(BroadcastControlError):
    """Action name does not map to any known action kind."""

    def __init__(self, action: object):
        self.action = action
        super().__init__(f"unknown action called: {action}")


class BroadcastAlreadyComplete(BroadcastControlError):
    """Broadcast has no next lifecycle phase."""

    def __init__(self, broadcast_id: str):
        self.broadcast_id = broadcast_id
        super().__init__(f"Broadcast {broadcast_id} is already complete")


class RemoteTransitionFailure(BroadcastControlError):
    """The remote service rejected a lifecycle transition."""

    def __init__(
        self,
        broadcast_id: str,
        target: str,
        reason: str,
        *,
        status_code: Optional[int] = None,
    ):
        self.broadcast_id = broadcast_id
        self.target = target
        self.reason = reason
        self.status_code = status_code
        super().__init__(
            f"Transition of {broadcast_id} to '{target}' failed: {reason}"
        )


class RefreshFailure(BroadcastControlError):
    """Listing broadcasts or streams failed; the cache was left untouched."""
