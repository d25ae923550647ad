"""
Action dispatch for the control surface.

Raw action names are parsed into ActionKind at the boundary; everything past
that point works on the closed enum. Validation (action name, target id) is
completed before the handler is awaited, so a rejected action never reaches
the network.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

from core.errors import UndefinedBroadcastId, UnknownAction, UnknownBroadcastId
from core.resolver import is_implicit_target, resolve_implicit
from shared.broadcasts.models import StateMemory
from shared.logging.logger import get_logger

log = get_logger("core.actions")

BROADCAST_ID_OPTION = "broadcast_id"


class ActionKind(Enum):
    INIT_BROADCAST = "init_broadcast"
    START_BROADCAST = "start_broadcast"
    STOP_BROADCAST = "stop_broadcast"
    TOGGLE_BROADCAST = "toggle_broadcast"
    REFRESH_STATUS = "refresh_status"
    REFRESH_FEEDBACKS = "refresh_feedbacks"

    @classmethod
    def parse(cls, value: Any) -> "ActionKind":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if normalized == member.value:
                    return member
        raise UnknownAction(value)

    @property
    def requires_target(self) -> bool:
        return self not in (ActionKind.REFRESH_STATUS, ActionKind.REFRESH_FEEDBACKS)


ACTION_LABELS: Dict[ActionKind, str] = {
    ActionKind.INIT_BROADCAST: "Start broadcast test",
    ActionKind.START_BROADCAST: "Go live",
    ActionKind.STOP_BROADCAST: "Finish broadcast",
    ActionKind.TOGGLE_BROADCAST: "Advance broadcast to next phase",
    ActionKind.REFRESH_FEEDBACKS: "Refresh broadcast/stream feedbacks",
    ActionKind.REFRESH_STATUS: "Reload everything from YouTube",
}


@dataclass
class ActionEvent:
    action: str
    options: Dict[str, Any] = field(default_factory=dict)


class ActionHandler(ABC):
    """
    Implementation of the module actions.
    """

    @abstractmethod
    async def start_broadcast_test(self, broadcast_id: str) -> None:
        """Transition broadcast to the "testing" state (from "ready")."""
        raise NotImplementedError

    @abstractmethod
    async def make_broadcast_live(self, broadcast_id: str) -> None:
        """Transition broadcast to the "live" state (from "testing" or "ready")."""
        raise NotImplementedError

    @abstractmethod
    async def finish_broadcast(self, broadcast_id: str) -> None:
        """Transition broadcast to the "complete" state (from "live")."""
        raise NotImplementedError

    @abstractmethod
    async def toggle_broadcast(self, broadcast_id: str) -> None:
        """Transition broadcast to the next state (ready -> testing -> live -> complete)."""
        raise NotImplementedError

    @abstractmethod
    async def reload_everything(self) -> None:
        """Reload the broadcast list."""
        raise NotImplementedError

    @abstractmethod
    async def refresh_feedbacks(self) -> None:
        """Refresh broadcast status and stream health."""
        raise NotImplementedError


def _targeted(
    handler: ActionHandler, kind: ActionKind
) -> Callable[[str], Awaitable[None]]:
    table: Dict[ActionKind, Callable[[str], Awaitable[None]]] = {
        ActionKind.INIT_BROADCAST: handler.start_broadcast_test,
        ActionKind.START_BROADCAST: handler.make_broadcast_live,
        ActionKind.STOP_BROADCAST: handler.finish_broadcast,
        ActionKind.TOGGLE_BROADCAST: handler.toggle_broadcast,
    }
    return table[kind]


def _untargeted(
    handler: ActionHandler, kind: ActionKind
) -> Callable[[], Awaitable[None]]:
    table: Dict[ActionKind, Callable[[], Awaitable[None]]] = {
        ActionKind.REFRESH_STATUS: handler.reload_everything,
        ActionKind.REFRESH_FEEDBACKS: handler.refresh_feedbacks,
    }
    return table[kind]


def resolve_target(
    kind: ActionKind,
    options: Optional[Dict[str, Any]],
    memory: StateMemory,
    *,
    implicit_on_empty: bool = True,
) -> Optional[str]:
    """
    Return the broadcast id an action applies to (None for untargeted
    actions), raising the matching validation error otherwise.
    """
    if not kind.requires_target:
        return None

    raw = (options or {}).get(BROADCAST_ID_OPTION)

    if raw is None or (isinstance(raw, str) and not raw.strip()):
        if not implicit_on_empty:
            raise UndefinedBroadcastId(kind.value)
        implicit = True
    elif not isinstance(raw, str):
        raise UndefinedBroadcastId(kind.value)
    else:
        implicit = is_implicit_target(raw)

    if implicit:
        broadcast_id = resolve_implicit(kind.value, memory)
        if broadcast_id is None:
            raise UnknownBroadcastId(None, kind.value)
        log.debug(f"[{broadcast_id}] Resolved implicit target for {kind.value}")
        return broadcast_id

    broadcast_id = raw.strip()
    if broadcast_id not in memory.broadcasts:
        raise UnknownBroadcastId(broadcast_id, kind.value)
    return broadcast_id


async def handle_action(
    event: ActionEvent,
    memory: StateMemory,
    handler: ActionHandler,
    *,
    implicit_on_empty: bool = True,
) -> None:
    """
    Redirect an action event to the appropriate handler operation.

    `memory` is the cache snapshot the target is resolved against; handler
    failures propagate to the caller unchanged.
    """
    kind = ActionKind.parse(event.action)
    broadcast_id = resolve_target(
        kind, event.options, memory, implicit_on_empty=implicit_on_empty
    )

    if broadcast_id is None:
        log.info(f"Running {kind.value} ({ACTION_LABELS[kind]})")
        await _untargeted(handler, kind)()
        return

    log.info(f"[{broadcast_id}] Running {kind.value} ({ACTION_LABELS[kind]})")
    await _targeted(handler, kind)(broadcast_id)
