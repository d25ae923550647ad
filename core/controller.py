from core.actions import ActionHandler
from core.cache import BroadcastCache
from core.errors import BroadcastAlreadyComplete, RefreshFailure, UnknownBroadcastId
from core.sync import BroadcastSync
from shared.broadcasts.models import BroadcastLifecycle
from shared.logging.logger import get_logger

log = get_logger("core.controller")


class BroadcastController(ActionHandler):
    """
    Lifecycle operations backed by the YouTube API and the sync engine.

    Source states are not pre-validated: YouTube rejects illegal transitions
    and the rejection propagates as RemoteTransitionFailure. The cache only
    changes through the reload that follows a confirmed transition.
    """

    def __init__(self, *, api, cache: BroadcastCache, sync: BroadcastSync):
        self.api = api
        self.cache = cache
        self.sync = sync

    # ------------------------------------------------------------
    # Lifecycle transitions
    # ------------------------------------------------------------

    async def start_broadcast_test(self, broadcast_id: str) -> None:
        await self._transition(broadcast_id, BroadcastLifecycle.TESTING)

    async def make_broadcast_live(self, broadcast_id: str) -> None:
        await self._transition(broadcast_id, BroadcastLifecycle.LIVE)

    async def finish_broadcast(self, broadcast_id: str) -> None:
        await self._transition(broadcast_id, BroadcastLifecycle.COMPLETE)

    async def toggle_broadcast(self, broadcast_id: str) -> None:
        broadcast = self.cache.get_broadcast(broadcast_id)
        if broadcast is None:
            raise UnknownBroadcastId(broadcast_id, "toggle_broadcast")

        target = broadcast.status.next()
        if target is None:
            raise BroadcastAlreadyComplete(broadcast_id)

        log.debug(
            f"[{broadcast_id}] Advancing {broadcast.status.value} -> {target.value}"
        )
        await self._transition(broadcast_id, target)

    # ------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------

    async def reload_everything(self) -> None:
        await self.sync.reload_everything()

    async def refresh_feedbacks(self) -> None:
        await self.sync.refresh_feedbacks()

    # ------------------------------------------------------------

    async def _transition(self, broadcast_id: str, target: BroadcastLifecycle) -> None:
        await self.api.transition(broadcast_id, target)

        try:
            await self.sync.reload_everything()
        except RefreshFailure as e:
            # Transition itself was confirmed; next refresh will catch up
            log.warning(
                f"[{broadcast_id}] Reload after transition to '{target.value}' failed: {e}"
            )
