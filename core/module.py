import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from core.actions import ActionEvent, handle_action
from core.cache import BroadcastCache
from core.controller import BroadcastController
from core.errors import BroadcastControlError
from core.sync import BroadcastSync
from services.youtube.api.broadcasts import YouTubeBroadcastAPI
from services.youtube.auth import CredentialsProvider, EnvTokenProvider
from shared.config.youtube import YouTubeControlConfig
from shared.logging.logger import get_logger

log = get_logger("core.module")


class ModuleStatus(Enum):
    OK = "ok"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class StatusReport:
    status: ModuleStatus
    message: Optional[str] = None


class BroadcastModule:
    """
    Host-facing instance of the broadcast control runtime.

    Responsibilities:
    - Wire config, credentials, API client, cache, sync engine and controller
    - Turn every action failure into a log line + status, never a crash
    - Own the background feedback poller
    """

    def __init__(
        self,
        config: Optional[YouTubeControlConfig] = None,
        *,
        credentials: Optional[CredentialsProvider] = None,
        api=None,
    ):
        self.config = config or YouTubeControlConfig()
        self._credentials = credentials
        self._api_override = api

        self.cache = BroadcastCache()
        self.api = None
        self.sync: Optional[BroadcastSync] = None
        self.controller: Optional[BroadcastController] = None

        self.status = StatusReport(ModuleStatus.WARNING, "Not initialized")
        self.last_error: Optional[str] = None

        self._poll_stop = asyncio.Event()
        self._poll_task: Optional[asyncio.Task] = None

    # ------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------

    def _set_status(self, status: ModuleStatus, message: Optional[str] = None) -> None:
        self.status = StatusReport(status, message)

    async def init(self) -> bool:
        log.debug("Initializing YouTube broadcast module")
        self._set_status(ModuleStatus.WARNING, "Initializing")

        self.api = self._api_override or YouTubeBroadcastAPI(
            credentials=self._credentials
            or EnvTokenProvider(self.config.access_token_env_key),
            base_url=self.config.api_base_url,
            timeout=self.config.request_timeout_seconds,
            page_size=self.config.page_size,
        )
        self.sync = BroadcastSync(api=self.api, cache=self.cache)
        self.controller = BroadcastController(
            api=self.api, cache=self.cache, sync=self.sync
        )

        try:
            await self.sync.reload_everything()
        except BroadcastControlError as e:
            log.warning(f"YT broadcast query failed: {e}")
            self._set_status(ModuleStatus.ERROR, f"YT broadcast query failed: {e}")
            self.last_error = str(e)
            return False

        log.info("YT module initialized successfully")
        self._set_status(ModuleStatus.OK)
        return True

    async def update_config(self, config: YouTubeControlConfig) -> bool:
        log.info("Configuration updated; restarting module")
        self.config = config
        await self.destroy()
        return await self.init()

    async def destroy(self) -> None:
        await self.stop_polling()
        self.cache.clear()
        self.api = None
        self.sync = None
        self.controller = None
        self._set_status(ModuleStatus.WARNING, "Stopped")

    # ------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------

    async def action(self, event: ActionEvent) -> bool:
        """
        Run one action event. Returns False (and logs why) on any failure.
        """
        if self.controller is None:
            log.warning(f"Action {event.action} ignored: module not initialized")
            self.last_error = "Module not initialized"
            return False

        try:
            await handle_action(
                event,
                self.cache.memory,
                self.controller,
                implicit_on_empty=self.config.implicit_target_on_empty,
            )
        except BroadcastControlError as e:
            log.warning(f"Action {event.action} failed: {e}")
            self.last_error = str(e)
            return False
        except Exception as e:
            log.error(f"Action {event.action} failed unexpectedly: {e}")
            self.last_error = str(e)
            return False

        self.last_error = None
        if self.status.status != ModuleStatus.OK:
            self._set_status(ModuleStatus.OK)
        return True

    # ------------------------------------------------------------
    # Feedback polling
    # ------------------------------------------------------------

    def start_polling(self) -> Optional[asyncio.Task]:
        interval = self.config.feedback_interval_seconds
        if self.sync is None or interval <= 0:
            return None
        if self._poll_task and not self._poll_task.done():
            return self._poll_task

        self._poll_stop = asyncio.Event()
        self._poll_task = asyncio.create_task(
            self.sync.poll_feedbacks(self._poll_stop, interval)
        )
        return self._poll_task

    async def stop_polling(self) -> None:
        task = self._poll_task
        self._poll_task = None
        if task is None:
            return

        self._poll_stop.set()
        try:
            await task
        except asyncio.CancelledError:
            pass
