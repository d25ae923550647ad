from typing import Iterable, List, Optional

from shared.broadcasts.models import Broadcast, StateMemory, Stream
from shared.logging.logger import get_logger

log = get_logger("core.cache")


class BroadcastCache:
    """
    Process-wide holder of the latest known broadcasts and streams.

    Single writer: only the sync engine calls replace()/clear(). Every change
    installs a fully built StateMemory in one assignment, so a reader that
    grabbed `memory` keeps a consistent snapshot across awaits.
    """

    def __init__(self) -> None:
        self._memory: StateMemory = StateMemory.empty()
        self._version = 0

    # ------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------

    @property
    def memory(self) -> StateMemory:
        return self._memory

    @property
    def version(self) -> int:
        return self._version

    def get_broadcast(self, broadcast_id: str) -> Optional[Broadcast]:
        return self._memory.broadcasts.get(broadcast_id)

    def get_stream(self, stream_id: str) -> Optional[Stream]:
        return self._memory.streams.get(stream_id)

    def list_broadcasts(self) -> List[Broadcast]:
        return list(self._memory.broadcasts.values())

    def list_streams(self) -> List[Stream]:
        return list(self._memory.streams.values())

    # ------------------------------------------------------------
    # Bulk mutators (sync engine only)
    # ------------------------------------------------------------

    def replace(
        self,
        broadcasts: Iterable[Broadcast],
        streams: Iterable[Stream],
    ) -> StateMemory:
        memory = StateMemory.build(broadcasts, streams)
        self._memory = memory
        self._version += 1
        log.debug(
            f"Cache replaced (version={self._version}, "
            f"broadcasts={len(memory.broadcasts)}, streams={len(memory.streams)})"
        )
        return memory

    def clear(self) -> None:
        self._memory = StateMemory.empty()
        self._version += 1
        log.debug("Cache cleared")
