import argparse
import asyncio
import signal
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from core.actions import ACTION_LABELS, ActionEvent, ActionKind
from core.feedbacks import stream_health, status_summary
from core.module import BroadcastModule
from runtime.version import as_string
from shared.broadcasts.models import StateMemory
from shared.config.youtube import load_youtube_config
from shared.logging.logger import get_logger

log = get_logger("core.app", runtime="cli")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Drive YouTube Live broadcasts through their lifecycle"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to youtube.json (default: shared/config/youtube.json)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List known broadcasts with status and stream health")

    action = sub.add_parser(
        "action",
        help="Run one action",
        epilog="\n".join(f"{k.value}: {label}" for k, label in ACTION_LABELS.items()),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    action.add_argument("name", choices=[k.value for k in ActionKind])
    action.add_argument(
        "--broadcast-id",
        default="",
        help="Broadcast id, or 'current'/'live' for the implicit target",
    )

    sub.add_parser("watch", help="Poll feedbacks until interrupted")
    return parser.parse_args(argv)


def format_broadcasts(memory: StateMemory) -> str:
    lines = []
    for broadcast in memory.broadcasts.values():
        health = stream_health(memory, broadcast.id)
        scheduled = (
            broadcast.scheduled_start_time.isoformat()
            if broadcast.scheduled_start_time
            else "-"
        )
        lines.append(
            f"{broadcast.id}  {broadcast.status.value:<8}  "
            f"stream={health.value if health else '-':<6}  "
            f"scheduled={scheduled}  {broadcast.name}"
        )
    summary = ", ".join(
        f"{status.value}={count}" for status, count in status_summary(memory).items()
    )
    lines.append(f"({summary})")
    return "\n".join(lines)


async def main(args: argparse.Namespace, stop_event: asyncio.Event) -> int:
    # --------------------------------------------------
    # ENV + CONFIG
    # --------------------------------------------------
    load_dotenv()
    log.info(f"{as_string()} booting")

    config = load_youtube_config(path=args.config)
    module = BroadcastModule(config)

    if not await module.init():
        log.error(f"Initialization failed: {module.status.message}")
        return 1

    try:
        if args.command == "list":
            print(format_broadcasts(module.cache.memory))
            return 0

        if args.command == "action":
            ok = await module.action(
                ActionEvent(args.name, {"broadcast_id": args.broadcast_id})
            )
            if ok:
                print(format_broadcasts(module.cache.memory))
                return 0
            print(f"Action failed: {module.last_error}", file=sys.stderr)
            return 1

        # --------------------------------------------------
        # WATCH: BLOCK UNTIL SHUTDOWN SIGNAL
        # --------------------------------------------------
        module.start_polling()
        await stop_event.wait()
        log.info("Shutdown initiated")
        return 0

    finally:
        await module.destroy()
        log.info("YT Live Control stopped")


# ----------------------------------------------------------------------
# SIGNAL HANDLING (WINDOWS-SAFE)
# ----------------------------------------------------------------------

def _install_signal_handlers(
    loop: asyncio.AbstractEventLoop,
    stop_event: asyncio.Event,
):
    """
    Windows-safe Ctrl+C handler.
    Uses signal.signal + asyncio.Event to unwind cleanly.
    """

    def _handler(signum, frame):
        loop.call_soon_threadsafe(stop_event.set)

    try:
        signal.signal(signal.SIGINT, _handler)
        signal.signal(signal.SIGTERM, _handler)
    except (ValueError, OSError) as e:
        log.debug(f"Signal handlers not installed: {e}")


# ----------------------------------------------------------------------
# ENTRYPOINT
# ----------------------------------------------------------------------

def run(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    stop_event = asyncio.Event()

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    _install_signal_handlers(loop, stop_event)

    try:
        return loop.run_until_complete(main(args, stop_event))

    except KeyboardInterrupt:
        log.info("KeyboardInterrupt received; shutdown initiated")
        return 130

    finally:
        pending = [t for t in asyncio.all_tasks(loop) if not t.done()]
        for task in pending:
            task.cancel()

        if pending:
            loop.run_until_complete(
                asyncio.gather(*pending, return_exceptions=True)
            )

        loop.run_until_complete(loop.shutdown_asyncgens())
        asyncio.set_event_loop(None)
        loop.close()


if __name__ == "__main__":
    sys.exit(run())
