import logging
import os
from datetime import datetime
from pathlib import Path

# Empty string disables the per-run log file (console only)
LOG_DIR_ENV_KEY = "YTLIVE_LOG_DIR"
DEFAULT_LOG_DIR = "logs"

_LOGGERS = {}
_LOGFILES = {}


def _logfile_for(runtime: str):
    """
    One log file per runtime per process run, shared by every logger of
    that runtime.
    """
    if runtime in _LOGFILES:
        return _LOGFILES[runtime]

    log_dir = os.getenv(LOG_DIR_ENV_KEY, DEFAULT_LOG_DIR)
    if not log_dir:
        _LOGFILES[runtime] = None
        return None

    path = Path(log_dir)
    path.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    _LOGFILES[runtime] = path / f"{runtime}-{timestamp}.log"
    return _LOGFILES[runtime]


def get_logger(
    name: str,
    *,
    runtime: str = "ytlive",
) -> logging.Logger:
    """
    Create or retrieve a named logger.

    Parameters:
    - name: logger namespace (e.g. core.sync, youtube.broadcasts)
    - runtime: log file prefix (ytlive | cli)
    """
    cache_key = f"{runtime}:{name}"
    if cache_key in _LOGGERS:
        return _LOGGERS[cache_key]

    logger = logging.getLogger(cache_key)
    logger.setLevel(logging.DEBUG)

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )

    # ------------------------------
    # Console handler
    # ------------------------------
    console = logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)

    # ------------------------------
    # File handler (one per run)
    # ------------------------------
    logfile = _logfile_for(runtime)
    if logfile is not None:
        file_handler = logging.FileHandler(logfile, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    _LOGGERS[cache_key] = logger

    return logger
