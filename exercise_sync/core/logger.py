"""Logger configuration for exercise sync.

Pipeline lines carry a bracketed step tag ("[SYNC]", "[DEDUP]", ...). A
step can be opened up to DEBUG on its own while the rest of the output
stays at the configured level.
"""

import sys
from collections.abc import Callable, Iterable
from pathlib import Path

from loguru import logger

PIPELINE_STEPS = ("SYNC", "DEDUP", "CONFLICTS", "RESOLUTION", "STORE")


def step_of(message: str) -> str | None:
    """Step tag of a log message, e.g. "DEDUP" for "[DEDUP] before=3 ..."."""
    if not message.startswith("["):
        return None
    end = message.find("]")
    return message[1:end] if end > 1 else None


def step_filter(level: str, debug_steps: Iterable[str] = ()) -> Callable[[dict], bool]:
    """Pass records at `level` and above, plus any record from a debug step."""
    threshold = logger.level(level).no
    steps = {step.strip("[]").upper() for step in debug_steps}

    def _filter(record: dict) -> bool:
        if record["level"].no >= threshold:
            return True
        return step_of(record["message"]) in steps

    return _filter


def setup_logger(
    level: str = "INFO",
    log_file: str | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
    debug_steps: Iterable[str] = (),
) -> None:
    """Configure loguru with a console sink and an optional rotating file sink.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file. If None, only console logging.
        rotation: Log rotation size (e.g., "10 MB", "1 day")
        retention: Log retention period (e.g., "7 days", "1 month")
        debug_steps: Pipeline steps (see PIPELINE_STEPS) logged at DEBUG regardless of level
    """
    logger.remove()
    record_filter = step_filter(level, debug_steps)
    # Sinks open at DEBUG so step_filter decides what gets through
    sink_level = "DEBUG" if debug_steps else level

    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=sink_level,
        filter=record_filter,
        colorize=True,
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} - {message}",
            level=sink_level,
            filter=record_filter,
            rotation=rotation,
            retention=retention,
            compression="zip",
        )

    extra = f" debug_steps={sorted(debug_steps)}" if debug_steps else ""
    logger.info(f"Logger initialized with level={level}{extra}")
