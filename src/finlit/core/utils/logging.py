"""
Log sinks for finlit, built on loguru.

Every module logs through ``from loguru import logger`` and nothing is shown
until a sink is installed here. The calculators leave a DEBUG trail for each
input they coerce to a default; ``engine_level`` gives ``finlit.financial``
its own threshold so that trail can be silenced or turned up on its own.
"""

import sys

from loguru import logger

from finlit.core.exceptions import ConfigurationError

LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")
ENGINE_MODULE = "finlit.financial"
CONSOLE_FORMAT = "<level>[{level.name}]</level> {message}"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function} | {message}"


def normalize_level(level: str) -> str:
    """Upper-case a level name and check loguru knows it.

    Raises:
        ConfigurationError: Unknown level name.
    """
    name = str(level).strip().upper()
    if name not in LEVELS:
        raise ConfigurationError(f"Unknown log level {level!r}; expected one of {', '.join(LEVELS)}")
    return name


def level_filter(level: str, engine_level: str | None = None) -> dict[str, str]:
    """Minimum level per module, in loguru's ``filter`` dict form."""
    levels = {"": normalize_level(level)}
    if engine_level is not None:
        levels[ENGINE_MODULE] = normalize_level(engine_level)
    return levels


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    engine_level: str | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """
    Replace loguru's sinks with stderr and an optional rotating file.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR).
        log_file: Path to log file. If None, only logs to stderr.
        engine_level: Minimum level for the calculators; defaults to ``level``.
        rotation: Log file rotation size.
        retention: How long to keep rotated logs.

    Raises:
        ConfigurationError: ``level`` or ``engine_level`` is not a level name.
    """
    levels = level_filter(level, engine_level)

    logger.remove()
    logger.add(sys.stderr, level="TRACE", format=CONSOLE_FORMAT, filter=levels)
    if log_file:
        logger.add(
            log_file,
            level="TRACE",
            format=FILE_FORMAT,
            filter=levels,
            rotation=rotation,
            retention=retention,
        )
