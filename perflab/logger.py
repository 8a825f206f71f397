"""loguru setup for the twin client: one stderr sink, text or JSON lines."""

import sys

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> <level>{level: <7}</level> "
    "<cyan>{name}</cyan> {message}"
)


def setup_logger(level: str = "INFO", *, json_logs: bool = False) -> None:
    """Replace loguru's default handler.

    With `json_logs` every record is written as one serialized JSON object per
    line, for log shippers. Otherwise a short colorized line per record.
    """
    logger.remove()
    if json_logs:
        logger.add(sys.stderr, level=level.upper(), serialize=True)
    else:
        logger.add(sys.stderr, level=level.upper(), format=CONSOLE_FORMAT, colorize=True)
    logger.debug(f"Logging to stderr at {level.upper()} (json={json_logs})")
