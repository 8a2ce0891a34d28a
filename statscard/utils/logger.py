"""Logging configuration"""

import logging
import re
import sys
from typing import Optional, Union

REDACTED = "***REDACTED***"

_SECRET_PATTERNS = (
    re.compile(r"(?i)(bearer\s+)[A-Za-z0-9_\-\.]+"),
    re.compile(r"(?i)((?:access_)?token=)[^\s&\"']+"),
    re.compile(r"\b(gh[pousr]_|github_pat_)[A-Za-z0-9_]+"),
)


def setup_logger(
    name: str,
    level: Union[int, str] = logging.INFO,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Set up a logger with consistent formatting

    Args:
        name: Logger name (use "statscard" to configure the whole package)
        level: Logging level, numeric or name such as "DEBUG"
        format_string: Custom format string

    Returns:
        Configured logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Entrypoints may run more than once per process (warm lambdas, reloads)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    if format_string is None:
        format_string = (
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    handler.setFormatter(logging.Formatter(format_string))
    logger.addHandler(handler)

    return logger


def redact_secrets(text: object) -> str:
    """
    Mask credentials that may leak into error messages

    Args:
        text: Message or exception to sanitize

    Returns:
        String safe to write to logs
    """
    cleaned = str(text)
    for pattern in _SECRET_PATTERNS:
        cleaned = pattern.sub(lambda match: f"{match.group(1)}{REDACTED}", cleaned)
    return cleaned
