"""Root logger setup for the dashboard process.

``LEDGERDASH_LOG_LEVEL`` (a level name or number) takes precedence; otherwise
a truthy ``LEDGERDASH_DEBUG`` forces DEBUG. The ``debug_logging`` dashboard
setting only applies when neither variable is set.
"""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
LOG_DATEFMT = "%H:%M:%S"
LEVEL_ENV = "LEDGERDASH_LOG_LEVEL"
DEBUG_ENV = "LEDGERDASH_DEBUG"

_TRUTHY = frozenset({"1", "true", "yes", "on"})
# HTTP client loggers that only matter when debugging a service call.
_TRANSPORT_LOGGERS = ("urllib3", "requests")


def env_truthy(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in _TRUTHY


def parse_level(value: int | str | None, default: int = logging.INFO) -> int:
    """Turn ``"debug"``, ``"10"`` or ``10`` into a logging level."""
    if isinstance(value, int):
        return value
    text = (value or "").strip()
    if text.isdigit():
        return int(text)
    level = logging.getLevelName(text.upper()) if text else None
    return level if isinstance(level, int) else default


def env_level(environ: Optional[Mapping[str, str]] = None) -> Optional[int]:
    """Level forced by the environment, or ``None`` when nothing is set."""
    env = os.environ if environ is None else environ
    explicit = env.get(LEVEL_ENV, "")
    if explicit.strip():
        return parse_level(explicit)
    if env_truthy(env.get(DEBUG_ENV)):
        return logging.DEBUG
    return None


def env_forces_debug(environ: Optional[Mapping[str, str]] = None) -> bool:
    level = env_level(environ)
    return level is not None and level <= logging.DEBUG


def configure_root(default_level: int | str = logging.INFO) -> int:
    """Install the console handler once and set the effective level.

    Returns:
        The level applied to the root logger.
    """
    level = env_level()
    if level is None:
        level = parse_level(default_level)
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    _set_level(level)
    return level


def apply_debug_setting(debug_logging: bool) -> int:
    """Follow the ``debug_logging`` setting unless the environment overrides it."""
    level = env_level()
    if level is None:
        level = logging.DEBUG if debug_logging else logging.INFO
    _set_level(level)
    return level


def _set_level(level: int) -> None:
    logging.getLogger().setLevel(level)
    transport = level if level <= logging.DEBUG else logging.WARNING
    for name in _TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(transport)


__all__ = [
    "apply_debug_setting",
    "configure_root",
    "env_forces_debug",
    "env_level",
    "env_truthy",
    "parse_level",
]
