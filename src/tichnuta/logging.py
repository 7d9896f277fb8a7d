"""Logging for the Tichnuta service.

Everything logs under the ``tichnuta`` logger tree: one logger per module,
grouped by component (``tichnuta.registration``, ``tichnuta.chat`` ...).
``setup_logging`` attaches a rotating file and an optional console handler to
the tree root and lets single components run at their own level, e.g.
``TICHNUTA_LOG_LEVELS="chat=DEBUG,payments=WARNING"``.

Registrations and chat messages carry parents' contact details, so every
record passes through ``RedactingFilter`` before it is written.
"""

from __future__ import annotations

import logging
import os
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER = "tichnuta"
COMPONENTS = ("api", "registration", "forum", "chat", "payments", "learning", "site_store")

LOG_FILE = "tichnuta.log"
MAX_BYTES = 10 * 1024 * 1024
BACKUP_COUNT = 5

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_REDACTIONS = [
    (re.compile(r"sk_(live|test)_[a-zA-Z0-9]+"), "[STRIPE_KEY]"),
    (re.compile(r"Bearer [a-zA-Z0-9._-]+"), "Bearer [REDACTED]"),
    (re.compile(r"[\w.+-]+@[\w-]+\.[\w.-]+"), "[EMAIL]"),
    (re.compile(r"(?<![\w-])\+?\d[\d\s-]{7,}\d(?![\w-])"), "[PHONE]"),
]


def sanitize_for_log(text: str) -> str:
    """Replace Stripe keys, bearer tokens, e-mail addresses and phone numbers."""
    for pattern, replacement in _REDACTIONS:
        text = pattern.sub(replacement, text)
    return text


class RedactingFilter(logging.Filter):
    """Handler filter that scrubs each record's rendered message."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        cleaned = sanitize_for_log(message)
        if cleaned != message:
            record.msg = cleaned
            record.args = None
        return True


def parse_component_levels(spec: str) -> dict[str, int]:
    """Parse ``"chat=DEBUG,payments=WARNING"`` into logger name -> level.

    Raises:
        ValueError: On an unknown component or level name.
    """
    levels: dict[str, int] = {}
    for item in filter(None, (part.strip() for part in spec.split(","))):
        component, _, level_name = item.partition("=")
        component = component.strip()
        if component not in COMPONENTS:
            raise ValueError(f"Unknown log component: {component!r}")
        level = logging.getLevelName(level_name.strip().upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level for {component}: {level_name!r}")
        levels[f"{ROOT_LOGGER}.{component}"] = level
    return levels


def setup_logging(
    log_dir: str | Path | None = None,
    level: str | None = None,
    component_levels: dict[str, int] | None = None,
    console: bool = True,
    max_bytes: int = MAX_BYTES,
    backup_count: int = BACKUP_COUNT,
) -> logging.Logger:
    """Configure the ``tichnuta`` logger tree.

    Args:
        log_dir: Directory of ``tichnuta.log``. Defaults to ``TICHNUTA_LOG_DIR``
            or ``logs``.
        level: Level of the whole tree. Defaults to ``TICHNUTA_LOG_LEVEL`` or INFO.
        component_levels: Per-component overrides keyed by logger name.
            Defaults to the parsed ``TICHNUTA_LOG_LEVELS``.
        console: Also log to stderr.
        max_bytes: Size at which the log file rotates.
        backup_count: Rotated files kept.

    Returns:
        The ``tichnuta`` root logger.
    """
    log_dir = Path(log_dir or os.environ.get("TICHNUTA_LOG_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)
    level = (level or os.environ.get("TICHNUTA_LOG_LEVEL", "INFO")).upper()
    if component_levels is None:
        component_levels = parse_component_levels(os.environ.get("TICHNUTA_LOG_LEVELS", ""))

    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(getattr(logging, level, logging.INFO))
    for handler in list(root.handlers):
        handler.close()
        root.removeHandler(handler)

    # Components without an override inherit the tree level
    for component in COMPONENTS:
        name = f"{ROOT_LOGGER}.{component}"
        logging.getLogger(name).setLevel(component_levels.get(name, logging.NOTSET))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: list[logging.Handler] = [
        RotatingFileHandler(
            log_dir / LOG_FILE,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    ]
    if console:
        handlers.append(logging.StreamHandler())
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(RedactingFilter())
        root.addHandler(handler)

    root.info("Logging to %s at %s", log_dir / LOG_FILE, level)
    return root
