"""
Logging configuration for tokenforge processes.

``LogSettings`` captures where log records go and at what level; the
CLI group builds one from its flags plus the environment and hands it to
``setup_logging()``.  Library code only ever calls
``logging.getLogger(__name__)``.

Environment:
    TOKENFORGE_LOG_LEVEL       console level when no flag is given
    TOKENFORGE_LOG_FILE        also append records to this file
    TOKENFORGE_LOG_FILE_LEVEL  file level (default: console level)

Handlers installed here carry a ``tokenforge.`` name, so a second
``setup_logging()`` swaps them out without touching handlers other
code attached to the root logger.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

ENV_LEVEL = "TOKENFORGE_LOG_LEVEL"
ENV_FILE = "TOKENFORGE_LOG_FILE"
ENV_FILE_LEVEL = "TOKENFORGE_LOG_FILE_LEVEL"

HANDLER_PREFIX = "tokenforge."

# Console layouts, most detailed first; the first tier at or above the
# console level wins.
_CONSOLE_TIERS: tuple[tuple[int, str, str | None], ...] = (
    (logging.DEBUG, "%(asctime)s %(levelname)-7s %(name)s:%(lineno)d  %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s %(name)s  %(message)s", "%H:%M:%S"),
)
_CONSOLE_DEFAULT = "%(levelname)s: %(message)s"

_FILE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s:%(lineno)d  %(message)s"
_FILE_DATEFMT = "%Y-%m-%dT%H:%M:%S"

# Flask's dev server logs every request at INFO
_CHATTY_LIBRARIES = ("werkzeug", "urllib3")


def parse_level(value: Any) -> int:
    """Level name or number → numeric level.  Unknown names mean WARNING."""
    if isinstance(value, int):
        return value
    if not value:
        return logging.WARNING
    numeric = logging.getLevelName(str(value).strip().upper())
    return numeric if isinstance(numeric, int) else logging.WARNING


class LogSettings(BaseModel):
    """Resolved logging destinations and thresholds."""

    model_config = ConfigDict(frozen=True)

    console_level: int = logging.WARNING
    file: str | None = None
    file_level: int | None = None
    quiet_third_party: bool = True

    @field_validator("console_level", mode="before")
    @classmethod
    def _console_level(cls, value: Any) -> int:
        return parse_level(value)

    @field_validator("file_level", mode="before")
    @classmethod
    def _file_level(cls, value: Any) -> int | None:
        return None if value in (None, "") else parse_level(value)

    @classmethod
    def from_flags(
        cls,
        verbose: bool = False,
        quiet: bool = False,
        debug: bool = False,
        environ: Mapping[str, str] | None = None,
    ) -> LogSettings:
        """Flags beat ``TOKENFORGE_LOG_LEVEL``; ``--debug`` beats both others."""
        env = os.environ if environ is None else environ
        if debug:
            level: Any = logging.DEBUG
        elif verbose:
            level = logging.INFO
        elif quiet:
            level = logging.ERROR
        else:
            level = env.get(ENV_LEVEL)
        return cls(
            console_level=level,
            file=env.get(ENV_FILE) or None,
            file_level=env.get(ENV_FILE_LEVEL),
            quiet_third_party=not debug,
        )

    @property
    def effective_file_level(self) -> int:
        return self.console_level if self.file_level is None else self.file_level

    @property
    def root_level(self) -> int:
        """Lowest level any installed handler accepts."""
        if self.file:
            return min(self.console_level, self.effective_file_level)
        return self.console_level


def console_formatter(level: int) -> logging.Formatter:
    for threshold, fmt, datefmt in _CONSOLE_TIERS:
        if level <= threshold:
            return logging.Formatter(fmt, datefmt=datefmt)
    return logging.Formatter(_CONSOLE_DEFAULT)


def setup_logging(settings: LogSettings | None = None) -> LogSettings:
    """Install the console (and optional file) handler on the root logger.

    Returns:
        The settings that were applied.
    """
    settings = settings or LogSettings()
    root = logging.getLogger()

    for handler in list(root.handlers):
        if (handler.get_name() or "").startswith(HANDLER_PREFIX):
            root.removeHandler(handler)
            handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.set_name(HANDLER_PREFIX + "console")
    console.setLevel(settings.console_level)
    console.setFormatter(console_formatter(settings.console_level))
    root.addHandler(console)

    if settings.file:
        file_handler = logging.FileHandler(settings.file, encoding="utf-8")
        file_handler.set_name(HANDLER_PREFIX + "file")
        file_handler.setLevel(settings.effective_file_level)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
        root.addHandler(file_handler)

    root.setLevel(settings.root_level)

    if settings.quiet_third_party:
        for name in _CHATTY_LIBRARIES:
            logging.getLogger(name).setLevel(max(logging.WARNING, settings.console_level))

    logging.raiseExceptions = False
    return settings
