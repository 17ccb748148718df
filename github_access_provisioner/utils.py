"""Provide utilities shared by the provisioner: logger and team slug conversion."""

import logging
import re
import sys
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from logging import Logger
from typing import Any, Literal, Optional

from pythonjsonlogger.json import JsonFormatter

LogLevel = Literal["debug", "info", "warn", "warning", "error"]

_team_slug_pattern = re.compile(r"[\s.]+")


def team_slug(display_name: str) -> str:
    """Convert a team display name into the identifier used in GitHub URLs.

    Examples:
        >>> team_slug("My Team.Name")
        'my-team-name'

    """
    return _team_slug_pattern.sub("-", display_name.lower())


class AppLogger(ABC):
    """Define the AppLogger abstract class."""

    @abstractmethod
    def __init__(self, name: str):
        """Initialize the logger."""
        self.local_logger: Logger

    @abstractmethod
    def debug(self, message: str, meta: Optional[dict[str, Any]] = None) -> None:
        """Log a debug message."""

    @abstractmethod
    def info(self, message: str, meta: Optional[dict[str, Any]] = None) -> None:
        """Log an info message."""

    @abstractmethod
    def warning(self, message: str, meta: Optional[dict[str, Any]] = None) -> None:
        """Log a warning message."""

    @abstractmethod
    def error(self, message: str, meta: Optional[dict[str, Any]] = None) -> None:
        """Log an error message."""


class _CustomJsonFormatter(JsonFormatter):
    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        if not log_record.get("timestamp"):
            log_record["timestamp"] = datetime.now(timezone.utc).strftime(
                "%Y-%m-%dT%H:%M:%S.%fZ"
            )
        log_record["level"] = record.levelname.lower()


class _TextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        attributes = getattr(record, "attributes", None)
        if attributes:
            rendered = " ".join(f"{key}={value}" for key, value in attributes.items())
            line = f"{line} | {rendered}"
        return line


def _to_logging_level(level: str) -> int:
    if level.lower() == "warn":
        return logging.WARNING
    return logging.getLevelName(level.upper())


class ProvisionerLogger(AppLogger):
    """Logger carrying structured attributes along with each message."""

    def __init__(
        self, name: str, level: LogLevel = "info", json_logging: bool = False
    ):
        """Initialize the logger and its stderr handler."""
        self.local_logger = logging.getLogger(name)
        self.local_logger.setLevel(_to_logging_level(level))
        self.local_logger.propagate = False
        self.local_logger.handlers.clear()

        handler = logging.StreamHandler(sys.stderr)
        if json_logging:
            handler.setFormatter(
                _CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
            )
        else:
            handler.setFormatter(
                _TextFormatter(
                    "%(asctime)s [%(levelname)s] %(message)s",
                    datefmt="%Y-%m-%dT%H:%M:%S",
                )
            )
        self.local_logger.addHandler(handler)

        # quiet the transport layer
        logging.getLogger("urllib3").setLevel(logging.WARNING)

    @staticmethod
    def prepare_meta(meta: Optional[dict[str, Any]] = None) -> Optional[dict[str, Any]]:
        """Wrap the attributes so they do not collide with LogRecord fields."""
        return None if meta is None else {"attributes": meta}

    def debug(self, message: str, meta: Optional[dict[str, Any]] = None) -> None:
        """Log a debug message."""
        self.local_logger.debug(message, extra=self.prepare_meta(meta))

    def info(self, message: str, meta: Optional[dict[str, Any]] = None) -> None:
        """Log an info message."""
        self.local_logger.info(message, extra=self.prepare_meta(meta))

    def warning(self, message: str, meta: Optional[dict[str, Any]] = None) -> None:
        """Log a warning message."""
        self.local_logger.warning(message, extra=self.prepare_meta(meta))

    def error(self, message: str, meta: Optional[dict[str, Any]] = None) -> None:
        """Log an error message."""
        self.local_logger.error(message, extra=self.prepare_meta(meta))
