"""
Diagnostic logger for the AbuseIPDB client.

Every component logs through one AuditLogger. Entries are filtered by a
minimum level, have secrets (API keys, tokens, passwords) masked out of
their data, and are written as JSON lines, plain text lines, or both.
"""

import json
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional, TextIO

from abuseipdb_client.enums import LogLevel


OUTPUT_FORMATS = ("json", "text", "both")

# Substrings that mark a data key as secret (matched case-insensitively)
SENSITIVE_KEYS = frozenset({
    'key', 'api_key', 'apikey', 'token', 'secret', 'password',
    'auth', 'authorization', 'credential', 'credentials',
    'private_key', 'access_token',
})

MASK_VALUE = "***MASKED***"


def _is_sensitive(key: Any) -> bool:
    lowered = str(key).lower()
    return any(pattern in lowered for pattern in SENSITIVE_KEYS)


def _mask_value(value: Any) -> Any:
    if isinstance(value, dict):
        return mask_sensitive_data(value)
    if isinstance(value, (list, tuple)):
        return [_mask_value(item) for item in value]
    return value


def mask_sensitive_data(data: dict) -> dict:
    """Return a copy of data with every secret value replaced by MASK_VALUE."""
    if not isinstance(data, dict):
        return data
    return {
        key: MASK_VALUE if _is_sensitive(key) else _mask_value(value)
        for key, value in data.items()
    }


@dataclass
class LogEntry:
    timestamp: str
    level: LogLevel
    component: str
    message: str
    data: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "level": self.level.value,
            "component": self.component,
            "message": self.message,
            "data": self.data,
        }


class AuditLogger:
    """
    Leveled logger writing to a text stream.

    Levels run TRACE < DEBUG < INFO < WARN < ERROR < CRITICAL. Calls below
    the configured level return None and write nothing. Written entries are
    also kept in memory and exposed through ``entries``.
    """

    SENSITIVE_KEYS = SENSITIVE_KEYS
    MASK_VALUE = MASK_VALUE

    def __init__(
        self,
        output_format: str = "text",
        output_stream: Optional[TextIO] = None,
        level: LogLevel = LogLevel.INFO,
    ):
        """
        Args:
            output_format: 'json', 'text' or 'both'
            output_stream: Destination stream (defaults to sys.stderr)
            level: Minimum level that is recorded and written
        """
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Invalid output_format: {output_format}")

        self._output_format = output_format
        self._output_stream = output_stream or sys.stderr
        self._level = level
        self._entries: list[LogEntry] = []

        self._renderers: list[Callable[[LogEntry], str]] = []
        if output_format in ("json", "both"):
            self._renderers.append(self._format_json)
        if output_format in ("text", "both"):
            self._renderers.append(self._format_text)

    @property
    def output_format(self) -> str:
        return self._output_format

    @property
    def level(self) -> LogLevel:
        return self._level

    @level.setter
    def level(self, value: LogLevel) -> None:
        self._level = value

    @property
    def entries(self) -> list[LogEntry]:
        """Copy of the entries written so far."""
        return list(self._entries)

    def is_enabled_for(self, level: LogLevel) -> bool:
        return level.severity >= self._level.severity

    def log(
        self,
        level: LogLevel,
        component: str,
        message: str,
        data: Optional[dict] = None,
    ) -> Optional[LogEntry]:
        """
        Record and write one entry.

        Returns:
            The LogEntry, or None if level is below the threshold
        """
        if not self.is_enabled_for(level):
            return None

        entry = LogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            level=level,
            component=component,
            message=message,
            data=mask_sensitive_data(data or {}),
        )
        self._entries.append(entry)

        for render in self._renderers:
            self._output_stream.write(render(entry) + "\n")
        self._output_stream.flush()

        return entry

    def trace(self, component: str, message: str, data: Optional[dict] = None) -> Optional[LogEntry]:
        return self.log(LogLevel.TRACE, component, message, data)

    def debug(self, component: str, message: str, data: Optional[dict] = None) -> Optional[LogEntry]:
        return self.log(LogLevel.DEBUG, component, message, data)

    def info(self, component: str, message: str, data: Optional[dict] = None) -> Optional[LogEntry]:
        return self.log(LogLevel.INFO, component, message, data)

    def warn(self, component: str, message: str, data: Optional[dict] = None) -> Optional[LogEntry]:
        return self.log(LogLevel.WARN, component, message, data)

    def error(self, component: str, message: str, data: Optional[dict] = None) -> Optional[LogEntry]:
        return self.log(LogLevel.ERROR, component, message, data)

    def critical(self, component: str, message: str, data: Optional[dict] = None) -> Optional[LogEntry]:
        return self.log(LogLevel.CRITICAL, component, message, data)

    def log_error(
        self,
        component: str,
        message: str,
        error: Optional[Exception] = None,
        request_url: Optional[str] = None,
        response_status_code: Optional[int] = None,
        additional_data: Optional[dict] = None,
    ) -> Optional[LogEntry]:
        """
        Write an ERROR entry carrying the failure context.

        The exception contributes error_message and error_type; request_url
        and response_status_code are added only when given.
        """
        context = dict(additional_data or {})
        if error is not None:
            context.update(error_message=str(error), error_type=type(error).__name__)
        if request_url is not None:
            context["request_url"] = request_url
        if response_status_code is not None:
            context["response_status_code"] = response_status_code

        return self.error(component, message, context)

    def mask_sensitive_data(self, data: dict) -> dict:
        return mask_sensitive_data(data)

    def _format_json(self, entry: LogEntry) -> str:
        return json.dumps(entry.to_dict(), ensure_ascii=False, default=str)

    def _format_text(self, entry: LogEntry) -> str:
        # [TIMESTAMP] LEVEL [COMPONENT] MESSAGE {data}
        line = f"[{entry.timestamp}] {entry.level.value.upper()} [{entry.component}] {entry.message}"
        if entry.data:
            line += " " + json.dumps(entry.data, ensure_ascii=False, default=str)
        return line

    def get_json_output(self, entry: LogEntry) -> str:
        return self._format_json(entry)

    def get_text_output(self, entry: LogEntry) -> str:
        return self._format_text(entry)

    def clear_entries(self) -> None:
        self._entries.clear()
