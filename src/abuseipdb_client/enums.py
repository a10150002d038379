"""
Enumeration types for the AbuseIPDB client.

These enums provide type-safe constants for report categories, log levels,
and the outcome of transport and API calls.
"""

from enum import Enum


class ReportCategory(Enum):
    """
    Bit-coded report categories.

    The values are bit positions, NOT the category numbers the API expects.
    Bit i maps to wire code i + 1. Combine them with CategorySet.
    """

    DNS_COMPROMISE = 1 << 0
    DNS_POISONING = 1 << 1
    FRAUD_ORDERS = 1 << 2
    DDOS_ATTACK = 1 << 3
    FTP_BRUTE_FORCE = 1 << 4
    PING_OF_DEATH = 1 << 5
    PHISHING = 1 << 6
    FRAUD_VOIP = 1 << 7
    OPEN_PROXY = 1 << 8
    WEB_SPAM = 1 << 9
    EMAIL_SPAM = 1 << 10
    BLOG_SPAM = 1 << 11
    VPN_IP = 1 << 12
    PORT_SCAN = 1 << 13
    HACKING = 1 << 14
    SQL_INJECTION = 1 << 15
    SPOOFING = 1 << 16
    BRUTE_FORCE = 1 << 17
    BAD_WEB_BOT = 1 << 18
    EXPLOITED_HOST = 1 << 19
    WEB_APP_ATTACK = 1 << 20
    SSH = 1 << 21
    IOT_TARGETED = 1 << 22

    @property
    def wire_code(self) -> int:
        """The category number sent to the API."""
        return self.value.bit_length()


class LogLevel(Enum):
    """Logging severity levels."""

    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def severity(self) -> int:
        return _SEVERITY[self.value]

    @classmethod
    def from_name(cls, name: str) -> "LogLevel":
        """Look up a level by name, accepting 'warning' as an alias of 'warn'."""
        normalized = name.strip().lower()
        if normalized == "warning":
            normalized = "warn"
        return cls(normalized)


_SEVERITY = {
    "trace": 0,
    "debug": 10,
    "info": 20,
    "warn": 30,
    "error": 40,
    "critical": 50,
}


class Endpoint(Enum):
    """AbuseIPDB v2 endpoints, relative to the API base URL."""

    REPORT = "report"
    CHECK = "check"
    CHECK_BLOCK = "check-block"
    CLEAR_ADDRESS = "clear-address"
    BULK_REPORT = "bulk-report"
    BLACKLIST = "blacklist"


class TransportStatus(Enum):
    """Outcome of a single transport execution."""

    OK = "ok"
    TRANSPORT_FAILURE = "transport_failure"


class ResultStatus(Enum):
    """Outcome of an API client call."""

    OK = "ok"
    PLAINTEXT = "plaintext"
    TRANSPORT_ERROR = "transport_error"
    DECODE_ERROR = "decode_error"
