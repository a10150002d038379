"""
Data models for the AbuseIPDB client.

This module defines the blacklist query value object, the per-call response
accumulator, and the result types returned by the transport and the client.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from .enums import ResultStatus, TransportStatus


MAX_IPS_STANDARD = 10_000
MAX_IPS_BASIC_SUB = 100_000
MAX_IPS_PREMIUM_SUB = 500_000


@dataclass
class BlacklistQuery:
    """
    Options for requesting a blacklist.

    If only_countries is non-empty it takes precedence and except_countries
    is ignored.
    """

    limit: int = MAX_IPS_BASIC_SUB
    minimum_confidence: int = 100
    only_countries: list[str] = field(default_factory=list)
    except_countries: list[str] = field(default_factory=list)

    def country_filter(self) -> Optional[tuple[str, str]]:
        """Return the single (param name, comma-joined codes) pair to send, if any."""
        if self.only_countries:
            return "onlyCountries", ",".join(self.only_countries)
        if self.except_countries:
            return "exceptCountries", ",".join(self.except_countries)
        return None


class RawResponse:
    """
    Accumulator for one response body.

    Chunks that are empty or consist only of whitespace are dropped rather
    than appended. Once frozen the accumulator rejects further writes.
    """

    def __init__(self) -> None:
        self._chunks: list[bytes] = []
        self._frozen = False

    def append(self, chunk: bytes) -> int:
        """Append a received chunk and return its length (dropped or not)."""
        if self._frozen:
            raise RuntimeError("RawResponse is frozen")
        if isinstance(chunk, str):
            chunk = chunk.encode("utf-8")
        size = len(chunk)
        if not chunk or chunk.isspace():
            return size
        self._chunks.append(chunk)
        return size

    def freeze(self) -> "RawResponse":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def body(self) -> bytes:
        return b"".join(self._chunks)

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def __len__(self) -> int:
        return sum(len(chunk) for chunk in self._chunks)

    def __repr__(self) -> str:
        return f"RawResponse(size={len(self)}, frozen={self._frozen})"


@dataclass
class TransportOutcome:
    """Classified outcome of a single HTTP execution."""

    status: TransportStatus
    raw: RawResponse
    http_status_code: Optional[int] = None
    error: Optional[str] = None
    response_time_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status == TransportStatus.OK


@dataclass
class ApiResult:
    """
    Result of an API client call.

    document holds the decoded JSON ({} for sentinel results); text holds
    the body of the plaintext blacklist, decoded as UTF-8 with invalid bytes
    replaced. body keeps the exact bytes of that plaintext response.
    """

    status: ResultStatus
    document: Any = field(default_factory=dict)
    text: Optional[str] = None
    http_status_code: Optional[int] = None
    error: Optional[str] = None
    body: Optional[bytes] = None

    @property
    def ok(self) -> bool:
        return self.status in (ResultStatus.OK, ResultStatus.PLAINTEXT)

    @classmethod
    def transport_error(cls, outcome: TransportOutcome) -> "ApiResult":
        return cls(
            status=ResultStatus.TRANSPORT_ERROR,
            document={},
            http_status_code=outcome.http_status_code,
            error=outcome.error,
        )

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "http_status_code": self.http_status_code,
            "document": self.document,
            "text": self.text,
            "error": self.error,
        }
