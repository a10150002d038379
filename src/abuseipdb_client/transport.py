"""
Transport executor for the AbuseIPDB client.

Owns the single reusable httpx.Client of an API client instance and runs
exactly one HTTP request per call, streaming the body into a fresh
RawResponse. Transport-level failures (connect, DNS, TLS, timeout) are
classified, never raised; HTTP error status codes are passed through.
"""

import threading
import time
from typing import Optional

import httpx

from .audit_logger import AuditLogger
from .enums import TransportStatus
from .exceptions import TransportClosedError
from .models import RawResponse, TransportOutcome
from .request_builder import PreparedRequest


COMPONENT = "transport"


class TransportExecutor:
    """
    Synchronous HTTP executor bound to one httpx.Client for its lifetime.

    Calls are serialised with a lock so the client and the in-flight
    accumulator always have exactly one owner.
    """

    def __init__(
        self,
        timeout: float = 20.0,
        verify: bool = True,
        force_ipv4: bool = False,
        transport: Optional[httpx.BaseTransport] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the executor.

        Args:
            timeout: Request timeout in seconds
            verify: Verify TLS certificates
            force_ipv4: Bind outgoing connections to IPv4
            transport: Optional httpx transport (used by tests)
            logger: Optional audit logger
        """
        self._timeout = timeout
        self._logger = logger
        self._lock = threading.Lock()

        if transport is None and force_ipv4:
            transport = httpx.HTTPTransport(verify=verify, local_address="0.0.0.0")

        self._client: Optional[httpx.Client] = httpx.Client(
            verify=verify,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    def __enter__(self) -> "TransportExecutor":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._client is None

    def execute(self, request: PreparedRequest) -> TransportOutcome:
        """
        Execute one request and classify the outcome.

        Raises:
            TransportClosedError: If the executor was already closed
        """
        with self._lock:
            if self._client is None:
                raise TransportClosedError(
                    code="closed",
                    message="Transport handle already released",
                )

            raw = RawResponse()
            start_time = time.perf_counter()

            kwargs = {"headers": request.headers}
            if request.content is not None:
                kwargs["content"] = request.content
            if request.files is not None:
                kwargs["files"] = request.files
            if request.data is not None:
                kwargs["data"] = request.data

            try:
                with self._client.stream(request.method, request.url, **kwargs) as response:
                    for chunk in response.iter_bytes():
                        raw.append(chunk)
                    status_code = response.status_code
            except httpx.RequestError as e:
                raw.freeze()
                if self._logger:
                    self._logger.log_error(
                        COMPONENT,
                        "HTTP transport failed",
                        error=e,
                        request_url=request.url,
                    )
                return TransportOutcome(
                    status=TransportStatus.TRANSPORT_FAILURE,
                    raw=raw,
                    error=f"{type(e).__name__}: {e}",
                    response_time_ms=self._elapsed_ms(start_time),
                )

            raw.freeze()
            if self._logger:
                self._logger.debug(
                    COMPONENT,
                    f"{request.method} {request.endpoint.value} -> HTTP {status_code}",
                    {"bytes": len(raw)},
                )

            return TransportOutcome(
                status=TransportStatus.OK,
                raw=raw,
                http_status_code=status_code,
                response_time_ms=self._elapsed_ms(start_time),
            )

    def _elapsed_ms(self, start_time: float) -> float:
        """Calculate elapsed time in milliseconds."""
        return (time.perf_counter() - start_time) * 1000

    def close(self) -> None:
        """Close the HTTP client. Safe to call more than once."""
        with self._lock:
            if self._client is not None:
                self._client.close()
                self._client = None
