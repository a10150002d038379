"""
API client for AbuseIPDB.

Composes the request builder, the transport executor and the response
decoder for each supported endpoint. One client is bound to one API key
and owns one transport handle for its whole lifetime.

API documentation: https://docs.abuseipdb.com/
"""

from pathlib import Path
from typing import Optional, Union

import httpx

from .audit_logger import AuditLogger
from .categories import CategorySet
from .config import ApiConfig
from .decoder import decode_json, decode_plaintext
from .enums import ResultStatus
from .models import ApiResult, BlacklistQuery
from .request_builder import Headers, PreparedRequest, RequestBuilder
from .transport import TransportExecutor


COMPONENT = "api"


class AbuseIpDbClient:
    """
    Client for the AbuseIPDB v2 API.

    Every endpoint call builds its URL, headers and body from scratch, runs
    one HTTP request and decodes the captured body. Transport failures come
    back as TRANSPORT_ERROR results with an empty document; caller-input
    errors raise before any network I/O.
    """

    def __init__(
        self,
        api_key: str,
        logger: Optional[AuditLogger] = None,
        config: Optional[ApiConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            api_key: AbuseIPDB API key, fixed for the client's lifetime
            logger: Optional audit logger
            config: Connection settings (base URL, timeout, TLS)
            transport: Optional httpx transport (used by tests)
        """
        config = config or ApiConfig()
        self._api_key = api_key
        self._logger = logger
        self._builder = RequestBuilder(api_key, config.base_url)
        self._executor = TransportExecutor(
            timeout=config.timeout_seconds,
            verify=config.verify_tls,
            force_ipv4=config.force_ipv4,
            transport=transport,
            logger=logger,
        )

    def __enter__(self) -> "AbuseIpDbClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def api_key(self) -> str:
        return self._api_key

    @property
    def closed(self) -> bool:
        return self._executor.closed

    def close(self) -> None:
        """Release the transport handle."""
        self._executor.close()

    def _send_json(self, request: PreparedRequest) -> ApiResult:
        self._debug(request)
        outcome = self._executor.execute(request)
        if not outcome.ok:
            return ApiResult.transport_error(outcome)

        document, parsed = decode_json(outcome.raw, self._logger)
        return ApiResult(
            status=ResultStatus.OK if parsed else ResultStatus.DECODE_ERROR,
            document=document,
            http_status_code=outcome.http_status_code,
            error=None if parsed else "Failed to parse JSON",
        )

    def _debug(self, request: PreparedRequest) -> None:
        if not self._logger:
            return
        self._logger.debug(COMPONENT, f"Connecting to {request.url}")
        if request.content is not None:
            self._logger.debug(
                COMPONENT,
                "Post fields",
                {"fields": request.content.decode("ascii")},
            )

    def report_ip(
        self,
        ip_address: str,
        categories: CategorySet,
        comment: str = "",
        extra_headers: Optional[Headers] = None,
    ) -> ApiResult:
        """
        Report a single IP address.

        Args:
            ip_address: The IP address to report
            categories: Categories to apply; must not be empty
            comment: Optional comment (strip personal information first!)

        Raises:
            InvalidCategoriesError: If categories is empty or undecodable
        """
        request = self._builder.report(ip_address, categories, comment, extra_headers)
        return self._send_json(request)

    def check_ip_address(self, ip_address: str, extra_headers: Optional[Headers] = None) -> ApiResult:
        """Check whether a single IP address has been reported before."""
        return self._send_json(self._builder.check(ip_address, extra_headers))

    def check_block(
        self,
        network_address: str,
        subnet_size: int,
        extra_headers: Optional[Headers] = None,
    ) -> ApiResult:
        """Check whether a subnet (e.g. 193.41.200.0 / 24) has reported addresses."""
        return self._send_json(self._builder.check_block(network_address, subnet_size, extra_headers))

    def clear_ip_address(self, ip_address: str, extra_headers: Optional[Headers] = None) -> ApiResult:
        """Clear all reports of an IP address made with this API key."""
        return self._send_json(self._builder.clear_address(ip_address, extra_headers))

    def bulk_report(self, csv_path: Union[str, Path], extra_headers: Optional[Headers] = None) -> ApiResult:
        """
        Upload a CSV for bulk reporting.

        Raises:
            BulkReportFileError: If the CSV is missing, not a file, or unreadable
        """
        return self._send_json(self._builder.bulk_report(csv_path, extra_headers))

    def get_blacklist(
        self,
        query: Optional[BlacklistQuery] = None,
        extra_headers: Optional[Headers] = None,
    ) -> ApiResult:
        """Get the blacklist as JSON. Passing no query applies the defaults."""
        return self._send_json(self._builder.blacklist(query or BlacklistQuery(), extra_headers))

    def get_blacklist_plaintext(
        self,
        query: Optional[BlacklistQuery] = None,
        extra_headers: Optional[Headers] = None,
    ) -> ApiResult:
        """
        Get the blacklist in plain text.

        The body is returned in ApiResult.text; a JSON body (such as an
        error document) is re-dumped with indentation instead. text is
        decoded as UTF-8 with invalid bytes replaced, so ApiResult.body holds
        the exact bytes received.
        """
        request = self._builder.blacklist_plaintext(query or BlacklistQuery(), extra_headers)
        self._debug(request)
        outcome = self._executor.execute(request)
        if not outcome.ok:
            return ApiResult.transport_error(outcome)

        return ApiResult(
            status=ResultStatus.PLAINTEXT,
            document={},
            text=decode_plaintext(outcome.raw, self._logger),
            http_status_code=outcome.http_status_code,
            body=outcome.raw.body,
        )
