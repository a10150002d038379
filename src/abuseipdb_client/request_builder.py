"""
Request builder for the AbuseIPDB v2 API.

Turns typed endpoint parameters into a fully escaped URL or form body plus
the header list. Every parameter value is escaped on its own, so the URL
handed to the transport is already in its final wire form.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union
from urllib.parse import quote

from .categories import CategorySet, decode
from .enums import Endpoint
from .exceptions import BulkReportFileError, InvalidCategoriesError
from .models import BlacklistQuery


DEFAULT_BASE_URL = "https://api.abuseipdb.com/api/v2/"

ACCEPT_JSON = "application/json"
ACCEPT_PLAINTEXT = "text/plain"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

# A value of None renders as a bare flag (e.g. "&verbose")
Params = list[tuple[str, Optional[str]]]
Headers = list[tuple[str, str]]


def escape(value: str) -> str:
    """Percent-encode everything except unreserved characters (A-Z a-z 0-9 - . _ ~)."""
    return quote(str(value), safe="")


def encode_params(params: Params) -> str:
    parts = []
    for name, value in params:
        if value is None:
            parts.append(name)
        else:
            parts.append(f"{name}={escape(value)}")
    return "&".join(parts)


def build_headers(
    api_key: str,
    accept: str = ACCEPT_JSON,
    extra: Optional[Headers] = None,
) -> Headers:
    """
    Build the header list for one call.

    Extra headers are appended in order; nothing is merged or de-duplicated.
    """
    headers: Headers = [
        ("Key", api_key),
        ("Accept", accept),
    ]
    if extra:
        headers.extend(extra)
    return headers


@dataclass
class PreparedRequest:
    """A fully built request, ready for the transport."""

    endpoint: Endpoint
    method: str
    url: str
    params: Params = field(default_factory=list)
    headers: Headers = field(default_factory=list)
    content: Optional[bytes] = None
    files: Optional[dict] = None
    data: Optional[dict] = None

    def param_dict(self) -> dict[str, Optional[str]]:
        """Unescaped parameters keyed by name (for inspection and logging)."""
        return dict(self.params)

    def header_values(self, name: str) -> list[str]:
        lowered = name.lower()
        return [value for key, value in self.headers if key.lower() == lowered]


class RequestBuilder:
    """Builds PreparedRequest objects for each supported endpoint."""

    def __init__(self, api_key: str, base_url: str = DEFAULT_BASE_URL) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/") + "/"

    def url_for(self, endpoint: Endpoint) -> str:
        return f"{self._base_url}{endpoint.value}"

    def _get(
        self,
        endpoint: Endpoint,
        params: Params,
        method: str = "GET",
        accept: str = ACCEPT_JSON,
        extra_headers: Optional[Headers] = None,
    ) -> PreparedRequest:
        return PreparedRequest(
            endpoint=endpoint,
            method=method,
            url=f"{self.url_for(endpoint)}?{encode_params(params)}",
            params=params,
            headers=build_headers(self._api_key, accept, extra_headers),
        )

    def report(
        self,
        ip_address: str,
        categories: CategorySet,
        comment: str = "",
        extra_headers: Optional[Headers] = None,
    ) -> PreparedRequest:
        """
        Build a report request.

        Raises:
            InvalidCategoriesError: If the set is empty or decodes to no codes
        """
        if categories.is_empty:
            raise InvalidCategoriesError(
                code="empty_categories",
                message="categories must contain at least one category",
            )

        codes = decode(categories)
        if not codes:
            raise InvalidCategoriesError(
                code="unparsable_categories",
                message="Failed to parse categories",
                details={"value": categories.value},
            )

        params: Params = [
            ("ip", ip_address),
            ("categories", ",".join(str(code) for code in codes)),
            ("comment", comment or ""),
        ]
        headers = list(extra_headers or [])
        headers.append(("Content-Type", FORM_CONTENT_TYPE))

        return PreparedRequest(
            endpoint=Endpoint.REPORT,
            method="POST",
            url=self.url_for(Endpoint.REPORT),
            params=params,
            headers=build_headers(self._api_key, ACCEPT_JSON, headers),
            content=encode_params(params).encode("ascii"),
        )

    def check(self, ip_address: str, extra_headers: Optional[Headers] = None) -> PreparedRequest:
        return self._get(
            Endpoint.CHECK,
            [("ipAddress", ip_address), ("verbose", None)],
            extra_headers=extra_headers,
        )

    def check_block(
        self,
        network_address: str,
        subnet_size: int,
        extra_headers: Optional[Headers] = None,
    ) -> PreparedRequest:
        # The network is escaped as one unit, so "/" goes out as %2F
        return self._get(
            Endpoint.CHECK_BLOCK,
            [("network", f"{network_address}/{subnet_size}")],
            extra_headers=extra_headers,
        )

    def clear_address(self, ip_address: str, extra_headers: Optional[Headers] = None) -> PreparedRequest:
        return self._get(
            Endpoint.CLEAR_ADDRESS,
            [("ipAddress", ip_address), ("verbose", None)],
            method="DELETE",
            extra_headers=extra_headers,
        )

    def bulk_report(
        self,
        csv_path: Union[str, Path],
        extra_headers: Optional[Headers] = None,
    ) -> PreparedRequest:
        """
        Build a multipart bulk-report request from a CSV file.

        Raises:
            BulkReportFileError: If the path is missing, not a regular file,
                or cannot be read
        """
        path = Path(csv_path)
        if not path.exists() or not path.is_file():
            raise BulkReportFileError(
                code="invalid_file",
                message="Csv must be a valid file!",
                details={"path": str(path)},
            )

        try:
            contents = path.read_bytes()
        except OSError as e:
            raise BulkReportFileError(
                code="unreadable_file",
                message=f"Failed to open file: {e}",
                details={"path": str(path), "errno": e.errno},
            ) from e

        return PreparedRequest(
            endpoint=Endpoint.BULK_REPORT,
            method="POST",
            url=self.url_for(Endpoint.BULK_REPORT),
            params=[("csv", path.name), ("submit", "send")],
            headers=build_headers(self._api_key, ACCEPT_JSON, extra_headers),
            files={"csv": (path.name, contents, "text/csv")},
            data={"submit": "send"},
        )

    def _blacklist_params(self, query: BlacklistQuery) -> Params:
        params: Params = [
            ("confidenceMinimum", str(query.minimum_confidence)),
            ("limit", str(query.limit)),
        ]
        country_filter = query.country_filter()
        if country_filter is not None:
            params.append(country_filter)
        return params

    def blacklist(self, query: BlacklistQuery, extra_headers: Optional[Headers] = None) -> PreparedRequest:
        return self._get(
            Endpoint.BLACKLIST,
            self._blacklist_params(query),
            extra_headers=extra_headers,
        )

    def blacklist_plaintext(
        self,
        query: BlacklistQuery,
        extra_headers: Optional[Headers] = None,
    ) -> PreparedRequest:
        params = self._blacklist_params(query)
        params.append(("plaintext", None))
        return self._get(
            Endpoint.BLACKLIST,
            params,
            accept=ACCEPT_PLAINTEXT,
            extra_headers=extra_headers,
        )
