"""
Property-based tests for the API client.

HTTP traffic is simulated with httpx.MockTransport so every endpoint runs
end-to-end through the builder, the executor and the decoder without
touching the network.
"""

import json
from io import StringIO
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from abuseipdb_client.audit_logger import AuditLogger
from abuseipdb_client.categories import CategorySet
from abuseipdb_client.client import AbuseIpDbClient
from abuseipdb_client.config import ApiConfig
from abuseipdb_client.enums import LogLevel, ReportCategory, ResultStatus
from abuseipdb_client.exceptions import (
    BulkReportFileError,
    InvalidCategoriesError,
    TransportClosedError,
)
from abuseipdb_client.models import BlacklistQuery


API_KEY = "client-test-key"


class RecordingHandler:
    """MockTransport handler that records requests and replays one response."""

    def __init__(self, status_code: int = 200, content: bytes = b"{}", error: Exception = None):
        self.status_code = status_code
        self.content = content
        self.error = error
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, content=self.content)


def make_client(handler: RecordingHandler, logger: AuditLogger = None) -> AbuseIpDbClient:
    return AbuseIpDbClient(API_KEY, logger=logger, transport=httpx.MockTransport(handler))


def make_logger() -> AuditLogger:
    return AuditLogger(output_format="json", output_stream=StringIO(), level=LogLevel.TRACE)


class TestJsonEndpoints:
    """JSON endpoints return the decoded document."""

    def test_check_ip_returns_decoded_document(self) -> None:
        handler = RecordingHandler(content=b'{"data": {"ipAddress": "1.2.3.4", "abuseConfidenceScore": 0}}')

        with make_client(handler) as client:
            result = client.check_ip_address("1.2.3.4")

        assert result.status == ResultStatus.OK
        assert result.ok
        assert result.http_status_code == 200
        assert result.document["data"]["ipAddress"] == "1.2.3.4"

        sent = handler.requests[0]
        assert sent.method == "GET"
        assert str(sent.url) == "https://api.abuseipdb.com/api/v2/check?ipAddress=1.2.3.4&verbose"
        assert sent.headers["key"] == API_KEY

    def test_report_posts_form_body(self) -> None:
        handler = RecordingHandler(content=b'{"data": {"ipAddress": "1.2.3.4", "abuseConfidenceScore": 52}}')
        categories = CategorySet.of(ReportCategory.SSH, ReportCategory.BRUTE_FORCE)

        with make_client(handler) as client:
            result = client.report_ip("1.2.3.4", categories, "failed logins")

        assert result.document["data"]["abuseConfidenceScore"] == 52
        sent = handler.requests[0]
        assert sent.method == "POST"
        assert sent.content == b"ip=1.2.3.4&categories=18%2C22&comment=failed%20logins"
        assert sent.headers["content-type"] == "application/x-www-form-urlencoded"

    def test_check_block_sends_network(self) -> None:
        handler = RecordingHandler(content=b'{"data": {"networkAddress": "193.41.200.0"}}')

        with make_client(handler) as client:
            client.check_block("193.41.200.0", 24)

        assert str(handler.requests[0].url).endswith("check-block?network=193.41.200.0%2F24")

    def test_clear_uses_delete(self) -> None:
        handler = RecordingHandler(content=b'{"data": {"numReportsDeleted": 3}}')

        with make_client(handler) as client:
            result = client.clear_ip_address("1.2.3.4")

        assert handler.requests[0].method == "DELETE"
        assert result.document["data"]["numReportsDeleted"] == 3

    def test_blacklist_defaults(self) -> None:
        handler = RecordingHandler(content=b'{"meta": {}, "data": []}')

        with make_client(handler) as client:
            result = client.get_blacklist()

        assert result.document == {"meta": {}, "data": []}
        assert str(handler.requests[0].url).endswith("blacklist?confidenceMinimum=100&limit=100000")
        assert handler.requests[0].headers["accept"] == "application/json"

    def test_http_error_document_is_returned_as_is(self) -> None:
        body = {"errors": [{"detail": "Authentication failed.", "status": 401}]}
        handler = RecordingHandler(status_code=401, content=json.dumps(body).encode())

        with make_client(handler) as client:
            result = client.check_ip_address("1.2.3.4")

        assert result.status == ResultStatus.OK
        assert result.http_status_code == 401
        assert result.document == body

    def test_custom_base_url(self) -> None:
        handler = RecordingHandler()
        config = ApiConfig(base_url="http://localhost:8080/api/v2/")

        client = AbuseIpDbClient(API_KEY, config=config, transport=httpx.MockTransport(handler))
        client.check_ip_address("1.2.3.4")
        client.close()

        assert str(handler.requests[0].url).startswith("http://localhost:8080/api/v2/check")


class TestBulkReport:
    """Multipart upload of a CSV file."""

    def test_valid_csv_is_uploaded(self, tmp_path: Path) -> None:
        csv = tmp_path / "reports.csv"
        csv.write_text("IP,Categories,ReportDate,Comment\n1.2.3.4,18,,\n")
        handler = RecordingHandler(content=b'{"data": {"savedReports": 1, "invalidReports": []}}')

        with make_client(handler) as client:
            result = client.bulk_report(csv)

        assert result.document["data"]["savedReports"] == 1
        sent = handler.requests[0]
        assert sent.method == "POST"
        assert sent.headers["content-type"].startswith("multipart/form-data")
        assert b'name="csv"; filename="reports.csv"' in sent.content
        assert b"1.2.3.4,18,," in sent.content
        assert b'name="submit"' in sent.content
        assert b"send" in sent.content

    def test_missing_file_raises_before_any_request(self, tmp_path: Path) -> None:
        handler = RecordingHandler()

        with make_client(handler) as client:
            with pytest.raises(BulkReportFileError) as exc_info:
                client.bulk_report(tmp_path / "missing.csv")

        assert exc_info.value.message == "Csv must be a valid file!"
        assert handler.requests == []

    def test_directory_raises_before_any_request(self, tmp_path: Path) -> None:
        handler = RecordingHandler()

        with make_client(handler) as client:
            with pytest.raises(BulkReportFileError):
                client.bulk_report(tmp_path)

        assert handler.requests == []

    def test_unreadable_file_raises_before_any_request(self, tmp_path: Path) -> None:
        csv = tmp_path / "reports.csv"
        csv.write_text("IP,Categories,ReportDate,Comment\n")
        handler = RecordingHandler()

        with make_client(handler) as client:
            with patch.object(Path, "read_bytes", side_effect=PermissionError(13, "Permission denied")):
                with pytest.raises(BulkReportFileError) as exc_info:
                    client.bulk_report(csv)

        assert exc_info.value.code == "unreadable_file"
        assert handler.requests == []


class TestEmptyCategoriesProperty:
    """Reports without categories never reach the network."""

    def test_empty_categories_raise_with_zero_calls(self) -> None:
        handler = RecordingHandler()

        with make_client(handler) as client:
            with pytest.raises(InvalidCategoriesError):
                client.report_ip("1.2.3.4", CategorySet(), "comment")

        assert handler.requests == []

    @given(high=st.integers(min_value=1, max_value=(1 << 41) - 1))
    @settings(max_examples=50)
    def test_undecodable_categories_raise_with_zero_calls(self, high: int) -> None:
        """
        Property: For any set holding only bits beyond the 23 categories,
        report_ip raises and no HTTP request is made.
        """
        handler = RecordingHandler()

        with make_client(handler) as client:
            with pytest.raises(InvalidCategoriesError):
                client.report_ip("1.2.3.4", CategorySet(high << 23))

        assert handler.requests == []


class TestTransportFailureProperty:
    """Transport failures surface as TRANSPORT_ERROR and are never decoded."""

    @pytest.mark.parametrize(
        "error",
        [
            httpx.ConnectError("Connection refused"),
            httpx.ConnectTimeout("timed out"),
            httpx.ReadError("connection reset"),
        ],
    )
    def test_failure_is_not_decoded(self, error: Exception) -> None:
        handler = RecordingHandler(error=error)

        with make_client(handler) as client:
            with patch("abuseipdb_client.client.decode_json") as decoder:
                result = client.check_ip_address("1.2.3.4")

        decoder.assert_not_called()
        assert result.status == ResultStatus.TRANSPORT_ERROR
        assert not result.ok
        assert result.document == {}
        assert result.http_status_code is None
        assert type(error).__name__ in result.error

    def test_plaintext_failure_is_not_decoded(self) -> None:
        handler = RecordingHandler(error=httpx.ConnectError("Connection refused"))

        with make_client(handler) as client:
            with patch("abuseipdb_client.client.decode_plaintext") as decoder:
                result = client.get_blacklist_plaintext()

        decoder.assert_not_called()
        assert result.status == ResultStatus.TRANSPORT_ERROR
        assert result.text is None

    def test_failure_is_logged(self) -> None:
        logger = make_logger()
        handler = RecordingHandler(error=httpx.ConnectError("Connection refused"))

        with make_client(handler, logger) as client:
            client.check_ip_address("1.2.3.4")

        errors = [entry for entry in logger.entries if entry.level == LogLevel.ERROR]
        assert errors
        assert errors[0].component == "transport"


class TestDecodeFailure:
    """Unparseable bodies produce DECODE_ERROR with an empty document."""

    @pytest.mark.parametrize("body", [b"<html>Bad Gateway</html>", b"{not json", b""])
    def test_invalid_json_is_decode_error(self, body: bytes) -> None:
        handler = RecordingHandler(status_code=502, content=body)

        with make_client(handler) as client:
            result = client.check_ip_address("1.2.3.4")

        assert result.status == ResultStatus.DECODE_ERROR
        assert result.document == {}
        assert result.http_status_code == 502

    def test_decode_failure_logs_error_and_body(self) -> None:
        logger = make_logger()
        handler = RecordingHandler(content=b"<html>oops</html>")

        with make_client(handler, logger) as client:
            client.check_ip_address("1.2.3.4")

        messages = [(entry.level, entry.message) for entry in logger.entries]
        assert (LogLevel.ERROR, "Failed to parse JSON!") in messages
        trace = [entry for entry in logger.entries if entry.message == "Erroneous output"]
        assert trace[0].data["body"] == "<html>oops</html>"

    def test_deeply_nested_body_is_decode_error(self) -> None:
        handler = RecordingHandler(content=b"[" * 100_000)

        with make_client(handler) as client:
            result = client.check_ip_address("1.2.3.4")

        assert result.status == ResultStatus.DECODE_ERROR
        assert result.document == {}


class TestPlaintextBlacklist:
    """The plaintext blacklist is returned verbatim unless it is JSON."""

    def test_plain_body_is_returned_verbatim(self) -> None:
        handler = RecordingHandler(content=b"1.2.3.4\n5.6.7.8")

        with make_client(handler) as client:
            result = client.get_blacklist_plaintext(BlacklistQuery(limit=2))

        assert result.status == ResultStatus.PLAINTEXT
        assert result.ok
        assert result.text == "1.2.3.4\n5.6.7.8"
        assert result.document == {}
        sent = handler.requests[0]
        assert sent.headers["accept"] == "text/plain"
        assert str(sent.url).endswith("blacklist?confidenceMinimum=100&limit=2&plaintext")

    def test_json_body_is_pretty_printed(self) -> None:
        body = {"errors": [{"detail": "Daily rate limit of 5 requests exceeded.", "status": 429}]}
        handler = RecordingHandler(status_code=429, content=json.dumps(body).encode())

        with make_client(handler) as client:
            result = client.get_blacklist_plaintext()

        assert result.text == json.dumps(body, indent=2)
        assert result.http_status_code == 429

    def test_deeply_nested_body_is_returned_verbatim(self) -> None:
        handler = RecordingHandler(content=b"[" * 100_000)

        with make_client(handler) as client:
            result = client.get_blacklist_plaintext()

        assert result.status == ResultStatus.PLAINTEXT
        assert result.text == "[" * 100_000

    def test_invalid_utf8_is_kept_in_body(self) -> None:
        handler = RecordingHandler(content=b"1.2.3.4\n\xff\xfe")

        with make_client(handler) as client:
            result = client.get_blacklist_plaintext()

        assert result.body == b"1.2.3.4\n\xff\xfe"
        assert result.text == "1.2.3.4\n\ufffd\ufffd"


class TestClientLifecycle:
    """The client owns its transport until closed."""

    def test_close_releases_transport(self) -> None:
        handler = RecordingHandler()
        client = make_client(handler)

        client.close()
        client.close()

        assert client.closed
        with pytest.raises(TransportClosedError):
            client.check_ip_address("1.2.3.4")
        assert handler.requests == []

    def test_transport_is_reused_across_calls(self) -> None:
        handler = RecordingHandler()

        with make_client(handler) as client:
            client.check_ip_address("1.2.3.4")
            client.check_ip_address("5.6.7.8")
            client.clear_ip_address("1.2.3.4")

        assert len(handler.requests) == 3
        assert all(request.headers["key"] == API_KEY for request in handler.requests)

    def test_debug_logs_connect_url_and_post_fields(self) -> None:
        logger = make_logger()
        handler = RecordingHandler()

        with make_client(handler, logger) as client:
            client.report_ip("1.2.3.4", CategorySet.of(ReportCategory.PORT_SCAN))

        messages = [entry.message for entry in logger.entries]
        assert "Connecting to https://api.abuseipdb.com/api/v2/report" in messages
        fields = [entry for entry in logger.entries if entry.message == "Post fields"]
        assert fields[0].data["fields"] == "ip=1.2.3.4&categories=14&comment="
