"""
AbuseIPDB Client - command-line client for the AbuseIPDB v2 API.

This package reports abusive IP addresses, checks addresses and subnets,
clears reports and downloads blacklists, with a typed request builder,
a single reusable HTTP transport per API key, and structured results.
"""

__version__ = "0.1.0"
__author__ = "AbuseIPDB Client Team"

from abuseipdb_client.exceptions import (
    AbuseIpDbError,
    InputError,
    InvalidCategoriesError,
    BulkReportFileError,
    TransportClosedError,
    ApiKeyMismatchError,
    ConfigError,
)
from abuseipdb_client.enums import (
    ReportCategory,
    LogLevel,
    Endpoint,
    TransportStatus,
    ResultStatus,
)
from abuseipdb_client.categories import (
    CategorySet,
    CATEGORY_NAMES,
    combine,
    decode,
    parse_categories,
)
from abuseipdb_client.models import (
    MAX_IPS_STANDARD,
    MAX_IPS_BASIC_SUB,
    MAX_IPS_PREMIUM_SUB,
    BlacklistQuery,
    RawResponse,
    TransportOutcome,
    ApiResult,
)
from abuseipdb_client.request_builder import (
    DEFAULT_BASE_URL,
    PreparedRequest,
    RequestBuilder,
    build_headers,
    encode_params,
    escape,
)
from abuseipdb_client.transport import TransportExecutor
from abuseipdb_client.decoder import decode_json, decode_plaintext
from abuseipdb_client.audit_logger import AuditLogger, LogEntry
from abuseipdb_client.config import (
    ApiConfig,
    LoggingConfig,
    ReportConfig,
    SystemConfig,
    ConfigStore,
    load_system_config,
    save_config_to_file,
)
from abuseipdb_client.client import AbuseIpDbClient
from abuseipdb_client.factory import ClientFactory
from abuseipdb_client.cli import (
    main as cli_main,
    create_parser,
)

__all__ = [
    # Exceptions
    "AbuseIpDbError",
    "InputError",
    "InvalidCategoriesError",
    "BulkReportFileError",
    "TransportClosedError",
    "ApiKeyMismatchError",
    "ConfigError",
    # Enums
    "ReportCategory",
    "LogLevel",
    "Endpoint",
    "TransportStatus",
    "ResultStatus",
    # Categories
    "CategorySet",
    "CATEGORY_NAMES",
    "combine",
    "decode",
    "parse_categories",
    # Models
    "MAX_IPS_STANDARD",
    "MAX_IPS_BASIC_SUB",
    "MAX_IPS_PREMIUM_SUB",
    "BlacklistQuery",
    "RawResponse",
    "TransportOutcome",
    "ApiResult",
    # Request Builder
    "DEFAULT_BASE_URL",
    "PreparedRequest",
    "RequestBuilder",
    "build_headers",
    "encode_params",
    "escape",
    # Transport / Decoder
    "TransportExecutor",
    "decode_json",
    "decode_plaintext",
    # Audit Logger
    "AuditLogger",
    "LogEntry",
    # Configuration
    "ApiConfig",
    "LoggingConfig",
    "ReportConfig",
    "SystemConfig",
    "ConfigStore",
    "load_system_config",
    "save_config_to_file",
    # Client
    "AbuseIpDbClient",
    "ClientFactory",
    # CLI
    "cli_main",
    "create_parser",
]
