"""
Client factory.

Holds at most one AbuseIpDbClient, keyed by API key. The factory is an
explicit object created by the composition root (the CLI) rather than a
module-level singleton.
"""

from typing import Optional

import httpx

from .audit_logger import AuditLogger
from .client import AbuseIpDbClient
from .config import ApiConfig
from .exceptions import ApiKeyMismatchError


COMPONENT = "factory"


class ClientFactory:
    """
    Construct-or-reuse-or-replace cache for a single API client.

    - no instance: construct one
    - same key: return the cached instance
    - different key with override: close the old instance, construct a new one
    - different key without override: raise ApiKeyMismatchError
    """

    def __init__(
        self,
        logger: Optional[AuditLogger] = None,
        config: Optional[ApiConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._logger = logger
        self._config = config
        self._transport = transport
        self._instance: Optional[AbuseIpDbClient] = None

    def __enter__(self) -> "ClientFactory":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def instance(self) -> Optional[AbuseIpDbClient]:
        return self._instance

    def _create(self, api_key: str) -> AbuseIpDbClient:
        return AbuseIpDbClient(
            api_key,
            logger=self._logger,
            config=self._config,
            transport=self._transport,
        )

    def get_instance(self, api_key: str, override_if_key_changed: bool = False) -> AbuseIpDbClient:
        """
        Get the client for api_key.

        Raises:
            ApiKeyMismatchError: If a client for another key exists and
                override_if_key_changed is False
        """
        if self._instance is None:
            self._instance = self._create(api_key)
            return self._instance

        if self._instance.api_key == api_key:
            return self._instance

        if not override_if_key_changed:
            raise ApiKeyMismatchError(
                code="api_key_mismatch",
                message="API key mismatch!",
            )

        if self._logger:
            self._logger.debug(COMPONENT, "API key changed, replacing client instance")
        self._instance.close()
        self._instance = self._create(api_key)
        return self._instance

    def close(self) -> None:
        if self._instance is not None:
            self._instance.close()
            self._instance = None
