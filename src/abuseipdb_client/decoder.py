"""Response decoding for the AbuseIPDB client."""

import json
from typing import Any, Optional

from .audit_logger import AuditLogger
from .models import RawResponse


COMPONENT = "decoder"


def decode_json(raw: RawResponse, logger: Optional[AuditLogger] = None) -> tuple[Any, bool]:
    """
    Parse a captured body as JSON.

    Returns:
        (document, True) on success, ({}, False) if the body is not JSON.
        An empty body counts as unparseable.
    """
    text = raw.text
    try:
        return json.loads(text), True
    except (ValueError, RecursionError):
        if logger:
            logger.error(COMPONENT, "Failed to parse JSON!")
            logger.trace(COMPONENT, "Erroneous output", {"body": text})
        return {}, False


def decode_plaintext(raw: RawResponse, logger: Optional[AuditLogger] = None) -> str:
    """
    Render the plaintext blacklist body.

    A JSON body (e.g. an error document) is re-dumped with two-space
    indentation; anything else is returned verbatim.
    """
    text = raw.text
    try:
        return json.dumps(json.loads(text), indent=2)
    except (ValueError, RecursionError):
        if logger:
            logger.trace(COMPONENT, "Body is not JSON, returning it verbatim", {"bytes": len(raw)})
        return text
