"""Shared HTTP handling for the demografix lookup services."""

from typing import Any, Dict, Optional

import requests

from ..errors import ResolverError
from ..logger import StructuredLogger, get_logger


def fetch_lookup(
    url: str,
    name: str,
    attribute: str,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
    logger: Optional[StructuredLogger] = None,
) -> Dict[str, Any]:
    """Issue one GET ?name=<name> against a lookup service and decode the JSON object.

    Args:
        url: Base URL of the service (e.g. https://api.agify.io)
        name: Given name to look up
        attribute: Attribute resolved by the service, used in errors and metrics
        session: Optional requests session to reuse connections
        timeout: Seconds before giving up; None keeps the transport default
        logger: Logger for metrics (default: global logger)

    Returns:
        Decoded response body

    Raises:
        ResolverError: On transport failure, HTTP error status, or a body that is not a JSON object
    """
    logger = logger or get_logger()
    http = session or requests
    logger.record_lookup_attempt(attribute)
    try:
        resp = http.get(url, params={"name": name}, timeout=timeout)
        resp.raise_for_status()
    except requests.exceptions.HTTPError as e:
        status = e.response.status_code if e.response is not None else "HTTPError"
        logger.record_lookup_failure(attribute, f"HTTPError_{status}")
        logger.error(f"{attribute.capitalize()} lookup failed", url=url, status=status)
        raise ResolverError(attribute, f"lookup request failed ({status})") from e
    except requests.exceptions.Timeout as e:
        logger.record_lookup_failure(attribute, "Timeout")
        logger.warning(f"{attribute.capitalize()} lookup timed out", url=url)
        raise ResolverError(attribute, "lookup request timed out") from e
    except requests.exceptions.RequestException as e:
        logger.record_lookup_failure(attribute, "RequestException")
        logger.error(f"{attribute.capitalize()} lookup error", url=url, error=str(e))
        raise ResolverError(attribute, f"lookup request error: {e}") from e

    try:
        body = resp.json()
    except ValueError as e:
        logger.record_lookup_failure(attribute, "MalformedResponse")
        logger.error(f"{attribute.capitalize()} lookup returned invalid JSON", url=url)
        raise ResolverError(attribute, "malformed response body") from e
    if not isinstance(body, dict):
        logger.record_lookup_failure(attribute, "MalformedResponse")
        logger.error(f"{attribute.capitalize()} lookup returned non-object JSON", url=url)
        raise ResolverError(attribute, "malformed response body")
    return body


def undetermined(attribute: str, logger: Optional[StructuredLogger] = None) -> ResolverError:
    """Build the error for a well-formed response that carries no usable value."""
    logger = logger or get_logger()
    logger.record_lookup_failure(attribute, "Undetermined")
    logger.warning(f"Couldn't determine {attribute}")
    return ResolverError(attribute, f"couldn't determine {attribute}", undetermined=True)


def malformed(attribute: str, field: str, logger: Optional[StructuredLogger] = None) -> ResolverError:
    logger = logger or get_logger()
    logger.record_lookup_failure(attribute, "MalformedResponse")
    logger.error(f"{attribute.capitalize()} lookup returned unexpected '{field}' field")
    return ResolverError(attribute, f"malformed response body: unexpected '{field}' field")
