"""JSON-over-HTTP helpers shared by the generation client and comment publisher.

Every failure is converted to a ``ServiceRequestError`` (or its
``ServiceConnectionError`` subclass for DNS, refused-connection and
timeout failures) with a message that is readable in CI logs.
"""

import logging
from typing import Any
from urllib.parse import urlparse

import requests

from review_bot.pipeline.exceptions import ServiceConnectionError, ServiceRequestError

logger = logging.getLogger(__name__)

USER_AGENT = "AI-Review-Bot/1.0"
DEFAULT_TIMEOUT = 30.0
MAX_ERROR_BODY = 200

_DNS_MARKERS = (
    "nameresolutionerror",
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "temporary failure in name resolution",
)


def _describe_connection_error(exc: requests.exceptions.ConnectionError, url: str) -> str:
    parsed = urlparse(url)
    message = str(exc)
    lowered = message.lower()
    if any(marker in lowered for marker in _DNS_MARKERS):
        return f"DNS lookup failed for hostname: {parsed.hostname}. Please check the URL."
    if "refused" in lowered:
        port = parsed.port or (443 if parsed.scheme == "https" else 80)
        return (
            f"Connection refused to {parsed.hostname}:{port}. "
            "Please check if the service is running."
        )
    return f"Request failed: {message}"


def request_json(
    session: requests.Session,
    method: str,
    url: str,
    payload: Any = None,
    headers: dict[str, str] | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> Any:
    """Send an HTTP request and return the decoded JSON body.

    Args:
        session: Session used to send the request.
        method: HTTP method, e.g. "GET" or "POST".
        url: Absolute URL.
        payload: JSON-serialisable body, or None for no body.
        headers: Extra headers; merged over the default User-Agent.
        timeout: Timeout in seconds.

    Returns:
        Decoded JSON value.

    Raises:
        ServiceConnectionError: On DNS, refused-connection or timeout failures.
        ServiceRequestError: On any other transport failure, a non-2xx status,
            an empty body or a body that is not valid JSON.
    """
    merged_headers = {"User-Agent": USER_AGENT}
    merged_headers.update(headers or {})

    parsed = urlparse(url)
    logger.debug("%s %s://%s%s", method, parsed.scheme, parsed.netloc, parsed.path)

    try:
        response = session.request(
            method,
            url,
            json=payload,
            headers=merged_headers,
            timeout=timeout,
        )
    except requests.exceptions.Timeout as exc:
        raise ServiceConnectionError(
            f"Request timed out after {timeout:g}s. The service may be slow or unresponsive."
        ) from exc
    except requests.exceptions.SSLError as exc:
        raise ServiceRequestError(
            f"SSL certificate verification failed for {parsed.hostname}: {exc}"
        ) from exc
    except requests.exceptions.ConnectionError as exc:
        raise ServiceConnectionError(_describe_connection_error(exc, url)) from exc
    except requests.exceptions.RequestException as exc:
        raise ServiceRequestError(f"Request failed: {exc}") from exc

    status = response.status_code
    body = response.text or ""
    logger.debug("Response status %d (%d characters)", status, len(body))

    if status < 200 or status >= 300:
        raise ServiceRequestError(
            f"HTTP {status}: {response.reason}. Response: {body[:MAX_ERROR_BODY]}",
            status_code=status,
        )

    if not body.strip():
        raise ServiceRequestError("Empty response body when JSON was expected", status_code=status)

    try:
        return response.json()
    except ValueError as exc:
        raise ServiceRequestError(
            f"Failed to parse response: {exc}. Response: {body[:MAX_ERROR_BODY]}",
            status_code=status,
        ) from exc


def post_json(
    session: requests.Session,
    url: str,
    payload: Any,
    headers: dict[str, str] | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> Any:
    return request_json(session, "POST", url, payload=payload, headers=headers, timeout=timeout)


def get_json(
    session: requests.Session,
    url: str,
    headers: dict[str, str] | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> Any:
    return request_json(session, "GET", url, headers=headers, timeout=timeout)
