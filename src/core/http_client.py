"""HTTP client for remote collaborators.

Configures the httpx client shared by the Hoarder, Bluesky and LinkedIn
clients: explicit timeouts, a relay user agent and JSON accept headers.
request_json() turns every failure, timeouts included, into a RemoteCallError.
"""

from typing import Any

import httpx

from src.core.exceptions import ParseError, RemoteCallError

# Default timeout configuration (in seconds)
DEFAULT_CONNECT_TIMEOUT = 10.0
DEFAULT_READ_TIMEOUT = 30.0
DEFAULT_WRITE_TIMEOUT = 10.0
DEFAULT_POOL_TIMEOUT = 10.0

USER_AGENT = "HoarderSocialRelay/1.0"


def get_timeout() -> httpx.Timeout:
    """Get default timeout configuration.

    Returns:
        httpx.Timeout with configured connect/read/write/pool timeouts.
    """
    return httpx.Timeout(
        connect=DEFAULT_CONNECT_TIMEOUT,
        read=DEFAULT_READ_TIMEOUT,
        write=DEFAULT_WRITE_TIMEOUT,
        pool=DEFAULT_POOL_TIMEOUT,
    )


def get_headers() -> dict[str, str]:
    """Get default headers for requests.

    All three remote services speak JSON.
    """
    return {
        "User-Agent": USER_AGENT,
        "Accept": "application/json",
    }


def create_client(
    *,
    timeout: httpx.Timeout | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create an async HTTP client with configured defaults.

    Args:
        timeout: Custom timeout configuration. Uses defaults if not provided.
        transport: Optional transport, e.g. httpx.MockTransport in tests.

    Returns:
        Configured httpx.AsyncClient ready for use.

    Example:
        async with create_client() as client:
            response = await client.get("https://hoarder.example/api/v1/bookmarks/abc")
    """
    return httpx.AsyncClient(
        timeout=timeout or get_timeout(),
        headers=get_headers(),
        transport=transport,
    )


# Singleton client for reuse across requests
_client: httpx.AsyncClient | None = None


async def get_client() -> httpx.AsyncClient:
    """Get or create a shared HTTP client instance.

    The client is created on first call and reused for subsequent calls,
    pooling connections across webhook events.

    Note:
        The caller should NOT close this client - it's managed globally.
        Use close_client() at application shutdown.
    """
    global _client
    if _client is None:
        _client = create_client()
    return _client


async def close_client() -> None:
    """Close the shared HTTP client.

    Should be called at application shutdown to cleanly close connections.
    """
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None


def describe_error(exc: Exception) -> str:
    """Short human-readable description of an httpx failure for logs."""
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        body = exc.response.text[:200]
        return f"status {status}: {body}" if body else f"status {status}"
    if isinstance(exc, httpx.TimeoutException):
        return f"timeout ({type(exc).__name__})"
    return str(exc) or type(exc).__name__


async def request_json(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    service: str,
    **kwargs: Any,
) -> Any:
    """Send a request and decode the JSON response.

    Args:
        client: The httpx client to send with.
        method: HTTP method.
        url: Absolute URL.
        service: Remote service name, recorded on raised errors.
        **kwargs: Passed through to client.request (headers, json, ...).

    Returns:
        The decoded JSON body.

    Raises:
        RemoteCallError: On a non-2xx status or a transport error.
        ParseError: If the body is not valid JSON.
    """
    try:
        response = await client.request(method, url, **kwargs)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise RemoteCallError(
            f"{service} responded with {describe_error(e)}",
            service=service,
            status_code=e.response.status_code,
        ) from e
    except httpx.HTTPError as e:
        raise RemoteCallError(
            f"{service} request failed: {describe_error(e)}",
            service=service,
        ) from e

    try:
        return response.json()
    except ValueError as e:
        raise ParseError(f"{service} returned invalid JSON") from e
