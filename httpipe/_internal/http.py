"""Default HTTP client for dispatchers that are not handed one."""

import httpx

from httpipe._version import __version__

DEFAULT_TIMEOUT = 60.0
USER_AGENT = f"httpipe/{__version__}"


def create_http_client(
    *,
    timeout: float = DEFAULT_TIMEOUT,
    base_url: str | None = None,
    follow_redirects: bool = True,
) -> httpx.Client:
    """Build the client a Dispatcher creates on first use.

    The timeout set here is only the client's fallback. Every dispatched
    request carries the dispatcher's live timeout, and redirects count
    against the same deadline as the original request.

    Args:
        timeout: Fallback per-operation timeout in seconds.
        base_url: Prefix for relative request URLs.
        follow_redirects: Follow 3xx responses so only the final status is
            checked against the 2xx rule.
    """
    return httpx.Client(
        timeout=timeout,
        base_url=base_url or "",
        follow_redirects=follow_redirects,
        headers={"User-Agent": USER_AGENT},
    )
