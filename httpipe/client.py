"""Module-level request functions backed by the default dispatcher.

Example:
    from pydantic import BaseModel
    import httpipe

    class Greeting(BaseModel):
        word: str = ""
        name: str = ""

    httpipe.configure(timeout=10)
    greet = httpipe.get("https://example.test/greet", Greeting(), {"name": "Rob"})
"""

from typing import TypeVar

import httpx

from httpipe._internal.dispatch.client import Dispatcher, get_dispatcher, set_dispatcher
from httpipe._internal.dispatch.models import Method, Params

T = TypeVar("T")

__all__ = [
    "Dispatcher",
    "configure",
    "get_dispatcher",
    "set_dispatcher",
    "request",
    "get",
    "post",
    "put",
    "patch",
    "delete",
]


def configure(
    *,
    timeout: float | None = None,
    client: httpx.Client | None = None,
) -> Dispatcher:
    """Change the default timeout and/or client for subsequent requests.

    Returns:
        The default dispatcher.
    """
    dispatcher = get_dispatcher()
    if timeout is not None:
        dispatcher.timeout = timeout
    if client is not None:
        dispatcher.client = client
    return dispatcher


def request(method: str | Method, url: str, out: T, data: Params | None = None) -> T:
    """Send a request with the default dispatcher. See `Dispatcher.request`."""
    return get_dispatcher().request(method, url, out, data)


def get(url: str, out: T, data: Params | None = None) -> T:
    return get_dispatcher().get(url, out, data)


def post(url: str, out: T, data: Params | None = None) -> T:
    return get_dispatcher().post(url, out, data)


def put(url: str, out: T, data: Params | None = None) -> T:
    return get_dispatcher().put(url, out, data)


def patch(url: str, out: T, data: Params | None = None) -> T:
    return get_dispatcher().patch(url, out, data)


def delete(url: str, out: T, data: Params | None = None) -> T:
    return get_dispatcher().delete(url, out, data)
