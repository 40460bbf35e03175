"""Typed request dispatcher."""

import json
import os
import sys
import threading
import time
from typing import Any, TypeVar

import httpx

from httpipe._internal.dispatch.merge import check_receptacle, merge_into
from httpipe._internal.dispatch.models import (
    FORM_CONTENT_TYPE,
    Method,
    Pairs,
    Params,
    Placement,
    encode_form,
    normalize_params,
)
from httpipe._internal.http import DEFAULT_TIMEOUT, create_http_client
from httpipe.exceptions import ContractError, DecodeError, HTTPStatusError, TransportError

T = TypeVar("T")


class Dispatcher:
    """Performs single request/response cycles and merges JSON into receptacles.

    ``timeout`` and ``client`` are plain attributes read at call time, so
    changing them affects the next request only. Calls in flight keep the
    values they started with.

    Use `Dispatcher.from_env()` to build one from environment variables.
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.Client | None = None,
        base_url: str | None = None,
        debug: bool = False,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            timeout: Per-request deadline in seconds.
            client: HTTP client used to execute requests. When omitted, one is
                created on first use with `create_http_client`.
            base_url: Base URL for the default client (ignored with ``client``).
            debug: Enable debug logging to stderr.
        """
        self.timeout = timeout
        self._client = client
        self._owns_client = False
        self._base_url = base_url
        self._debug = debug

    @classmethod
    def from_env(cls) -> "Dispatcher":
        """Create a dispatcher from environment variables.

        Optional environment variables:
            HTTPIPE_TIMEOUT: Request timeout in seconds (default: 60).
            HTTPIPE_BASE_URL: Base URL for relative request URLs.
            HTTPIPE_DEBUG: Set to "1" to enable debug logging.

        Raises:
            ValueError: If HTTPIPE_TIMEOUT is not a number.
        """
        timeout = float(os.environ.get("HTTPIPE_TIMEOUT", str(DEFAULT_TIMEOUT)))
        base_url = os.environ.get("HTTPIPE_BASE_URL") or None
        debug = os.environ.get("HTTPIPE_DEBUG", "") == "1"

        return cls(timeout=timeout, base_url=base_url, debug=debug)

    @property
    def client(self) -> httpx.Client:
        """The HTTP client used for the next request."""
        if self._client is None:
            self._client = create_http_client(timeout=self.timeout, base_url=self._base_url)
            self._owns_client = True
        return self._client

    @client.setter
    def client(self, client: httpx.Client) -> None:
        self._client = client
        self._owns_client = False

    def close(self) -> None:
        """Close the default client if this dispatcher created it."""
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None
            self._owns_client = False

    def _log_debug(self, message: str) -> None:
        """Log a debug message to stderr if debug mode is enabled."""
        if self._debug:
            print(f"[httpipe] {message}", file=sys.stderr)

    def request(self, method: str | Method, url: str, out: T, data: Params | None = None) -> T:
        """Send one request and merge the JSON response into ``out``.

        Args:
            method: GET, POST, PUT, PATCH or DELETE.
            url: Absolute URL, or relative to the client's base URL.
            out: Receptacle (pydantic model or mutable mapping) updated in place.
            data: Optional input values. GET and DELETE send them in the query
                string, POST, PUT and PATCH as a form-encoded body.

        Returns:
            The same ``out`` object.

        Raises:
            ContractError: Invalid method, url, receptacle or params.
            TransportError: Connection failure, timeout or body read failure.
            HTTPStatusError: Status outside [200, 300). ``out`` is not modified.
            DecodeError: Body is not JSON or does not fit ``out``. ``out`` is
                not modified.
        """
        method = Method.parse(method)
        if not url:
            raise ContractError("url must not be empty")
        check_receptacle(out)
        pairs = normalize_params(data)

        client = self.client
        timeout = self.timeout
        deadline = time.monotonic() + timeout

        request = self._build_request(client, method, url, pairs, timeout)
        self._log_debug(f"Sending {request.method} {request.url}")

        body = self._exchange_within(client, request, timeout, deadline)

        self._decode(body, out)
        self._log_debug(f"Merged {len(body)} bytes into {type(out).__name__}")
        return out

    def _build_request(
        self,
        client: httpx.Client,
        method: Method,
        url: str,
        pairs: Pairs | None,
        timeout: float,
    ) -> httpx.Request:
        """Build the request, placing input according to the method."""
        content: bytes | None = None
        headers: dict[str, str] = {}
        try:
            target = httpx.URL(url)
            if pairs is not None:
                if method.placement is Placement.QUERY:
                    # keep what is already on the URL, add ours alongside
                    query = list(target.params.multi_items()) + pairs
                    target = target.copy_with(params=query)
                else:
                    content = encode_form(pairs)
                    headers["Content-Type"] = FORM_CONTENT_TYPE
                    headers["Content-Length"] = str(len(content))
            return client.build_request(
                method.value,
                target,
                content=content,
                headers=headers,
                timeout=timeout,
            )
        except httpx.InvalidURL as e:
            raise ContractError(f"invalid url {url!r}: {e}") from e

    def _exchange_within(
        self,
        client: httpx.Client,
        request: httpx.Request,
        timeout: float,
        deadline: float,
    ) -> bytes:
        """Run send, status check and body read, returning once the deadline passes.

        httpx only bounds each socket operation, so the exchange runs on a
        daemon thread and the caller stops waiting at the deadline. An
        abandoned exchange stops reading at its next chunk and closes the
        response.
        """
        outcome: dict[str, Any] = {}

        def run() -> None:
            try:
                outcome["body"] = self._exchange(client, request, timeout, deadline)
            except Exception as e:
                outcome["error"] = e

        worker = threading.Thread(target=run, name="httpipe-exchange", daemon=True)
        worker.start()
        worker.join(max(deadline - time.monotonic(), 0.0))

        if worker.is_alive():
            self._log_debug(f"{request.method} {request.url} exceeded deadline of {timeout}s")
            raise TransportError(
                f"{request.method} {request.url} exceeded deadline of {timeout}s", timed_out=True
            )
        if "error" in outcome:
            raise outcome["error"]
        return outcome["body"]

    def _exchange(
        self,
        client: httpx.Client,
        request: httpx.Request,
        timeout: float,
        deadline: float,
    ) -> bytes:
        response = self._send(client, request, timeout)
        try:
            self._check_status(response)
            return self._read_body(response, deadline)
        finally:
            response.close()

    def _send(self, client: httpx.Client, request: httpx.Request, timeout: float) -> httpx.Response:
        """Execute the request, leaving the body unread."""
        try:
            return client.send(request, stream=True)
        except httpx.TimeoutException as e:
            self._log_debug(f"{request.method} {request.url} timed out")
            raise TransportError(
                f"{request.method} {request.url} timed out after {timeout}s", timed_out=True
            ) from e
        except httpx.HTTPError as e:
            self._log_debug(f"{request.method} {request.url} failed: {e}")
            raise TransportError(f"{request.method} {request.url} failed: {e}") from e

    def _check_status(self, response: httpx.Response) -> None:
        if response.status_code >= 200 and response.status_code < 300:
            return
        self._log_debug(f"Request failed with status {response.status_code}")
        raise HTTPStatusError(
            f"{response.status_code} {response.reason_phrase}".strip(),
            status_code=response.status_code,
            reason_phrase=response.reason_phrase,
        )

    def _read_body(self, response: httpx.Response, deadline: float) -> bytes:
        """Read the whole body, giving up once the deadline has passed."""
        chunks: list[bytes] = []
        try:
            for chunk in response.iter_bytes():
                chunks.append(chunk)
                if time.monotonic() > deadline:
                    raise TransportError("deadline exceeded while reading body", timed_out=True)
        except httpx.TimeoutException as e:
            raise TransportError(f"timed out reading body: {e}", timed_out=True) from e
        except (httpx.HTTPError, httpx.StreamError) as e:
            raise TransportError(f"failed reading body: {e}") from e
        return b"".join(chunks)

    def _decode(self, body: bytes, out: Any) -> None:
        try:
            decoded = json.loads(body)
        except ValueError as e:
            raise DecodeError(f"invalid JSON response: {e}") from e
        merge_into(out, decoded)

    # =========================================================================
    # Convenience Methods
    # =========================================================================

    def get(self, url: str, out: T, data: Params | None = None) -> T:
        """Send a GET request; ``data`` goes to the query string."""
        return self.request(Method.GET, url, out, data)

    def post(self, url: str, out: T, data: Params | None = None) -> T:
        """Send a POST request; ``data`` is sent as a form body."""
        return self.request(Method.POST, url, out, data)

    def put(self, url: str, out: T, data: Params | None = None) -> T:
        """Send a PUT request; ``data`` is sent as a form body."""
        return self.request(Method.PUT, url, out, data)

    def patch(self, url: str, out: T, data: Params | None = None) -> T:
        """Send a PATCH request; ``data`` is sent as a form body."""
        return self.request(Method.PATCH, url, out, data)

    def delete(self, url: str, out: T, data: Params | None = None) -> T:
        """Send a DELETE request; ``data`` goes to the query string."""
        return self.request(Method.DELETE, url, out, data)


_default_dispatcher: Dispatcher | None = None


def get_dispatcher() -> Dispatcher:
    """Get the process-wide default dispatcher.

    It is created from environment variables on first use and shared by the
    module-level request functions and the pipeline runner.
    """
    global _default_dispatcher
    if _default_dispatcher is None:
        _default_dispatcher = Dispatcher.from_env()
    return _default_dispatcher


def set_dispatcher(dispatcher: Dispatcher | None) -> None:
    """Replace the default dispatcher. ``None`` resets it to a fresh one on next use."""
    global _default_dispatcher
    _default_dispatcher = dispatcher
