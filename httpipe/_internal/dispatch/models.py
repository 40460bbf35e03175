"""Methods, parameter normalisation and recipe records.

A recipe is plain data: the pipeline runner can log or inspect it without
executing anything.
"""

from collections.abc import Callable, Iterable, Mapping
from enum import Enum
from typing import Any
from urllib.parse import urlencode

import httpx
from pydantic import BaseModel, field_validator

from httpipe.exceptions import ContractError

# =============================================================================
# Constants
# =============================================================================

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

# Accepted input shapes; normalised to an ordered list of (key, value) pairs.
Params = Mapping[str, Any] | Iterable[tuple[str, Any]] | httpx.QueryParams
Pairs = list[tuple[str, str]]

# =============================================================================
# Methods
# =============================================================================


class Placement(str, Enum):
    """Where a method carries its input values."""

    QUERY = "query"
    BODY = "body"


class Method(str, Enum):
    """Supported request methods."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"

    @property
    def placement(self) -> Placement:
        return _PLACEMENTS[self]

    @classmethod
    def parse(cls, value: "str | Method") -> "Method":
        """Return the Method for ``value``, ignoring case.

        Raises:
            ContractError: If the value is not a supported method.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value.upper())
        except (AttributeError, ValueError):
            raise ContractError(f"unsupported request method: {value!r}") from None


_PLACEMENTS: dict[Method, Placement] = {
    Method.GET: Placement.QUERY,
    Method.DELETE: Placement.QUERY,
    Method.POST: Placement.BODY,
    Method.PUT: Placement.BODY,
    Method.PATCH: Placement.BODY,
}

# =============================================================================
# Parameters
# =============================================================================


def _to_str(value: Any) -> str | None:
    """Text form of one input value; ``None`` means the value is omitted."""
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


def normalize_params(data: Params | None) -> Pairs | None:
    """Flatten input values into ordered (key, value) pairs.

    Mapping values that are iterables (other than strings) become repeated
    keys. Bytes are decoded as UTF-8, other scalars are converted with
    ``str()``, and ``None`` values are left out. A ``None`` input stays
    ``None`` so an absent input can be told apart from an empty one.

    Raises:
        ContractError: If ``data`` is not a mapping or an iterable of pairs,
            or holds bytes that are not UTF-8.
    """
    if data is None:
        return None
    if isinstance(data, httpx.QueryParams):
        return list(data.multi_items())
    if isinstance(data, str | bytes):
        raise ContractError("params must be a mapping or key/value pairs, not a string")
    try:
        if isinstance(data, Mapping):
            items: list[tuple[Any, Any]] = []
            for key, value in data.items():
                if isinstance(value, str | bytes) or not isinstance(value, Iterable):
                    items.append((key, value))
                else:
                    items.extend((key, item) for item in value)
        else:
            items = [(key, value) for key, value in data]
        pairs: Pairs = []
        for key, value in items:
            text = _to_str(value)
            if text is not None:
                pairs.append((str(key), text))
        return pairs
    except UnicodeDecodeError as e:
        raise ContractError(f"params must be UTF-8 text: {e}") from e
    except (TypeError, ValueError) as e:
        raise ContractError(f"params must be a mapping or key/value pairs: {e}") from e


def encode_form(pairs: Pairs) -> bytes:
    """URL-encode pairs as a form body, keeping repeated keys."""
    return urlencode(pairs).encode("ascii")


# =============================================================================
# Recipes
# =============================================================================


class Recipe(BaseModel):
    """A bound, not yet executed request.

    ``url`` and ``data`` may be callables taking the receptacle; they are
    resolved when the recipe runs, so a stage can build its request from
    fields written by an earlier stage.
    """

    method: Method
    url: str | Callable[[Any], str]
    data: tuple[tuple[str, str], ...] | Callable[[Any], Any] | None = None
    name: str | None = None

    model_config = {"frozen": True}

    @field_validator("method", mode="before")
    @classmethod
    def method_upper(cls, v: Any) -> Any:
        if isinstance(v, str) and not isinstance(v, Method):
            return v.upper()
        return v

    @field_validator("url")
    @classmethod
    def url_not_empty(cls, v: Any) -> Any:
        if isinstance(v, str) and not v:
            raise ValueError("url must not be empty")
        return v

    @field_validator("data", mode="before")
    @classmethod
    def data_to_pairs(cls, v: Any) -> Any:
        if v is None or callable(v):
            return v
        try:
            return tuple(normalize_params(v))  # type: ignore[arg-type]
        except ContractError as e:
            raise ValueError(str(e)) from e

    def resolve(self, out: Any) -> tuple[str, Pairs | None]:
        """Return the concrete URL and input pairs for ``out``."""
        url = self.url(out) if callable(self.url) else self.url
        if callable(self.data):
            return url, normalize_params(self.data(out))
        return url, list(self.data) if self.data is not None else None

    def describe(self) -> str:
        """Short label for debug output."""
        if self.name:
            return self.name
        url = "<dynamic>" if callable(self.url) else self.url
        return f"{self.method.value} {url}"
