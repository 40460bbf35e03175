"""Request dispatcher: encode, execute, validate and merge-decode."""

from httpipe._internal.dispatch.client import Dispatcher, get_dispatcher, set_dispatcher
from httpipe._internal.dispatch.merge import merge_into
from httpipe._internal.dispatch.models import (
    Method,
    Params,
    Placement,
    Recipe,
    encode_form,
    normalize_params,
)

__all__ = [
    "Dispatcher",
    "get_dispatcher",
    "set_dispatcher",
    "merge_into",
    "Method",
    "Params",
    "Placement",
    "Recipe",
    "encode_form",
    "normalize_params",
]
