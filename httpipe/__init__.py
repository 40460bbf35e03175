"""httpipe: typed HTTP requests that merge JSON into your objects.

Public API:
    request, get, post, put, patch, delete - Single requests via the default dispatcher
    pipe - Run recipes in order against one shared receptacle
    get_recipe, post_recipe, put_recipe, patch_recipe, delete_recipe - Recipe constructors
    Dispatcher - Explicitly configured dispatcher (timeout, client)
    configure - Adjust the default dispatcher
"""

from httpipe._internal.pipeline import (
    delete_recipe,
    execute_recipe,
    get_recipe,
    patch_recipe,
    pipe,
    post_recipe,
    put_recipe,
)
from httpipe._version import __version__
from httpipe.client import (
    Dispatcher,
    configure,
    delete,
    get,
    get_dispatcher,
    patch,
    post,
    put,
    request,
    set_dispatcher,
)
from httpipe.exceptions import (
    ContractError,
    DecodeError,
    HttpipeError,
    HTTPStatusError,
    TransportError,
)
from httpipe.models import Method, Params, Placement, Recipe

__all__ = [
    "__version__",
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
    "pipe",
    "execute_recipe",
    "get_recipe",
    "post_recipe",
    "put_recipe",
    "patch_recipe",
    "delete_recipe",
    "Method",
    "Params",
    "Placement",
    "Recipe",
    "HttpipeError",
    "TransportError",
    "HTTPStatusError",
    "DecodeError",
    "ContractError",
]
