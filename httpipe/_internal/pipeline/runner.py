"""Sequential pipeline runner.

Every stage of a pipeline reads and writes the same receptacle, so stages
always run one after another and the first failure ends the run.
"""

from collections.abc import Callable
from typing import Any, TypeVar

from httpipe._internal.dispatch.client import Dispatcher, get_dispatcher
from httpipe._internal.dispatch.models import Method, Recipe
from httpipe.exceptions import ContractError, HttpipeError

T = TypeVar("T")

RecipeLike = Recipe | Callable[[Any], Any]


def execute_recipe(recipe: Recipe, out: T, *, dispatcher: Dispatcher | None = None) -> T:
    """Resolve ``recipe`` against ``out`` and perform exactly one request.

    Args:
        recipe: The bound request.
        out: Receptacle passed to lazy url/data callables and merged into.
        dispatcher: Dispatcher to use (default: `get_dispatcher()`).

    Returns:
        The same ``out`` object.
    """
    dispatcher = dispatcher or get_dispatcher()
    url, data = recipe.resolve(out)
    return dispatcher.request(recipe.method, url, out, data)


def pipe(out: T, *recipes: RecipeLike, dispatcher: Dispatcher | None = None) -> T:
    """Run recipes in order against one shared receptacle.

    Each recipe is either a `Recipe` or a callable that takes the receptacle.
    The first exception stops the run and is re-raised as is; for httpipe
    errors ``recipe_index`` records which stage failed.

    Args:
        out: The shared receptacle.
        *recipes: Stages to run, in order.
        dispatcher: Dispatcher used for `Recipe` stages (default: `get_dispatcher()`).

    Returns:
        The same ``out`` object, holding everything merged by the stages.
    """
    dispatcher = dispatcher or get_dispatcher()
    for index, recipe in enumerate(recipes):
        try:
            if isinstance(recipe, Recipe):
                dispatcher._log_debug(f"Pipeline stage {index}: {recipe.describe()}")
                execute_recipe(recipe, out, dispatcher=dispatcher)
            elif callable(recipe):
                dispatcher._log_debug(f"Pipeline stage {index}: {recipe!r}")
                recipe(out)
            else:
                raise ContractError(f"unsupported recipe type: {type(recipe).__name__}")
        except HttpipeError as e:
            if e.recipe_index is None:
                e.recipe_index = index
            dispatcher._log_debug(f"Pipeline stopped at stage {index}: {e}")
            raise
    return out


# =============================================================================
# Recipe Constructors
# =============================================================================


def get_recipe(url: Any, data: Any = None, *, name: str | None = None) -> Recipe:
    """Bind a GET request; ``data`` goes to the query string."""
    return Recipe(method=Method.GET, url=url, data=data, name=name)


def post_recipe(url: Any, data: Any = None, *, name: str | None = None) -> Recipe:
    """Bind a POST request; ``data`` is sent as a form body."""
    return Recipe(method=Method.POST, url=url, data=data, name=name)


def put_recipe(url: Any, data: Any = None, *, name: str | None = None) -> Recipe:
    """Bind a PUT request; ``data`` is sent as a form body."""
    return Recipe(method=Method.PUT, url=url, data=data, name=name)


def patch_recipe(url: Any, data: Any = None, *, name: str | None = None) -> Recipe:
    """Bind a PATCH request; ``data`` is sent as a form body."""
    return Recipe(method=Method.PATCH, url=url, data=data, name=name)


def delete_recipe(url: Any, data: Any = None, *, name: str | None = None) -> Recipe:
    """Bind a DELETE request; ``data`` goes to the query string."""
    return Recipe(method=Method.DELETE, url=url, data=data, name=name)
