"""Public request models."""

from httpipe._internal.dispatch.models import Method, Params, Placement, Recipe

__all__ = ["Method", "Params", "Placement", "Recipe"]
