"""Recipes and the sequential pipeline runner."""

from httpipe._internal.pipeline.runner import (
    delete_recipe,
    execute_recipe,
    get_recipe,
    patch_recipe,
    pipe,
    post_recipe,
    put_recipe,
)

__all__ = [
    "pipe",
    "execute_recipe",
    "get_recipe",
    "post_recipe",
    "put_recipe",
    "patch_recipe",
    "delete_recipe",
]
