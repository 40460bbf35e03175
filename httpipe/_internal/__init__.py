"""Internal modules for httpipe.

The public API is re-exported from ``httpipe`` and ``httpipe.client``.

Modules:
    dispatch - Request dispatcher and merge-decoding
    pipeline - Recipes and the sequential pipeline runner
    http - Shared HTTP client configuration
"""
