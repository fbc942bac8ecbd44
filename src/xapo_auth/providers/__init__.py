"""OAuth provider implementations.

This module contains concrete implementations of OAuth providers.
"""

from .xapo import XapoProviderAdapter

__all__ = [
    "XapoProviderAdapter",
]
