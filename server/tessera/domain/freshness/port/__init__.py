"""Freshness ports."""

from .fragment_cache import FragmentCache

__all__ = ["FragmentCache"]
