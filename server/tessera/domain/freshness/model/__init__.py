"""Freshness models."""

from .fingerprint import Fingerprint, cache_key_for, last_modified_of
from .fragment import FragmentKey, Personalization, overlay_attributes, viewer_meta

__all__ = [
    "Fingerprint",
    "FragmentKey",
    "Personalization",
    "cache_key_for",
    "last_modified_of",
    "overlay_attributes",
    "viewer_meta",
]
