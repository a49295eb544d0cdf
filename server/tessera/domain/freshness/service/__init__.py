"""Freshness services."""

from .conditional import ConditionalGet, NotModified, Render

__all__ = ["ConditionalGet", "NotModified", "Render"]
