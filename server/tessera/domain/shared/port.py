"""Marker base for domain ports (outbound interfaces implemented by infrastructure)."""

from typing import Protocol


class Port(Protocol):
    """Base for all ports. Adapters live under tessera.infrastructure."""
