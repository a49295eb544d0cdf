"""Base class for aggregate roots."""

from datetime import UTC, datetime

from tessera.domain.shared.model.entity import Entity


class Aggregate(Entity):
    """Root of a consistency boundary.

    Every aggregate carries `created_at` and `updated_at`; `updated_at` is the
    version stamp that fingerprints and fragment keys are derived from.
    """

    created_at: datetime
    updated_at: datetime

    def touch(self, at: datetime | None = None) -> None:
        """Bump `updated_at` without changing any other attribute."""
        self.updated_at = at or datetime.now(UTC)
