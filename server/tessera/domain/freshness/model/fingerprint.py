"""Fingerprints: opaque digests of the current state of domain objects."""

import hashlib
import json
from collections.abc import Sequence
from datetime import datetime
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from pydantic import RootModel

from tessera.domain.shared.error import ValidationError

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S%f"


@runtime_checkable
class Versioned(Protocol):
    """Anything with an identity and a modification timestamp."""

    id: Any
    updated_at: datetime


@runtime_checkable
class HasCacheKey(Protocol):
    @property
    def cache_key(self) -> str: ...


def _type_name(obj: object) -> str:
    return type(obj).__name__.lower()


def cache_key_for(part: Any) -> Any:
    """Deterministic, JSON-encodable key for one fingerprint input.

    - Objects with `id` and `updated_at` become ``"<type>/<id>-<timestamp>"``
      (microsecond precision, so any change to `updated_at` changes the key).
    - Objects exposing `cache_key` contribute it verbatim.
    - Scalars, datetimes, enums and nested sequences are rendered as values.

    Raises:
        ValidationError: For inputs with no deterministic rendering.
    """
    if isinstance(part, HasCacheKey):
        return part.cache_key
    if isinstance(part, Versioned):
        return f"{_type_name(part)}/{part.id}-{part.updated_at.strftime(TIMESTAMP_FORMAT)}"
    if isinstance(part, Enum):
        return f"{_type_name(part)}:{part.value}"
    if part is None or isinstance(part, (bool, int, str)):
        return part
    if isinstance(part, datetime):
        return part.strftime(TIMESTAMP_FORMAT)
    if isinstance(part, Sequence):
        return [cache_key_for(p) for p in part]
    raise ValidationError(f"Cannot derive a cache key from {type(part).__name__}")


class Fingerprint(RootModel[str]):
    """Hex SHA-256 over the ordered cache keys of its inputs. Never persisted."""

    @classmethod
    def of(cls, *parts: Any) -> "Fingerprint":
        keys = [cache_key_for(p) for p in parts]
        encoded = json.dumps(keys, separators=(",", ":"), ensure_ascii=True)
        return cls(hashlib.sha256(encoded.encode()).hexdigest())

    def __str__(self) -> str:
        return self.root

    def __hash__(self) -> int:
        return hash(self.root)


def _versioned(parts: Sequence[Any]) -> list[Versioned]:
    found: list[Versioned] = []
    for part in parts:
        if isinstance(part, Versioned) and isinstance(part.updated_at, datetime):
            found.append(part)
        elif isinstance(part, Sequence) and not isinstance(part, str):
            found.extend(_versioned(part))
    return found


def last_modified_of(*parts: Any) -> datetime | None:
    """Latest `updated_at` among the versioned inputs, or None if there are none."""
    timestamps = [p.updated_at for p in _versioned(parts)]
    return max(timestamps) if timestamps else None
