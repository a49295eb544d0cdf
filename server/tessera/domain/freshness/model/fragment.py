"""Fragment cache keys and the client-side personalization overlay."""

import hashlib
import json
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from tessera.domain.auth.model.current import Current
from tessera.domain.freshness.model.fingerprint import cache_key_for
from tessera.domain.shared.error import ValidationError

CREATOR_ATTRIBUTE = "data-creator-id"
VIEWER_META_NAME = "current-viewer-id"


class Personalization(str, Enum):
    """How a viewer-dependent signal reaches the rendered fragment.

    KEY: the signal is part of the fragment's cache key. Each distinct value
    gets its own cached copy.

    OVERLAY: the signal never enters the key. The shared fragment carries a
    neutral attribute (see `overlay_attributes`) and a client-side pass
    compares it with the viewer (see `viewer_meta`) after the fragment is served.
    """

    KEY = "key"
    OVERLAY = "overlay"


class FragmentKey(BaseModel):
    """A deterministic cache key for one rendered fragment."""

    model_config = ConfigDict(frozen=True)

    name: str
    digest: str

    @property
    def value(self) -> str:
        return f"views/{self.name}/{self.digest}"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def compose(
        cls,
        name: str,
        *parts: Any,
        preview: bool = False,
        viewer: Any | None = None,
    ) -> "FragmentKey":
        """Build the key for fragment `name` over `parts`.

        Args:
            name: Template or fragment name (no slashes).
            parts: Domain objects and values the fragment depends on, in order.
            preview: Rendering-context discriminator; preview and live renders
                never share a key.
            viewer: Viewer identity for fragments declared
                `Personalization.KEY`. Omitted from the key when None.

        Raises:
            ValidationError: If `name` is empty or contains a slash.
        """
        if not name or "/" in name:
            raise ValidationError(f"Invalid fragment name: {name!r}", field="name")

        keys: list[Any] = [cache_key_for(p) for p in parts]
        keys.append({"preview": preview})
        if viewer is not None:
            keys.append({"viewer": str(viewer)})

        encoded = json.dumps(keys, separators=(",", ":"), ensure_ascii=True)
        return cls(name=name, digest=hashlib.sha256(encoded.encode()).hexdigest())

    @classmethod
    def personalized(
        cls,
        name: str,
        *parts: Any,
        personalization: Personalization,
        current: Current,
        preview: bool = False,
    ) -> "FragmentKey":
        """Compose a key, adding the viewer only for `Personalization.KEY` fragments."""
        viewer = None
        if personalization is Personalization.KEY and current.user is not None:
            viewer = current.user.id
        return cls.compose(name, *parts, preview=preview, viewer=viewer)


def overlay_attributes(creator_id: Any) -> dict[str, str]:
    """Non-key attributes embedded in a shared fragment for the client overlay."""
    return {CREATOR_ATTRIBUTE: str(creator_id)}


def viewer_meta(current: Current) -> dict[str, str | None]:
    """What the client overlay compares against `overlay_attributes`.

    Rendered outside any cached fragment, once per response.
    """
    return {VIEWER_META_NAME: str(current.user.id) if current.user else None}
