"""Conditional GET evaluation (ETag / If-None-Match, Last-Modified / If-Modified-Since)."""

from dataclasses import dataclass
from datetime import UTC, datetime
from email.utils import format_datetime, parsedate_to_datetime
from typing import Any

from tessera.domain.freshness.model.fingerprint import Fingerprint, last_modified_of


@dataclass(frozen=True)
class Render:
    """Render the full response, attaching these validators (if any)."""

    etag: str | None
    last_modified: datetime | None

    @property
    def headers(self) -> dict[str, str]:
        return _validator_headers(self.etag, self.last_modified)


@dataclass(frozen=True)
class NotModified:
    """Answer 304 with no body."""

    etag: str
    last_modified: datetime | None

    @property
    def headers(self) -> dict[str, str]:
        return _validator_headers(self.etag, self.last_modified)


Decision = Render | NotModified


def _validator_headers(etag: str | None, last_modified: datetime | None) -> dict[str, str]:
    headers: dict[str, str] = {}
    if etag is not None:
        headers["ETag"] = etag
    if last_modified is not None:
        headers["Last-Modified"] = format_datetime(
            last_modified.astimezone(UTC).replace(microsecond=0), usegmt=True
        )
    return headers


def weak_etag(fingerprint: Fingerprint) -> str:
    return f'W/"{fingerprint}"'


def _opaque(tag: str) -> str:
    """Strip the weak indicator for weak comparison."""
    tag = tag.strip()
    return tag[2:] if tag.startswith("W/") else tag


def etag_matches(if_none_match: str, etag: str) -> bool:
    """Weak comparison of an If-None-Match list against one entity tag."""
    candidates = [c.strip() for c in if_none_match.split(",") if c.strip()]
    if "*" in candidates:
        return True
    target = _opaque(etag)
    return any(_opaque(c) == target for c in candidates)


def _parse_http_date(value: str) -> datetime | None:
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    return parsed if parsed.tzinfo is not None else None


class ConditionalGet:
    """Decides between 304 Not Modified and a full render.

    Pure: the decision depends only on the request validators and the
    current state of the objects the response is built from.
    """

    @staticmethod
    def evaluate(
        if_none_match: str | None,
        if_modified_since: str | None,
        *objects: Any,
        embeds_form_token: bool = False,
    ) -> Decision:
        """Compare the client's validators with the fingerprint of `objects`.

        Args:
            if_none_match: Raw If-None-Match header, if sent.
            if_modified_since: Raw If-Modified-Since header, if sent. Ignored
                when If-None-Match is present.
            objects: Domain objects (and values) whose combined state the
                response reflects.
            embeds_form_token: True for responses carrying a per-request
                anti-forgery token. These always render and get no validators,
                so a cached copy can never carry a stale token.
        """
        if embeds_form_token:
            return Render(etag=None, last_modified=None)

        etag = weak_etag(Fingerprint.of(*objects))
        last_modified = last_modified_of(*objects)

        if if_none_match is not None:
            if etag_matches(if_none_match, etag):
                return NotModified(etag=etag, last_modified=last_modified)
            return Render(etag=etag, last_modified=last_modified)

        if if_modified_since is not None and last_modified is not None:
            since = _parse_http_date(if_modified_since)
            if since is not None and last_modified.replace(microsecond=0) <= since:
                return NotModified(etag=etag, last_modified=last_modified)

        return Render(etag=etag, last_modified=last_modified)
