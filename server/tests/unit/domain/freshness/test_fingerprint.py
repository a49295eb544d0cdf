"""Tests for fingerprints and cache keys."""

from datetime import UTC, datetime, timedelta

import pytest

from tessera.domain.auth.model.account import Account
from tessera.domain.auth.model.identity import Identity
from tessera.domain.auth.model.session import Session
from tessera.domain.auth.model.user import User
from tessera.domain.auth.model.value import ClientInfo, Email
from tessera.domain.freshness.model.fingerprint import (
    Fingerprint,
    cache_key_for,
    last_modified_of,
)
from tessera.domain.freshness.model.fragment import Personalization
from tessera.domain.shared.error import ValidationError


@pytest.fixture
def account() -> Account:
    return Account.create("Acme", external_id=1234567)


class TestCacheKey:
    def test_versioned_objects_key_on_type_id_and_timestamp(self, account: Account):
        key = cache_key_for(account)

        assert key.startswith(f"account/{account.id}-")
        assert key.endswith(account.updated_at.strftime("%Y%m%d%H%M%S%f"))

    def test_explicit_cache_key_wins(self):
        session = Session.create(Identity.create(Email("ada@example.com")), ClientInfo())

        assert cache_key_for(session) == f"session/{session.id}"

    def test_scalars_and_sequences(self):
        assert cache_key_for([1, "a", None, True]) == [1, "a", None, True]
        assert cache_key_for(Personalization.OVERLAY) == "personalization:overlay"

    def test_unkeyable_input_is_rejected(self):
        with pytest.raises(ValidationError):
            cache_key_for(object())


class TestFingerprint:
    def test_deterministic(self, account: Account):
        assert Fingerprint.of(account, "x") == Fingerprint.of(account, "x")

    def test_is_hex_sha256(self, account: Account):
        digest = str(Fingerprint.of(account))

        assert len(digest) == 64
        int(digest, 16)

    def test_changes_when_updated_at_changes(self, account: Account):
        before = Fingerprint.of(account)

        account.touch(account.updated_at + timedelta(microseconds=1))

        assert Fingerprint.of(account) != before

    def test_order_matters(self, account: Account):
        user = User.create(account.id, Identity.create(Email("ada@example.com")).id, "Ada")

        assert Fingerprint.of(account, user) != Fingerprint.of(user, account)

    def test_absent_part_differs_from_missing_part(self, account: Account):
        assert Fingerprint.of(account, None) != Fingerprint.of(account)


class TestLastModified:
    def test_latest_updated_at(self, account: Account):
        user = User.create(account.id, Identity.create(Email("ada@example.com")).id, "Ada")
        user.touch(account.updated_at + timedelta(minutes=5))

        assert last_modified_of(account, [user], "ignored") == user.updated_at

    def test_none_without_versioned_inputs(self):
        assert last_modified_of("a", 1, datetime.now(UTC)) is None
