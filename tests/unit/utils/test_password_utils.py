"""
Tests for login password hashing.
"""

import pytest

from api_key_vault.config import AppConfig, SecurityConfig, set_config
from api_key_vault.utils.password_utils import (
    build_password_hasher,
    get_password_hasher,
    hash_password,
    password_needs_rehash,
    placeholder_password_hash,
    reset_password_hasher,
    verify_password,
)


class TestHashPassword:
    """Test hash_password."""

    def test_hash_is_argon2id(self):
        digest = hash_password("correct horse")

        assert digest.startswith("$argon2id$")
        assert "correct horse" not in digest

    def test_hash_is_salted(self):
        """The same password hashes differently each time."""
        assert hash_password("correct horse") != hash_password("correct horse")

    def test_hash_uses_configured_costs(self):
        digest = hash_password("correct horse")
        assert "m=8,t=1,p=1" in digest


class TestVerifyPassword:
    """Test verify_password."""

    def test_correct_password_verifies(self):
        digest = hash_password("correct horse")
        assert verify_password("correct horse", digest) is True

    def test_wrong_password_fails(self):
        digest = hash_password("correct horse")
        assert verify_password("battery staple", digest) is False

    @pytest.mark.parametrize("digest", ["", "not-a-hash", "$2b$12$bcryptlookingvalue"])
    def test_malformed_hash_returns_false(self, digest):
        assert verify_password("correct horse", digest) is False


class TestRehash:
    """Test password_needs_rehash and hasher caching."""

    def test_current_hash_does_not_need_rehash(self):
        assert password_needs_rehash(hash_password("correct horse")) is False

    def test_hash_with_old_costs_needs_rehash(self):
        old_digest = hash_password("correct horse")

        set_config(
            AppConfig(
                security=SecurityConfig(
                    password_time_cost=2, password_memory_cost=16, password_parallelism=1
                )
            )
        )
        reset_password_hasher()

        assert password_needs_rehash(old_digest) is True
        assert verify_password("correct horse", old_digest) is True

    def test_malformed_hash_needs_rehash(self):
        assert password_needs_rehash("not-a-hash") is True

    def test_hasher_is_cached_until_reset(self):
        first = get_password_hasher()
        assert get_password_hasher() is first

        reset_password_hasher()
        assert get_password_hasher() is not first

    def test_build_password_hasher_reads_security_config(self):
        hasher = build_password_hasher(
            SecurityConfig(password_time_cost=4, password_memory_cost=32, password_parallelism=2)
        )

        assert hasher.time_cost == 4
        assert hasher.memory_cost == 32
        assert hasher.parallelism == 2


class TestPlaceholderHash:
    """Test placeholder_password_hash."""

    def test_is_current_argon2id_hash(self):
        digest = placeholder_password_hash()

        assert "m=8,t=1,p=1" in digest
        assert password_needs_rehash(digest) is False

    def test_never_verifies_common_inputs(self):
        digest = placeholder_password_hash()

        for candidate in ("", "password", "hunter22"):
            assert verify_password(candidate, digest) is False

    def test_cached_until_reset(self):
        first = placeholder_password_hash()
        assert placeholder_password_hash() == first

        reset_password_hasher()
        assert placeholder_password_hash() != first
