"""
Tests for the secret codec.

Covers the round trip, randomized output, tamper detection, and key
handling failures.
"""

import pytest

from api_key_vault.config import AppConfig, SecurityConfig
from api_key_vault.exceptions import CodecError, ErrorCode
from api_key_vault.utils.secret_codec import (
    SecretCodec,
    decode_secret,
    encode_secret,
    generate_secret_key,
)


class TestSecretCodecRoundTrip:
    """Encode/decode behaviour with a valid key."""

    @pytest.mark.parametrize(
        "plaintext",
        [
            "sk_live_51Habcdefghijkl",
            "x" * 8,
            "pässwörd-with-ünïcode-✓",
            "a" * 4096,
        ],
    )
    def test_round_trip(self, codec, plaintext):
        """Decoding an encoded secret returns the original plaintext."""
        assert codec.decode(codec.encode(plaintext)) == plaintext

    def test_encoding_is_randomized(self, codec):
        """Two encodings of the same input differ but both decode."""
        first = codec.encode("sk_test_repeatable")
        second = codec.encode("sk_test_repeatable")

        assert first != second
        assert codec.decode(first) == "sk_test_repeatable"
        assert codec.decode(second) == "sk_test_repeatable"

    def test_output_is_opaque_text(self, codec):
        """Tokens are ascii strings that do not contain the plaintext."""
        token = codec.encode("sk_live_visible_secret")

        assert isinstance(token, str)
        assert token.isascii()
        assert "sk_live_visible_secret" not in token

    def test_module_functions_match_codec(self, encryption_key):
        """encode_secret/decode_secret are the key-explicit form of the codec."""
        token = encode_secret("sk_module_level", encryption_key)

        assert decode_secret(token, encryption_key) == "sk_module_level"
        assert SecretCodec(encryption_key).decode(token) == "sk_module_level"


class TestSecretCodecTamperDetection:
    """Decode never returns wrong plaintext."""

    def test_flipped_character_is_rejected(self, codec):
        token = codec.encode("sk_live_tamper_me")
        index = len(token) // 2
        replacement = "A" if token[index] != "A" else "B"
        tampered = token[:index] + replacement + token[index + 1 :]

        with pytest.raises(CodecError) as exc_info:
            codec.decode(tampered)

        assert exc_info.value.error_code == ErrorCode.CRYPTO_ERROR
        assert exc_info.value.status_code == 500

    def test_truncated_token_is_rejected(self, codec):
        token = codec.encode("sk_live_truncate")

        with pytest.raises(CodecError):
            codec.decode(token[:-10])

    def test_foreign_key_is_rejected(self, codec):
        """A token made under a different key does not decode."""
        other = SecretCodec(generate_secret_key())
        token = other.encode("sk_live_other_key")

        with pytest.raises(CodecError):
            codec.decode(token)

    @pytest.mark.parametrize("garbage", ["", "not-a-token", "plain sk_live_value", "ÿÿÿ"])
    def test_non_token_input_is_rejected(self, codec, garbage):
        with pytest.raises(CodecError):
            codec.decode(garbage)

    def test_error_does_not_carry_token(self, codec):
        """The error context never includes the offending input."""
        with pytest.raises(CodecError) as exc_info:
            codec.decode("gAAAAABsecret-looking-token")

        assert "gAAAAABsecret-looking-token" not in str(exc_info.value.to_dict())


class TestSecretCodecKeys:
    """Key loading and validation."""

    def test_generated_keys_are_unique(self):
        assert generate_secret_key() != generate_secret_key()

    def test_bytes_key_accepted(self, encryption_key):
        codec = SecretCodec(encryption_key.encode())
        assert codec.decode(codec.encode("sk_bytes_key")) == "sk_bytes_key"

    @pytest.mark.parametrize("key", [None, ""])
    def test_missing_key_fails_fast(self, key):
        with pytest.raises(CodecError) as exc_info:
            SecretCodec(key)

        assert exc_info.value.context["reason"] == "missing_key"

    @pytest.mark.parametrize("key", ["too-short", "x" * 44, "!!!not base64!!!"])
    def test_malformed_key_fails_fast(self, key):
        with pytest.raises(CodecError) as exc_info:
            SecretCodec(key)

        assert exc_info.value.context["reason"] == "malformed_key"

    def test_from_config_uses_security_key(self, encryption_key):
        codec = SecretCodec.from_config()
        assert SecretCodec(encryption_key).decode(codec.encode("sk_from_config")) == "sk_from_config"

    def test_from_config_without_key_fails(self):
        config = AppConfig(security=SecurityConfig(encryption_key=None))

        with pytest.raises(CodecError):
            SecretCodec.from_config(config)

    def test_non_text_plaintext_rejected(self, codec):
        with pytest.raises(CodecError):
            codec.encode(b"bytes-are-not-text")

    def test_repr_masks_key(self, encryption_key):
        assert encryption_key not in repr(SecretCodec(encryption_key))
