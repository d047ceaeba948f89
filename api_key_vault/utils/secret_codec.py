"""
Reversible encryption for stored API keys.

Secrets are encrypted with Fernet (AES-128-CBC + HMAC-SHA256, random IV), so
encoding the same plaintext twice yields different tokens and any tampering
is detected on decode. The codec is pure: no I/O, no logging of plaintext,
tokens or keys.
"""

from typing import Optional, Union

from cryptography.fernet import Fernet, InvalidToken

from ..config import get_config
from ..exceptions import CodecError

KeyMaterial = Union[str, bytes]


def generate_secret_key() -> str:
    """Return a new url-safe base64 Fernet key suitable for ENCRYPTION_KEY."""
    return Fernet.generate_key().decode()


def _build_fernet(key: Optional[KeyMaterial]) -> Fernet:
    if not key:
        raise CodecError("Encryption key is not configured", reason="missing_key")
    try:
        return Fernet(key.encode() if isinstance(key, str) else key)
    except (ValueError, TypeError) as e:
        raise CodecError(
            "Encryption key is malformed", reason="malformed_key", error_type=type(e).__name__
        ) from None


class SecretCodec:
    """Encodes plaintext secrets to opaque tokens and back with a single bound key."""

    def __init__(self, key: Optional[KeyMaterial]):
        self._fernet = _build_fernet(key)

    @classmethod
    def from_config(cls, config=None) -> "SecretCodec":
        """Build a codec from SecurityConfig.encryption_key (ENCRYPTION_KEY)."""
        app_config = config or get_config()
        return cls(app_config.security.encryption_key)

    def encode(self, plaintext: str) -> str:
        """
        Encrypt a plaintext secret.

        Args:
            plaintext: Secret to protect

        Returns:
            Opaque url-safe token, different on every call
        """
        if not isinstance(plaintext, str):
            raise CodecError("Only text secrets can be encoded", reason="invalid_input")
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("ascii")

    def decode(self, opaque: str) -> str:
        """
        Decrypt a token produced by encode() with the same key.

        Raises:
            CodecError: If the token is corrupted, foreign, or not a token at all
        """
        if not opaque or not isinstance(opaque, (str, bytes)):
            raise CodecError(reason="empty_token")
        token = opaque.encode("ascii", errors="replace") if isinstance(opaque, str) else opaque
        try:
            return self._fernet.decrypt(token).decode("utf-8")
        except InvalidToken:
            raise CodecError(reason="invalid_token") from None
        except UnicodeDecodeError:
            raise CodecError(reason="invalid_plaintext_encoding") from None

    def __repr__(self) -> str:
        return "SecretCodec(key=***)"


def encode_secret(plaintext: str, key: Optional[KeyMaterial]) -> str:
    """Encrypt ``plaintext`` with ``key``."""
    return SecretCodec(key).encode(plaintext)


def decode_secret(opaque: str, key: Optional[KeyMaterial]) -> str:
    """Decrypt ``opaque`` with ``key``; raises CodecError on any mismatch."""
    return SecretCodec(key).decode(opaque)
