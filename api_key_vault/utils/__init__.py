# Logging utilities
from .logger import (
    AzureQueueHandler,
    ContextAwareLogger,
    CorrelationIdFilter,
    configure_logging,
    get_logger,
)

# Password hashing
from .password_utils import hash_password, password_needs_rehash, verify_password

# Secret encryption
from .secret_codec import SecretCodec, decode_secret, encode_secret, generate_secret_key

__all__ = [
    # Logging utilities
    "ContextAwareLogger",
    "AzureQueueHandler",
    "CorrelationIdFilter",
    "configure_logging",
    "get_logger",
    # Password hashing
    "hash_password",
    "verify_password",
    "password_needs_rehash",
    # Secret encryption
    "SecretCodec",
    "encode_secret",
    "decode_secret",
    "generate_secret_key",
]
