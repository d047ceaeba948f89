"""
Test fixtures for API Key Vault unit tests.

This module provides shared test fixtures including database setup,
configuration with a throwaway encryption key, and common test utilities.
"""

import pytest
from sqlalchemy.orm import Session

from api_key_vault.config import AppConfig, SecurityConfig, reset_config, set_config
from api_key_vault.db import (
    DatabaseConfig,
    DatabaseManager,
    import_all_models,
)
from api_key_vault.db.db_config import Base, initialize_db
from api_key_vault.exceptions import clear_correlation_id
from api_key_vault.utils.logger import reset_logging
from api_key_vault.utils.password_utils import reset_password_hasher
from api_key_vault.utils.secret_codec import SecretCodec, generate_secret_key


@pytest.fixture(scope="session")
def db_config(tmp_path_factory) -> DatabaseConfig:
    """
    Create SQLite database configuration for testing.

    File-backed, so the audit service's own sessions share the tables and
    see rows a test has committed.
    """
    return DatabaseConfig(
        db_type="sqlite",
        database=str(tmp_path_factory.mktemp("db") / "vault.db"),
        echo=False,
        development_mode=True,
    )


@pytest.fixture(scope="session")
def db_manager(db_config: DatabaseConfig) -> DatabaseManager:
    """Create and initialize database manager with all models."""
    import_all_models()

    manager = initialize_db(db_config)

    return manager


@pytest.fixture(scope="function")
def db_session(db_manager: DatabaseManager) -> Session:
    """
    Create a database session for each test.

    Tables are created fresh for every test and dropped afterwards so
    tests never see each other's rows.
    """
    Base.metadata.create_all(db_manager.engine)

    session = db_manager.get_session()

    yield session

    session.rollback()
    db_manager.close_session()

    Base.metadata.drop_all(db_manager.engine)


@pytest.fixture(scope="session")
def encryption_key() -> str:
    """Fernet key used by the test configuration."""
    return generate_secret_key()


@pytest.fixture(autouse=True)
def app_config(encryption_key):
    """
    Install a test configuration for every test.

    Argon2 costs are lowered so password tests stay fast.
    """
    config = AppConfig(
        security=SecurityConfig(
            encryption_key=encryption_key,
            password_time_cost=1,
            password_memory_cost=8,
            password_parallelism=1,
        )
    )
    set_config(config)
    reset_password_hasher()

    yield config

    reset_config()
    reset_password_hasher()
    reset_logging()
    clear_correlation_id()


@pytest.fixture
def codec(encryption_key) -> SecretCodec:
    """Codec bound to the test encryption key."""
    return SecretCodec(encryption_key)
