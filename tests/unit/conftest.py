"""
Unit test conftest.py - Component-specific fixtures.

This module provides fixtures specific to unit testing:
- Users that own keys (inserted and committed, foreign keys are enforced)
- Service fixtures bound to the test session
"""

import pytest

from api_key_vault.db.db_user_models import User
from api_key_vault.services.audit_service import AuditService
from api_key_vault.services.credential_service import CredentialService
from api_key_vault.services.user_service import UserService


def _make_user(session, email: str) -> User:
    user = User(email=email, name=email.split("@")[0], password_hash="not-a-real-hash")
    session.add(user)
    session.commit()
    return user


# ==================== USER FIXTURES ====================


@pytest.fixture(scope="function")
def owner(db_session) -> User:
    """User who owns the keys under test."""
    return _make_user(db_session, "owner@example.com")


@pytest.fixture(scope="function")
def other_user(db_session) -> User:
    """A second user who must never see the owner's keys."""
    return _make_user(db_session, "intruder@example.com")


# ==================== SERVICE FIXTURES ====================


@pytest.fixture(scope="function")
def audit_service(db_session, db_manager):
    """Audit service reading through the test session, writing through its own."""
    return AuditService(db_session, session_factory=db_manager.new_session)


@pytest.fixture(scope="function")
def credential_service(db_session, codec, audit_service):
    """Credential service with test session and the test codec."""
    return CredentialService(db_session, codec=codec, audit_service=audit_service)


@pytest.fixture(scope="function")
def user_service(db_session):
    """User service with test session."""
    return UserService(db_session)


@pytest.fixture
def sample_key_data():
    """Standard create arguments for a stored key."""
    return {
        "name": "Stripe live",
        "service": "stripe",
        "key_value": "sk_live_51Habcdefghijkl",
        "description": "Billing integration",
        "environment": "production",
    }
