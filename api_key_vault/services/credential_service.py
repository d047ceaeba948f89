"""
Service guarding the lifecycle of stored API keys.

This service provides the create/update/reveal/delete operations while ensuring
that secrets are encrypted before they reach storage, that only the owner can
touch a key, and that every reveal attempt on a located key leaves exactly one
audit entry.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..config import get_config
from ..constants import AuditOperation, Limits
from ..context.operation_context import operation
from ..db.db_api_key_models import ApiKey
from ..enums import KeyEnvironment
from ..exceptions import (
    CredentialInactiveError,
    CredentialNotFoundError,
    ErrorCode,
    ValidationError,
    validation_failed,
)
from ..repositories.api_key_repository import ApiKeyRepository
from ..schemas.api_key_schemas import ApiKeyDeleted, ApiKeyPatch, ApiKeyRead, AuditEntryRead
from ..utils.logger import get_logger
from ..utils.secret_codec import SecretCodec
from .audit_service import AuditService


_MAX_LENGTHS = {
    "name": Limits.MAX_NAME_LENGTH,
    "service": Limits.MAX_SERVICE_LENGTH,
    "environment": Limits.MAX_ENVIRONMENT_LENGTH,
    "tags": Limits.MAX_TAG_NAME_LENGTH,
}


def _check_length(field: str, value: str) -> str:
    max_length = _MAX_LENGTHS[field]
    if len(value) > max_length:
        raise validation_failed(field, f"must be at most {max_length} characters")
    return value


def _required_text(field: str, value: Optional[str]) -> str:
    """Trim a required text field, rejecting None and blank values."""
    cleaned = value.strip() if isinstance(value, str) else ""
    if not cleaned:
        raise ValidationError(
            f"{field} is required", field=field, error_code=ErrorCode.MISSING_REQUIRED
        )
    return _check_length(field, cleaned)


def _tag_names(tags: Optional[List[str]]) -> List[str]:
    if any(not isinstance(tag, str) for tag in tags or []):
        raise validation_failed("tags", "must be a list of strings")
    names = [tag.strip() for tag in tags or [] if tag.strip()]
    for name in names:
        _check_length("tags", name)
    return names


def _optional_text(value: Optional[str]) -> Optional[str]:
    """Trim an optional text field; blank becomes None."""
    if value is None:
        return None
    return value.strip() or None


class CredentialService:
    """
    Service for managing stored API keys.

    This service provides:
    - Input validation before any storage or encryption work
    - Owner-scoped access (not found and not owned look the same)
    - Encryption on write, decryption only through reveal_credential
    - Reveal audit trail that never interrupts the reveal itself
    """

    def __init__(
        self,
        session: Session,
        codec: Optional[SecretCodec] = None,
        audit_service: Optional[AuditService] = None,
    ):
        """Initialize with SQLAlchemy session; codec defaults to the configured key."""
        self.session = session
        self.codec = codec or SecretCodec.from_config()
        self.audit_service = audit_service or AuditService(session)
        self.repository = ApiKeyRepository(session)
        self.logger = get_logger()

    def _validate_secret(self, key_value: Optional[str]) -> str:
        if key_value is not None and not isinstance(key_value, str):
            raise validation_failed("key_value", "must be a string")
        secret = (key_value or "").strip()
        if not secret:
            raise ValidationError(
                "key_value is required", field="key_value", error_code=ErrorCode.MISSING_REQUIRED
            )
        min_length = get_config().security.min_secret_length
        if len(secret) < min_length:
            raise validation_failed("key_value", f"must be at least {min_length} characters")
        return secret

    def _get_owned(self, owner_id: str, api_key_id: str, for_update: bool = False) -> ApiKey:
        api_key = self.repository.find_owned(api_key_id, owner_id, for_update=for_update)
        if api_key is None:
            raise CredentialNotFoundError(api_key_id=api_key_id, owner_id=owner_id)
        return api_key

    def _to_read(self, api_key: ApiKey) -> ApiKeyRead:
        read = ApiKeyRead.model_validate(api_key)
        return read.model_copy(update={"usage_count": self.repository.usage_count(api_key.id)})

    @operation()
    def create_credential(
        self,
        owner_id: str,
        name: str,
        service: str,
        key_value: str,
        description: Optional[str] = None,
        environment: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> ApiKeyRead:
        """
        Store a new API key for an owner.

        Args:
            owner_id: Authenticated caller's user ID
            name: Display name (required)
            service: Service label (required)
            key_value: Plaintext secret, at least min_secret_length characters
            description: Optional description
            environment: Environment label, defaults to production
            tags: Tag names to attach

        Returns:
            Masked read model of the new key

        Raises:
            ValidationError: If a required field is missing or the secret is too short
            CodecError: If the secret cannot be encrypted
        """
        clean_name = _required_text("name", name)
        clean_service = _required_text("service", service)
        secret = self._validate_secret(key_value)
        clean_environment = _check_length(
            "environment", _optional_text(environment) or KeyEnvironment.PRODUCTION.value
        )
        tag_names = _tag_names(tags)

        api_key = self.repository.create(
            owner_id,
            {
                "name": clean_name,
                "service": clean_service,
                "description": _optional_text(description),
                "environment": clean_environment,
                "key_value": self.codec.encode(secret),
                "is_active": True,
            },
            tag_names=tag_names,
        )

        self.logger.info(
            "API key created",
            extra={
                "api_key_id": api_key.id,
                "owner_id": owner_id,
                "service": clean_service,
                "environment": clean_environment,
            },
        )
        return self._to_read(api_key)

    @operation()
    def update_credential(
        self,
        owner_id: str,
        api_key_id: str,
        patch: ApiKeyPatch,
        new_key_value: Optional[str] = None,
    ) -> ApiKeyRead:
        """
        Apply a partial update to an owned key.

        Fields absent from ``patch`` keep their values. A ``new_key_value`` that
        is None or blank leaves the stored secret as it is.

        Raises:
            ValidationError: If a provided field is invalid
            CredentialNotFoundError: If the key is missing or not owned by the caller
        """
        provided = patch.provided()
        changes: Dict[str, Any] = {}

        for field in ("name", "service"):
            if field in provided:
                changes[field] = _required_text(field, provided[field])
        if "description" in provided:
            changes["description"] = _optional_text(provided["description"])
        if "environment" in provided:
            environment = _optional_text(provided["environment"])
            if environment is None:
                raise validation_failed("environment", "cannot be empty")
            changes["environment"] = _check_length("environment", environment)
        if "is_active" in provided:
            if provided["is_active"] is None:
                raise validation_failed("is_active", "cannot be null")
            changes["is_active"] = provided["is_active"]

        tag_names = None
        if "tags" in provided:
            tag_names = _tag_names(provided["tags"])

        if new_key_value is not None and not isinstance(new_key_value, str):
            raise validation_failed("key_value", "must be a string")
        secret = None
        if new_key_value and new_key_value.strip():
            secret = self._validate_secret(new_key_value)

        api_key = self._get_owned(owner_id, api_key_id, for_update=True)

        if secret is not None:
            changes["key_value"] = self.codec.encode(secret)

        self.repository.update(api_key, changes, tag_names=tag_names)

        self.logger.info(
            "API key updated",
            extra={
                "api_key_id": api_key_id,
                "owner_id": owner_id,
                "updated_fields": sorted(changes),
                "tags_replaced": tag_names is not None,
                "secret_rotated": secret is not None,
            },
        )
        return self._to_read(api_key)

    @operation()
    def reveal_credential(self, owner_id: str, api_key_id: str) -> str:
        """
        Decrypt and return the plaintext secret of an owned, active key.

        Every attempt on a located key records one audit entry, successful or
        not. The entry and the last-used stamp are committed by the audit
        service, so rolling back the caller's session does not remove them.
        Audit failures are logged and do not affect the result.

        Raises:
            CredentialNotFoundError: If the key is missing or not owned by the caller
            CredentialInactiveError: If the key has been deactivated
            CodecError: If the stored secret cannot be decrypted
        """
        api_key = self._get_owned(owner_id, api_key_id)

        success = False
        try:
            if not api_key.is_active:
                raise CredentialInactiveError(api_key_id=api_key_id, owner_id=owner_id)

            plaintext = self.codec.decode(api_key.key_value)
            self.audit_service.touch_last_used(api_key_id)
            success = True
        finally:
            self.audit_service.record_attempt(api_key_id, AuditOperation.DECRYPT.value, success)

        self.logger.info(
            "API key revealed",
            extra={"api_key_id": api_key_id, "owner_id": owner_id, "service": api_key.service},
        )
        return plaintext

    @operation()
    def delete_credential(self, owner_id: str, api_key_id: str) -> ApiKeyDeleted:
        """
        Delete an owned key together with its audit entries.

        Raises:
            CredentialNotFoundError: If the key is missing or not owned by the caller
        """
        api_key = self._get_owned(owner_id, api_key_id)
        summary = ApiKeyDeleted.model_validate(api_key)

        self.repository.delete(api_key)

        self.logger.info(
            "API key deleted",
            extra={"api_key_id": api_key_id, "owner_id": owner_id, "service": summary.service},
        )
        return summary

    @operation()
    def list_credentials(self, owner_id: str) -> List[ApiKeyRead]:
        """All keys owned by the caller, newest first, secrets masked."""
        return [self._to_read(api_key) for api_key in self.repository.list_owned(owner_id)]

    @operation()
    def get_credential(self, owner_id: str, api_key_id: str) -> ApiKeyRead:
        """One owned key with its secret masked."""
        return self._to_read(self._get_owned(owner_id, api_key_id))

    @operation()
    def get_audit_trail(self, owner_id: str, api_key_id: str) -> List[AuditEntryRead]:
        """Reveal attempts recorded for an owned key, newest first."""
        self._get_owned(owner_id, api_key_id)
        return self.audit_service.list_entries(api_key_id)
