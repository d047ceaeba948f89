from .audit_service import AuditService
from .credential_service import CredentialService
from .user_service import UserService

__all__ = ["AuditService", "CredentialService", "UserService"]
