from alertify_auth.models.audit_log import AuditLogEntry
from alertify_auth.models.base import Base
from alertify_auth.models.revocation import JwtBlacklistEntry
from alertify_auth.models.user import Role, User, user_roles

__all__ = [
    "AuditLogEntry",
    "Base",
    "JwtBlacklistEntry",
    "Role",
    "User",
    "user_roles",
]
