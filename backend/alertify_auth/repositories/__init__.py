from .audit_log import AuditLogRepository
from .revocation import RevocationRepository
from .user import UserRepository

__all__ = ["AuditLogRepository", "RevocationRepository", "UserRepository"]
