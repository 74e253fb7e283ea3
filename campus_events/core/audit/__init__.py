from campus_events.core.audit.models import AuditLog
from campus_events.core.audit.service import AuditAction, AuditService, create_audit_log

__all__ = ["AuditLog", "AuditAction", "AuditService", "create_audit_log"]
