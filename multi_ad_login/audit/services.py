"""Audit logging service."""
import logging

from django.conf import settings
from django.db import DatabaseError

from audit.models import AuditEntry

logger = logging.getLogger(__name__)


class AuditLogger:
    """Convenience class for creating audit log entries."""

    @staticmethod
    def log(user, action, category, detail=None, ip_address=None, success=True, username=''):
        """Create an audit log entry.

        Args:
            user: Django User instance or None for anonymous and system actions.
            action: Action identifier (e.g. 'auth.login', 'profile.add').
            category: Audit category constant.
            detail: Dict of arbitrary metadata. Never put credentials here.
            ip_address: Client IP address.
            success: Whether the action succeeded.
            username: Name to record when ``user`` is None or differs from
                the submitted login.

        Returns:
            The created AuditEntry, or None when auditing is disabled or fails.
        """
        if not settings.AD_LOGIN_AUDIT_ENABLED:
            return None

        if detail is None:
            detail = {}

        if not username and user is not None and hasattr(user, 'get_username'):
            username = user.get_username()

        try:
            return AuditEntry.objects.create(
                user=user if user is not None and user.pk else None,
                username=username[:254],
                action=action,
                category=category,
                detail=detail,
                ip_address=ip_address,
                success=success,
            )
        except DatabaseError:
            logger.exception("Failed to create audit log entry")
            return None

    @staticmethod
    def log_from_request(request, action, category, detail=None, success=True, user=None,
                         username=''):
        """Create an audit log entry from a Django request (which may be None).

        The client_ip attribute is set by core.middleware.AuditMiddleware.
        """
        ip_address = None
        if request is not None:
            ip_address = getattr(request, 'client_ip', request.META.get('REMOTE_ADDR'))

        return AuditLogger.log(
            user=user,
            action=action,
            category=category,
            detail=detail,
            ip_address=ip_address,
            success=success,
            username=username,
        )
