"""Audit logging service for tracking staff changes."""
import logging

from django.forms.models import model_to_dict

from apps.core.constants import AuditAction

logger = logging.getLogger(__name__)


class AuditService:
    """
    Service for creating audit log entries.

    Usage:
        AuditService.log_create(request, instance)
        AuditService.log_update(request, instance, old_data)
        AuditService.log_delete(request, instance)
    """

    @classmethod
    def log(cls, user, action, instance, changes=None, request=None):
        """Create an audit log entry."""
        from apps.core.audit import AuditLog

        ip_address = None
        user_agent = ''

        if request:
            ip_address = cls._get_client_ip(request)
            user_agent = request.META.get('HTTP_USER_AGENT', '')[:500]

        if user is not None and not getattr(user, 'is_authenticated', False):
            user = None

        return AuditLog.objects.create(
            user=user,
            church=cls._get_church(instance),
            action=action,
            entity_type=instance.__class__.__name__,
            entity_id=str(instance.pk) if instance.pk else '',
            object_repr=str(instance)[:500],
            changes=changes or {},
            ip_address=ip_address,
            user_agent=user_agent,
        )

    @classmethod
    def log_create(cls, request, instance):
        """Log a create action."""
        cls.log(cls._get_user(request), AuditAction.CREATE, instance, request=request)

    @classmethod
    def log_update(cls, request, instance, old_data=None):
        """Log an update action with changes diff."""
        changes = {}

        if old_data:
            new_data = cls.snapshot(instance)
            for key in old_data:
                if key in new_data and old_data[key] != new_data[key]:
                    changes[key] = {
                        'old': old_data[key],
                        'new': new_data[key],
                    }

        cls.log(cls._get_user(request), AuditAction.UPDATE, instance, changes=changes, request=request)

    @classmethod
    def log_delete(cls, request, instance):
        """Log a delete action."""
        cls.log(cls._get_user(request), AuditAction.DELETE, instance, request=request)

    @classmethod
    def log_export(cls, request, entity_type, count, church=None):
        """Log a data export action."""
        from apps.core.audit import AuditLog

        AuditLog.objects.create(
            user=cls._get_user(request),
            church=church,
            action=AuditAction.EXPORT,
            entity_type=entity_type,
            object_repr=f'Export of {count} records',
            ip_address=cls._get_client_ip(request) if request else None,
            user_agent=request.META.get('HTTP_USER_AGENT', '')[:500] if request else '',
        )

    @classmethod
    def log_login(cls, request, email, user=None, success=True, failure_reason=''):
        """Record a staff login attempt."""
        from apps.core.audit import LoginAudit

        LoginAudit.objects.create(
            user=user,
            email_attempted=email or '',
            ip_address=cls._get_client_ip(request),
            user_agent=request.META.get('HTTP_USER_AGENT', '')[:500],
            success=success,
            failure_reason=failure_reason,
        )

    @classmethod
    def snapshot(cls, instance):
        """Safely serialize model instance to a dict of strings."""
        try:
            data = model_to_dict(instance)
        except (AttributeError, TypeError, ValueError):
            logger.warning('Could not snapshot %s for audit', instance.__class__.__name__)
            return {}
        return {k: str(v) for k, v in data.items()}

    @classmethod
    def _get_user(cls, request):
        if request is None:
            return None
        return getattr(request, 'user', None)

    @classmethod
    def _get_church(cls, instance):
        from apps.ministries.models import Church

        if isinstance(instance, Church):
            return instance
        return getattr(instance, 'church', None)

    @classmethod
    def _get_client_ip(cls, request):
        """Extract client IP from request."""
        x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
        if x_forwarded_for:
            return x_forwarded_for.split(',')[0].strip()
        return request.META.get('REMOTE_ADDR', '0.0.0.0')
