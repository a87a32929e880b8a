"""Celery tasks for core app: audit retention."""
import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task
def cleanup_old_audit_logs(days: int = None):
    """Periodic task: clean up audit and login logs older than N days."""
    from datetime import timedelta
    from django.conf import settings
    from django.utils import timezone
    from apps.core.audit import AuditLog, LoginAudit

    days = days or getattr(settings, 'AUDIT_LOG_RETENTION_DAYS', 365)
    cutoff = timezone.now() - timedelta(days=days)
    count, _ = AuditLog.all_objects.filter(created_at__lt=cutoff).delete()
    login_count, _ = LoginAudit.all_objects.filter(created_at__lt=cutoff).delete()
    logger.info(f'Cleaned up {count} audit log and {login_count} login entries older than {days} days')
    return count + login_count
