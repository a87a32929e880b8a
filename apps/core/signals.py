"""Signals for staff login auditing."""
import logging

from django.contrib.auth.signals import user_logged_in, user_login_failed
from django.dispatch import receiver

from .services_audit import AuditService

logger = logging.getLogger(__name__)


@receiver(user_logged_in)
def log_successful_login(sender, request, user, **kwargs):
    """Record successful login (staff API and Django admin)."""
    if request is None:
        return
    AuditService.log_login(request, getattr(user, 'email', ''), user=user)


@receiver(user_login_failed)
def log_failed_login(sender, credentials, request=None, **kwargs):
    """Record failed login attempt made through django.contrib.auth.authenticate."""
    if request is None:
        return
    email = credentials.get('email', credentials.get('username', ''))
    logger.info('Failed staff login for %s', email)
    AuditService.log_login(request, email, success=False, failure_reason='invalid_credentials')
