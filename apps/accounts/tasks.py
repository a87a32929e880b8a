"""Celery tasks for staff accounts."""
import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task
def expire_password_reset_tokens():
    """Remove password reset tokens that were used or have expired."""
    from .services import StaffAccountService

    count = StaffAccountService.expire_reset_tokens()
    logger.info(f"Removed {count} stale password reset tokens")
    return count
