"""Celery tasks for the member portal."""
import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task
def expire_claim_tokens():
    """Remove claim links that were used or have expired."""
    from .services import MemberAccountService

    count = MemberAccountService.expire_claim_tokens()
    logger.info(f"Removed {count} stale claim tokens")
    return count
