"""Celery tasks for the follow-up pipeline."""
import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task
def mark_expired_followups():
    """Mark scheduled follow-ups whose date has passed as NOT_COMPLETED."""
    from .services_automation import FollowUpAutomationService

    count = FollowUpAutomationService.expire_scheduled_followups()
    logger.info(f"Marked {count} expired follow-ups as NOT_COMPLETED")
    return count


@shared_task
def mark_never_contacted_converts():
    """Converts with no follow-up after the grace period become NEVER_CONTACTED."""
    from .services_automation import FollowUpAutomationService

    return FollowUpAutomationService.mark_never_contacted()


@shared_task
def progress_new_member_stages():
    """Advance new members whose follow-up stage has stalled."""
    from .services_automation import FollowUpAutomationService

    count = FollowUpAutomationService.progress_new_member_stages()
    logger.info(f"Advanced {count} new member follow-up stages")
    return count


@shared_task
def send_followup_reminders():
    """Day-before reminders for tomorrow's follow-ups."""
    from .services_automation import FollowUpAutomationService

    count = FollowUpAutomationService.send_day_before_reminders()
    logger.info(f"Sent {count} day-before follow-up reminders")
    return count
