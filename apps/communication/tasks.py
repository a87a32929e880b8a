"""Celery tasks for communication app."""
import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task
def send_scheduled_announcements():
    """Send announcements whose scheduled time has passed."""
    from .services_announcements import AnnouncementService

    count = AnnouncementService.send_due()
    if count:
        logger.info(f"Processed {count} scheduled announcements")
    return count


@shared_task
def track_sms_delivery(sms_id):
    """Refresh the delivery status of one sent message from Twilio."""
    from .models import SMSMessage
    from .services_sms import TwilioSMSService

    sms = SMSMessage.objects.filter(pk=sms_id).first()
    if sms is None:
        logger.warning(f"SMS {sms_id} not found for delivery tracking")
        return None
    TwilioSMSService().track_delivery(sms)
    return sms.status
