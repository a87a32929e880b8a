"""Scheduled announcements: recipient selection and delivery."""
import logging

from django.utils import timezone

from apps.core.constants import AnnouncementStatus, MessageKind, PersonCategory, SMSStatus
from apps.core.utils import format_phone_for_sms

logger = logging.getLogger(__name__)


class AnnouncementService:
    """Sends an announcement to the selected person categories of its church."""

    @staticmethod
    def recipients(announcement):
        """People in the selected groups as (first_name, email, phone) tuples."""
        from apps.followups.services import PERSON_MODELS

        people = []
        for group in announcement.recipient_groups:
            if group not in PersonCategory.VALUES:
                continue
            for first_name, email, phone in PERSON_MODELS[group].objects.filter(
                church=announcement.church,
            ).values_list('first_name', 'email', 'phone'):
                people.append((first_name, email or '', phone or ''))
        return people

    @staticmethod
    def unique_emails(people):
        seen = set()
        result = []
        for first_name, email, _ in people:
            key = email.strip().lower()
            if not key or key in seen:
                continue
            seen.add(key)
            result.append((first_name, email.strip()))
        return result

    @staticmethod
    def unique_phones(people):
        seen = set()
        result = []
        for first_name, _, phone in people:
            formatted = format_phone_for_sms(phone) if phone else None
            if not formatted or formatted in seen:
                continue
            seen.add(formatted)
            result.append((first_name, formatted))
        return result

    @classmethod
    def send(cls, announcement):
        """
        Deliver the announcement now and record the outcome.

        Emails go to each distinct address, SMS to each distinct number until
        the church's monthly quota runs out. The announcement is SENT when
        anything went out, or when the groups had nobody in them.
        """
        from .services_email import EmailService
        from .services_sms import SMSQuotaService, TwilioSMSService

        church = announcement.church
        people = cls.recipients(announcement)

        if not people:
            cls._finish(announcement, AnnouncementStatus.SENT, 'No recipients found in selected groups')
            logger.info(f'Announcement {announcement.pk}: no recipients found')
            return announcement

        emails_sent = emails_failed = 0
        if announcement.send_email:
            for first_name, email in cls.unique_emails(people):
                if EmailService.send_announcement(
                    to=email,
                    subject=announcement.subject,
                    message=f'Hello {first_name},\n\n{announcement.message}',
                    church_name=church.name,
                ):
                    emails_sent += 1
                else:
                    emails_failed += 1

        sms_sent = sms_failed = 0
        if announcement.send_sms:
            service = TwilioSMSService()
            body = f'{church.name}: {announcement.message}'
            for _, phone in cls.unique_phones(people):
                if not SMSQuotaService.can_send(church, MessageKind.SMS):
                    logger.warning(f'SMS quota reached for {church.name}, announcement {announcement.pk}')
                    break
                sms = service.send_to(church, phone, body, sent_by=announcement.created_by)
                if sms is not None and sms.status == SMSStatus.SENT:
                    sms_sent += 1
                else:
                    sms_failed += 1

        announcement.email_count = emails_sent
        announcement.sms_count = sms_sent
        if emails_sent or sms_sent:
            cls._finish(announcement, AnnouncementStatus.SENT)
        else:
            cls._finish(
                announcement,
                AnnouncementStatus.FAILED,
                f'All sends failed: {emails_failed} email(s), {sms_failed} SMS',
            )
        logger.info(
            f'Announcement {announcement.pk} {announcement.status}: '
            f'{emails_sent} emails sent, {emails_failed} failed, {sms_sent} SMS sent, {sms_failed} SMS failed'
        )
        return announcement

    @staticmethod
    def _finish(announcement, status, error=''):
        announcement.status = status
        announcement.error_message = error
        announcement.sent_at = timezone.now()
        announcement.save(update_fields=[
            'status', 'error_message', 'sent_at', 'email_count', 'sms_count', 'updated_at',
        ])

    @classmethod
    def send_due(cls, now=None):
        """Send every SCHEDULED announcement whose time has come. Returns how many ran."""
        from .models import ScheduledAnnouncement

        now = now or timezone.now()
        due = ScheduledAnnouncement.objects.filter(
            status=AnnouncementStatus.SCHEDULED,
            scheduled_at__lte=now,
        ).select_related('church', 'created_by')

        count = 0
        for announcement in due:
            try:
                cls.send(announcement)
            except Exception as e:
                logger.error(f'Failed to send announcement {announcement.pk}: {e}', exc_info=True)
                announcement.status = AnnouncementStatus.FAILED
                announcement.error_message = str(e)[:500] or 'Unknown error'
                announcement.save(update_fields=['status', 'error_message', 'updated_at'])
            count += 1
        return count

    @staticmethod
    def cancel(announcement):
        if announcement.status != AnnouncementStatus.SCHEDULED:
            raise ValueError('Only scheduled announcements can be cancelled.')
        announcement.status = AnnouncementStatus.CANCELLED
        announcement.save(update_fields=['status', 'updated_at'])
        return announcement
