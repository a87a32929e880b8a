"""Twilio SMS/MMS service, plan quotas and follow-up message text."""
import logging

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone
from twilio.rest import Client

from apps.core.constants import MessageKind, SMSStatus
from apps.core.utils import (
    format_followup_datetime, format_phone_for_sms, get_billing_period, get_message_limits,
)

logger = logging.getLogger(__name__)


def build_followup_sms_message(*, recipient_name, church_name, followup_date, followup_time=None,
                               video_link='', custom_message='', is_leader=False):
    """
    Short SMS text for a scheduled follow-up.

    A custom message replaces the generated text entirely.
    """
    if custom_message:
        return custom_message

    when = format_followup_datetime(followup_date, followup_time, short=True)

    if is_leader:
        message = f'{church_name}: Reminder - Follow-up with {recipient_name} on {when}.'
        if video_link:
            message += f' Video: {video_link}'
        return message

    message = f'Hi {recipient_name}, {church_name} has scheduled a follow-up with you on {when}.'
    if video_link:
        message += f' Join video call: {video_link}'
    return message


class SMSQuotaService:
    """Monthly SMS/MMS allowance per church plan."""

    @staticmethod
    def get_usage(church, period=None):
        from .models import SmsUsage

        usage, _ = SmsUsage.objects.get_or_create(
            church=church,
            billing_period=period or get_billing_period(),
        )
        return usage

    @classmethod
    def remaining(cls, church, kind=MessageKind.SMS):
        sms_limit, mms_limit = get_message_limits(church.plan)
        usage = cls.get_usage(church)
        if kind == MessageKind.MMS:
            return max(0, mms_limit - usage.mms_count)
        return max(0, sms_limit - usage.sms_count)

    @classmethod
    def can_send(cls, church, kind=MessageKind.SMS, count=1):
        return cls.remaining(church, kind) >= count

    @classmethod
    def record(cls, church, kind=MessageKind.SMS, count=1):
        from .models import SmsUsage

        usage = cls.get_usage(church)
        field = 'mms_count' if kind == MessageKind.MMS else 'sms_count'
        SmsUsage.objects.filter(pk=usage.pk).update(**{field: F(field) + count})

    @classmethod
    def summary(cls, church):
        sms_limit, mms_limit = get_message_limits(church.plan)
        usage = cls.get_usage(church)
        return {
            'billing_period': usage.billing_period,
            'plan': church.plan,
            'sms_used': usage.sms_count,
            'sms_limit': sms_limit,
            'mms_used': usage.mms_count,
            'mms_limit': mms_limit,
        }


class TwilioSMSService:
    """
    Service for sending SMS and MMS via Twilio.

    Requires TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN, and TWILIO_PHONE_NUMBER
    in Django settings.  When Twilio credentials are not configured the service
    operates in *stub mode* -- it logs the message and marks it as sent without
    actually calling the Twilio API.
    """

    def __init__(self):
        self.account_sid = getattr(settings, 'TWILIO_ACCOUNT_SID', '')
        self.auth_token = getattr(settings, 'TWILIO_AUTH_TOKEN', '')
        self.from_number = getattr(settings, 'TWILIO_PHONE_NUMBER', '')
        self._client = None

    @property
    def client(self):
        """Lazy-load the Twilio REST client."""
        if self._client is None and self.account_sid and self.auth_token:
            self._client = Client(self.account_sid, self.auth_token)
        return self._client

    @property
    def is_configured(self):
        return bool(self.account_sid and self.auth_token and self.from_number)

    # ── public API ───────────────────────────────────────────────────────────

    def send_to(self, church, phone, body, kind=MessageKind.SMS, media_url='', sent_by=None):
        """
        Quota-checked send of one message to a raw phone number.

        Returns the SMSMessage, or None when the number is unusable.
        A message over quota is stored as skipped and not sent.
        """
        from .models import SMSMessage

        to = format_phone_for_sms(phone)
        if not to:
            logger.info("SMS skipped -- invalid phone number %r", phone)
            return None

        sms_message = SMSMessage.objects.create(
            church=church,
            kind=kind,
            phone_number=to,
            body=body,
            media_url=media_url or '',
            sent_by=sent_by,
        )

        with transaction.atomic():
            if not SMSQuotaService.can_send(church, kind):
                sms_message.status = SMSStatus.SKIPPED
                sms_message.error_message = f'{kind.upper()} limit reached for this billing period'
                sms_message.save(update_fields=['status', 'error_message', 'updated_at'])
                logger.warning("%s quota reached for church %s", kind.upper(), church.pk)
                return sms_message
            SMSQuotaService.record(church, kind)

        return self.send_sms(sms_message)

    def send_sms(self, sms_message):
        """
        Send a single SMSMessage instance.

        Updates the model in-place with status and twilio_sid.
        Returns the updated SMSMessage.
        """
        if not self.is_configured or self.client is None:
            # Stub mode
            logger.info(
                "[STUB] %s to %s: %s",
                sms_message.kind.upper(),
                sms_message.phone_number,
                sms_message.body[:80],
            )
            sms_message.status = SMSStatus.SENT
            sms_message.sent_at = timezone.now()
            sms_message.twilio_sid = 'STUB_SID'
            sms_message.save(update_fields=['status', 'sent_at', 'twilio_sid', 'updated_at'])
            return sms_message

        params = {
            'body': sms_message.body,
            'from_': self.from_number,
            'to': sms_message.phone_number,
        }
        if sms_message.kind == MessageKind.MMS and sms_message.media_url:
            params['media_url'] = [sms_message.media_url]

        try:
            message = self.client.messages.create(**params)
            sms_message.twilio_sid = message.sid
            sms_message.status = SMSStatus.SENT
            sms_message.sent_at = timezone.now()
            sms_message.save(update_fields=['status', 'sent_at', 'twilio_sid', 'updated_at'])
            logger.info("SMS sent to %s (SID: %s)", sms_message.phone_number, message.sid)
        except Exception as exc:
            sms_message.status = SMSStatus.FAILED
            sms_message.error_message = str(exc)[:500]
            sms_message.save(update_fields=['status', 'error_message', 'updated_at'])
            logger.error("SMS send failed to %s: %s", sms_message.phone_number, exc)

        return sms_message

    def track_delivery(self, sms_message):
        """
        Query Twilio for the delivery status of a sent message.
        Updates the model status accordingly.
        """
        if not sms_message.twilio_sid:
            return sms_message

        if sms_message.twilio_sid == 'STUB_SID':
            sms_message.status = SMSStatus.DELIVERED
            sms_message.save(update_fields=['status', 'updated_at'])
            return sms_message

        if not self.is_configured or self.client is None:
            return sms_message

        try:
            msg = self.client.messages(sms_message.twilio_sid).fetch()
            status_map = {
                'delivered': SMSStatus.DELIVERED,
                'sent': SMSStatus.SENT,
                'failed': SMSStatus.FAILED,
                'undelivered': SMSStatus.FAILED,
            }
            sms_message.status = status_map.get(msg.status, SMSStatus.SENT)
            sms_message.save(update_fields=['status', 'updated_at'])
        except Exception as exc:
            logger.error("Delivery tracking failed for SID %s: %s", sms_message.twilio_sid, exc)

        return sms_message
