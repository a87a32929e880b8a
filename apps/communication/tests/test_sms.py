"""Tests for the SMS service, quotas and message text."""
from datetime import date, time
from unittest.mock import MagicMock, patch

import pytest
from django.test import override_settings

from apps.communication.models import SMSMessage, SmsUsage
from apps.communication.services_sms import (
    SMSQuotaService, TwilioSMSService, build_followup_sms_message,
)
from apps.core.constants import MessageKind, Plan, SMSStatus
from apps.ministries.tests.factories import ChurchFactory

from .factories import SMSMessageFactory, SmsUsageFactory

pytestmark = pytest.mark.django_db

TWILIO = {
    'TWILIO_ACCOUNT_SID': 'ACtest',
    'TWILIO_AUTH_TOKEN': 'secret',
    'TWILIO_PHONE_NUMBER': '+15550000000',
}


# ─── Message text ────────────────────────────────────────────────────────────────


class TestBuildFollowupMessage:
    def test_person_message(self):
        body = build_followup_sms_message(
            recipient_name='Ruth', church_name='Bethel',
            followup_date=date(2025, 3, 3), followup_time=time(14, 30),
        )
        assert body.startswith('Hi Ruth, Bethel has scheduled a follow-up with you on')
        assert '2:30 PM' in body

    def test_leader_message_with_video(self):
        body = build_followup_sms_message(
            recipient_name='Ruth', church_name='Bethel', followup_date=date(2025, 3, 3),
            video_link='https://meet.jit.si/bethel-ruth-1', is_leader=True,
        )
        assert body.startswith('Bethel: Reminder - Follow-up with Ruth')
        assert body.endswith('Video: https://meet.jit.si/bethel-ruth-1')

    def test_custom_message_wins(self):
        body = build_followup_sms_message(
            recipient_name='Ruth', church_name='Bethel', followup_date=date(2025, 3, 3),
            custom_message='See you Sunday!',
        )
        assert body == 'See you Sunday!'


# ─── Quotas ──────────────────────────────────────────────────────────────────────


class TestSMSQuotaService:
    def test_free_plan_has_no_allowance(self):
        church = ChurchFactory(plan=Plan.FREE)
        assert SMSQuotaService.can_send(church) is False

    def test_remaining_counts_usage(self):
        church = ChurchFactory(plan=Plan.FOUNDATIONS)
        SmsUsageFactory(church=church, sms_count=498, mms_count=10)

        assert SMSQuotaService.remaining(church) == 2
        assert SMSQuotaService.remaining(church, MessageKind.MMS) == 240

    def test_record_increments(self):
        church = ChurchFactory(plan=Plan.FORMATION)
        SMSQuotaService.record(church)
        SMSQuotaService.record(church, MessageKind.MMS, count=2)

        usage = SmsUsage.objects.get(church=church)
        assert usage.sms_count == 1
        assert usage.mms_count == 2

    def test_summary(self):
        church = ChurchFactory(plan=Plan.STEWARDSHIP)
        summary = SMSQuotaService.summary(church)
        assert summary['sms_limit'] == 5000
        assert summary['mms_limit'] == 1000
        assert summary['sms_used'] == 0


# ─── Sending ─────────────────────────────────────────────────────────────────────


class TestTwilioSMSService:
    def test_stub_mode_sends_successfully(self):
        """Without Twilio credentials the message is logged and marked sent."""
        sms = SMSMessageFactory()
        result = TwilioSMSService().send_sms(sms)
        assert result.status == SMSStatus.SENT
        assert result.twilio_sid == 'STUB_SID'
        assert result.sent_at is not None

    def test_send_to_normalizes_and_counts(self):
        church = ChurchFactory(plan=Plan.FOUNDATIONS)

        sms = TwilioSMSService().send_to(church, '(555) 123-4567', 'Hello')

        assert sms.phone_number == '+15551234567'
        assert sms.status == SMSStatus.SENT
        assert SmsUsage.objects.get(church=church).sms_count == 1

    def test_send_to_invalid_phone(self):
        church = ChurchFactory(plan=Plan.FOUNDATIONS)
        assert TwilioSMSService().send_to(church, '123', 'Hello') is None
        assert not SMSMessage.objects.exists()

    def test_send_to_over_quota_is_skipped(self):
        church = ChurchFactory(plan=Plan.FREE)

        sms = TwilioSMSService().send_to(church, '5551234567', 'Hello')

        assert sms.status == SMSStatus.SKIPPED
        assert 'limit reached' in sms.error_message

    @override_settings(**TWILIO)
    def test_configured_send_uses_twilio(self):
        sms = SMSMessageFactory(kind=MessageKind.MMS, media_url='https://example.com/a.png')
        client = MagicMock()
        client.messages.create.return_value = MagicMock(sid='SM123')

        with patch('apps.communication.services_sms.Client', return_value=client):
            result = TwilioSMSService().send_sms(sms)

        assert result.status == SMSStatus.SENT
        assert result.twilio_sid == 'SM123'
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs['media_url'] == ['https://example.com/a.png']
        assert kwargs['from_'] == '+15550000000'

    @override_settings(**TWILIO)
    def test_twilio_error_marks_failed(self):
        sms = SMSMessageFactory()
        client = MagicMock()
        client.messages.create.side_effect = Exception('invalid number')

        with patch('apps.communication.services_sms.Client', return_value=client):
            result = TwilioSMSService().send_sms(sms)

        assert result.status == SMSStatus.FAILED
        assert 'invalid number' in result.error_message

    def test_track_delivery_stub(self):
        sms = SMSMessageFactory(twilio_sid='STUB_SID', status=SMSStatus.SENT)
        result = TwilioSMSService().track_delivery(sms)
        assert result.status == SMSStatus.DELIVERED

    def test_track_delivery_no_sid(self):
        sms = SMSMessageFactory(twilio_sid='', status=SMSStatus.PENDING)
        result = TwilioSMSService().track_delivery(sms)
        assert result.status == SMSStatus.PENDING

    def test_is_configured_false_by_default(self):
        assert TwilioSMSService().is_configured is False
