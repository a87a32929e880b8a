"""Tests for communication Celery tasks."""
import uuid
from datetime import timedelta

import pytest
from django.utils import timezone

from apps.communication.tasks import send_scheduled_announcements, track_sms_delivery
from apps.core.constants import AnnouncementStatus, SMSStatus

from .factories import ScheduledAnnouncementFactory, SMSMessageFactory

pytestmark = pytest.mark.django_db


class TestSendScheduledAnnouncements:
    def test_runs_only_due_announcements(self):
        due = ScheduledAnnouncementFactory(scheduled_at=timezone.now() - timedelta(minutes=1))
        later = ScheduledAnnouncementFactory()

        assert send_scheduled_announcements() == 1

        due.refresh_from_db()
        later.refresh_from_db()
        assert due.status == AnnouncementStatus.SENT
        assert due.error_message == 'No recipients found in selected groups'
        assert later.status == AnnouncementStatus.SCHEDULED

    def test_nothing_due(self):
        ScheduledAnnouncementFactory()
        assert send_scheduled_announcements() == 0


class TestTrackSmsDelivery:
    def test_unknown_message(self):
        assert track_sms_delivery(str(uuid.uuid4())) is None

    def test_stub_message_delivered(self):
        sms = SMSMessageFactory(twilio_sid='STUB_SID', status=SMSStatus.SENT)

        assert track_sms_delivery(str(sms.pk)) == SMSStatus.DELIVERED
