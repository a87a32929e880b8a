"""Tests for announcement delivery."""
from datetime import timedelta
from unittest.mock import patch

import pytest
from django.core import mail
from django.utils import timezone

from apps.communication.models import SMSMessage
from apps.communication.services_announcements import AnnouncementService
from apps.core.constants import AnnouncementStatus, PersonCategory, Plan
from apps.followups.tests.factories import ConvertFactory, GuestFactory, MemberFactory
from apps.ministries.tests.factories import ChurchFactory

from .factories import ScheduledAnnouncementFactory, SmsUsageFactory

pytestmark = pytest.mark.django_db


@pytest.fixture
def church():
    return ChurchFactory(name='Bethel Church', plan=Plan.FOUNDATIONS)


class TestRecipients:
    def test_only_selected_groups_of_the_church(self, church):
        ConvertFactory(church=church, email='a@example.com')
        MemberFactory(church=church, email='b@example.com')
        ConvertFactory(email='other@example.com')
        announcement = ScheduledAnnouncementFactory(church=church, recipient_groups=[PersonCategory.CONVERTS])

        emails = [email for _, email, _ in AnnouncementService.recipients(announcement)]

        assert emails == ['a@example.com']

    def test_dedupe_by_email_and_phone(self):
        people = [
            ('Ann', 'Ann@Example.com', '555-123-4567'),
            ('Ann', 'ann@example.com', '(555) 123 4567'),
            ('Bo', '', '5559876543'),
        ]

        assert AnnouncementService.unique_emails(people) == [('Ann', 'Ann@Example.com')]
        assert AnnouncementService.unique_phones(people) == [
            ('Ann', '+15551234567'),
            ('Bo', '+15559876543'),
        ]


class TestSend:
    def test_email_once_per_address(self, church):
        ConvertFactory(church=church, email='ruth@example.com', first_name='Ruth')
        MemberFactory(church=church, email='RUTH@example.com')
        GuestFactory(church=church, email='naomi@example.com')
        announcement = ScheduledAnnouncementFactory(
            church=church,
            recipient_groups=[PersonCategory.CONVERTS, PersonCategory.MEMBERS, PersonCategory.GUESTS],
        )

        AnnouncementService.send(announcement)

        announcement.refresh_from_db()
        assert announcement.status == AnnouncementStatus.SENT
        assert announcement.email_count == 2
        assert announcement.sent_at is not None
        assert len(mail.outbox) == 2
        assert 'Hello Ruth' in mail.outbox[0].body
        assert mail.outbox[0].body.endswith('Bethel Church')

    def test_no_recipients_counts_as_sent(self, church):
        announcement = ScheduledAnnouncementFactory(church=church)

        AnnouncementService.send(announcement)

        assert announcement.status == AnnouncementStatus.SENT
        assert announcement.error_message == 'No recipients found in selected groups'

    def test_sms_stops_at_quota(self, church):
        SmsUsageFactory(church=church, sms_count=499)
        ConvertFactory(church=church, phone='5551110001')
        ConvertFactory(church=church, phone='5551110002')
        announcement = ScheduledAnnouncementFactory(church=church, send_email=False, send_sms=True)

        AnnouncementService.send(announcement)

        assert announcement.sms_count == 1
        assert SMSMessage.objects.filter(church=church).count() == 1
        assert announcement.status == AnnouncementStatus.SENT

    def test_all_failures_mark_failed(self, church):
        ConvertFactory(church=church, email='ruth@example.com')
        announcement = ScheduledAnnouncementFactory(church=church)

        with patch('apps.communication.services_email.send_mail', side_effect=Exception('SMTP down')):
            AnnouncementService.send(announcement)

        assert announcement.status == AnnouncementStatus.FAILED
        assert announcement.error_message.startswith('All sends failed')


class TestSendDue:
    def test_sends_due_only(self, church):
        due = ScheduledAnnouncementFactory(church=church, scheduled_at=timezone.now() - timedelta(minutes=1))
        later = ScheduledAnnouncementFactory(church=church)
        cancelled = ScheduledAnnouncementFactory(
            church=church,
            scheduled_at=timezone.now() - timedelta(minutes=1),
            status=AnnouncementStatus.CANCELLED,
        )

        assert AnnouncementService.send_due() == 1

        due.refresh_from_db()
        later.refresh_from_db()
        cancelled.refresh_from_db()
        assert due.status == AnnouncementStatus.SENT
        assert later.status == AnnouncementStatus.SCHEDULED
        assert cancelled.status == AnnouncementStatus.CANCELLED

    def test_unexpected_error_marks_failed(self, church):
        due = ScheduledAnnouncementFactory(church=church, scheduled_at=timezone.now() - timedelta(minutes=1))

        with patch.object(AnnouncementService, 'recipients', side_effect=RuntimeError('db gone')):
            AnnouncementService.send_due()

        due.refresh_from_db()
        assert due.status == AnnouncementStatus.FAILED
        assert due.error_message == 'db gone'

    def test_cancel_only_scheduled(self, church):
        sent = ScheduledAnnouncementFactory(church=church, status=AnnouncementStatus.SENT)
        with pytest.raises(ValueError):
            AnnouncementService.cancel(sent)
