"""Tests for the communication REST API."""
from datetime import timedelta

import pytest
from django.core import mail
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from apps.accounts.tests.factories import make_leader, make_ministry_admin
from apps.communication.models import MessagingAutomation, ScheduledAnnouncement
from apps.core.constants import AnnouncementStatus, NotificationMethod, PersonCategory, Plan
from apps.followups.tests.factories import ConvertFactory
from apps.ministries.tests.factories import ChurchFactory

from .factories import (
    MessagingAutomationFactory, ScheduledAnnouncementFactory, SMSMessageFactory, SmsUsageFactory,
)

pytestmark = pytest.mark.django_db


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def church():
    return ChurchFactory(plan=Plan.FORMATION)


@pytest.fixture
def leader_client(api_client, church):
    api_client.force_authenticate(user=make_leader(church=church))
    return api_client


@pytest.fixture
def admin_client(api_client, church):
    api_client.force_authenticate(user=make_ministry_admin(church=church))
    return api_client


class TestAnnouncements:
    def test_create_in_own_church(self, leader_client, church):
        response = leader_client.post('/api/v1/communication/announcements/', {
            'subject': 'Prayer night',
            'message': '<b>Friday</b> at 7pm',
            'recipient_groups': [PersonCategory.CONVERTS, PersonCategory.CONVERTS, PersonCategory.GUESTS],
            'scheduled_at': (timezone.now() + timedelta(days=1)).isoformat(),
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        announcement = ScheduledAnnouncement.objects.get(pk=response.data['id'])
        assert announcement.church == church
        assert announcement.message == 'Friday at 7pm'
        assert announcement.recipient_groups == [PersonCategory.CONVERTS, PersonCategory.GUESTS]
        assert announcement.status == AnnouncementStatus.SCHEDULED

    def test_unknown_group_rejected(self, leader_client):
        response = leader_client.post('/api/v1/communication/announcements/', {
            'subject': 'Hi', 'message': 'Hello', 'recipient_groups': ['volunteers'],
            'scheduled_at': (timezone.now() + timedelta(days=1)).isoformat(),
        }, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_past_schedule_rejected(self, leader_client):
        response = leader_client.post('/api/v1/communication/announcements/', {
            'subject': 'Hi', 'message': 'Hello', 'recipient_groups': [PersonCategory.MEMBERS],
            'scheduled_at': (timezone.now() - timedelta(days=1)).isoformat(),
        }, format='json')
        assert 'scheduled_at' in response.data

    def test_needs_a_channel(self, leader_client):
        response = leader_client.post('/api/v1/communication/announcements/', {
            'subject': 'Hi', 'message': 'Hello', 'recipient_groups': [PersonCategory.MEMBERS],
            'send_email': False, 'send_sms': False,
            'scheduled_at': (timezone.now() + timedelta(days=1)).isoformat(),
        }, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_list_scoped_to_church(self, leader_client, church):
        ScheduledAnnouncementFactory(church=church)
        ScheduledAnnouncementFactory()

        response = leader_client.get('/api/v1/communication/announcements/')

        assert response.data['count'] == 1

    def test_cancel(self, leader_client, church):
        announcement = ScheduledAnnouncementFactory(church=church)

        response = leader_client.post(f'/api/v1/communication/announcements/{announcement.pk}/cancel/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == AnnouncementStatus.CANCELLED

    def test_cancel_sent_is_rejected(self, leader_client, church):
        announcement = ScheduledAnnouncementFactory(church=church, status=AnnouncementStatus.SENT)
        response = leader_client.post(f'/api/v1/communication/announcements/{announcement.pk}/cancel/')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_send_now(self, leader_client, church):
        ConvertFactory(church=church, email='lydia@example.com')
        announcement = ScheduledAnnouncementFactory(church=church)

        response = leader_client.post(f'/api/v1/communication/announcements/{announcement.pk}/send-now/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == AnnouncementStatus.SENT
        assert response.data['email_count'] == 1
        assert mail.outbox[0].to == ['lydia@example.com']

    def test_edit_after_send_rejected(self, leader_client, church):
        announcement = ScheduledAnnouncementFactory(church=church, status=AnnouncementStatus.SENT)
        response = leader_client.patch(
            f'/api/v1/communication/announcements/{announcement.pk}/',
            {'subject': 'Changed'}, format='json',
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_other_church_not_found(self, leader_client):
        announcement = ScheduledAnnouncementFactory()
        response = leader_client.post(f'/api/v1/communication/announcements/{announcement.pk}/cancel/')
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestSms:
    def test_usage(self, leader_client, church):
        SmsUsageFactory(church=church, sms_count=12)

        response = leader_client.get('/api/v1/communication/sms-usage/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['sms_used'] == 12
        assert response.data['sms_limit'] == 2000
        assert response.data['plan'] == Plan.FORMATION

    def test_messages_scoped_to_church(self, leader_client, church):
        SMSMessageFactory(church=church)
        SMSMessageFactory()

        response = leader_client.get('/api/v1/communication/sms-messages/')

        assert response.data['count'] == 1


class TestMessagingAutomation:
    def test_get_creates_defaults(self, admin_client, church):
        response = admin_client.get('/api/v1/communication/messaging-automation/current/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['day_before_reminders_enabled'] is True
        assert MessagingAutomation.objects.filter(church=church).exists()

    def test_put_updates(self, admin_client, church):
        MessagingAutomationFactory(church=church)

        response = admin_client.put('/api/v1/communication/messaging-automation/current/', {
            'day_before_reminders_enabled': False,
            'notify_leader': False,
            'default_notification_method': NotificationMethod.EMAIL_SMS,
            'reminder_subject': 'See you tomorrow',
            'reminder_message': '',
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        automation = MessagingAutomation.objects.get(church=church)
        assert automation.day_before_reminders_enabled is False
        assert automation.default_notification_method == NotificationMethod.EMAIL_SMS

    def test_leader_forbidden(self, leader_client):
        response = leader_client.get('/api/v1/communication/messaging-automation/current/')
        assert response.status_code == status.HTTP_403_FORBIDDEN
