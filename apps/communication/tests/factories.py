"""Test factories for communication app."""
from datetime import timedelta

import factory
from django.utils import timezone
from factory.django import DjangoModelFactory

from apps.communication.models import (
    MessagingAutomation, ScheduledAnnouncement, SMSMessage, SmsUsage,
)
from apps.core.constants import AnnouncementStatus, MessageKind, PersonCategory, SMSStatus
from apps.ministries.tests.factories import ChurchFactory


class SMSMessageFactory(DjangoModelFactory):
    """Pending SMS for a church."""

    class Meta:
        model = SMSMessage

    church = factory.SubFactory(ChurchFactory)
    kind = MessageKind.SMS
    phone_number = factory.Sequence(lambda n: f'+1555{n:07d}')
    body = factory.Faker('sentence')
    status = SMSStatus.PENDING


class SmsUsageFactory(DjangoModelFactory):
    class Meta:
        model = SmsUsage

    church = factory.SubFactory(ChurchFactory)
    billing_period = factory.LazyFunction(lambda: timezone.localdate().strftime('%Y-%m'))


class MessagingAutomationFactory(DjangoModelFactory):
    class Meta:
        model = MessagingAutomation

    church = factory.SubFactory(ChurchFactory)


class ScheduledAnnouncementFactory(DjangoModelFactory):
    """Email announcement to converts, due in an hour."""

    class Meta:
        model = ScheduledAnnouncement

    church = factory.SubFactory(ChurchFactory)
    subject = factory.Sequence(lambda n: f'Announcement {n}')
    message = 'Join us for the prayer night on Friday.'
    recipient_groups = factory.LazyFunction(lambda: [PersonCategory.CONVERTS])
    send_email = True
    send_sms = False
    scheduled_at = factory.LazyFunction(lambda: timezone.now() + timedelta(hours=1))
    status = AnnouncementStatus.SCHEDULED
