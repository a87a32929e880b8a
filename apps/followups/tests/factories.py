"""Test factories for followups app."""
from datetime import timedelta

import factory
from django.utils import timezone
from factory.django import DjangoModelFactory

from apps.core.constants import CheckinOutcome, FollowUpStatus, NewMemberStage
from apps.followups.models import (
    ContactRequest, Convert, ConvertCheckin, Guest, GuestCheckin, Member, MemberCheckin,
    NewMember, NewMemberCheckin, PrayerRequest,
)
from apps.ministries.tests.factories import ChurchFactory


class TrackedPersonFactory(DjangoModelFactory):
    church = factory.SubFactory(ChurchFactory)
    first_name = factory.Faker('first_name')
    last_name = factory.Faker('last_name')
    email = factory.Sequence(lambda n: f'person{n}@example.com')
    phone = '5551234567'
    status = FollowUpStatus.NEW


class ConvertFactory(TrackedPersonFactory):
    class Meta:
        model = Convert


class NewMemberFactory(TrackedPersonFactory):
    class Meta:
        model = NewMember

    follow_up_stage = NewMemberStage.NEW


class MemberFactory(TrackedPersonFactory):
    class Meta:
        model = Member

    member_since = factory.LazyFunction(timezone.localdate)


class GuestFactory(TrackedPersonFactory):
    class Meta:
        model = Guest

    visit_date = factory.LazyFunction(timezone.localdate)


class ConvertCheckinFactory(DjangoModelFactory):
    """Completed contact with a convert."""

    class Meta:
        model = ConvertCheckin

    convert = factory.SubFactory(ConvertFactory)
    church = factory.LazyAttribute(lambda obj: obj.convert.church)
    outcome = CheckinOutcome.CONNECTED
    completed_at = factory.LazyFunction(timezone.now)


class ScheduledConvertCheckinFactory(ConvertCheckinFactory):
    outcome = CheckinOutcome.SCHEDULED_VISIT
    next_followup_date = factory.LazyFunction(lambda: timezone.localdate() + timedelta(days=3))
    completed_at = None


class NewMemberCheckinFactory(DjangoModelFactory):
    class Meta:
        model = NewMemberCheckin

    new_member = factory.SubFactory(NewMemberFactory)
    church = factory.LazyAttribute(lambda obj: obj.new_member.church)
    outcome = CheckinOutcome.SCHEDULED_VISIT
    next_followup_date = factory.LazyFunction(lambda: timezone.localdate() + timedelta(days=3))


class MemberCheckinFactory(DjangoModelFactory):
    class Meta:
        model = MemberCheckin

    member = factory.SubFactory(MemberFactory)
    church = factory.LazyAttribute(lambda obj: obj.member.church)
    outcome = CheckinOutcome.SCHEDULED_VISIT
    next_followup_date = factory.LazyFunction(lambda: timezone.localdate() + timedelta(days=3))


class GuestCheckinFactory(DjangoModelFactory):
    class Meta:
        model = GuestCheckin

    guest = factory.SubFactory(GuestFactory)
    church = factory.LazyAttribute(lambda obj: obj.guest.church)
    outcome = CheckinOutcome.SCHEDULED_VISIT
    next_followup_date = factory.LazyFunction(lambda: timezone.localdate() + timedelta(days=3))


class PrayerRequestFactory(DjangoModelFactory):
    class Meta:
        model = PrayerRequest

    church = factory.SubFactory(ChurchFactory)
    name = factory.Faker('name')
    email = factory.Sequence(lambda n: f'prayer{n}@example.com')
    message = 'Please pray for my family.'


class ContactRequestFactory(DjangoModelFactory):
    class Meta:
        model = ContactRequest

    church = factory.SubFactory(ChurchFactory)
    name = factory.Faker('name')
    email = factory.Sequence(lambda n: f'contact{n}@example.com')
    subject = 'Question'
    message = 'When are your services?'
