"""Tests for followups models."""
import pytest
from django.utils import timezone

from apps.core.constants import CheckinOutcome, FollowUpStatus, PersonCategory

from .factories import (
    ContactRequestFactory, ConvertCheckinFactory, ConvertFactory, GuestFactory,
    NewMemberFactory, ScheduledConvertCheckinFactory,
)

pytestmark = pytest.mark.django_db


class TestTrackedPerson:
    def test_full_name_and_str(self):
        convert = ConvertFactory(first_name='Lydia', last_name='Thyatira')
        assert convert.full_name == 'Lydia Thyatira'
        assert str(convert) == 'Lydia Thyatira'

    def test_category_per_model(self):
        assert ConvertFactory().category == PersonCategory.CONVERTS
        assert NewMemberFactory().category == PersonCategory.NEW_MEMBERS
        assert GuestFactory().category == PersonCategory.GUESTS

    @pytest.mark.parametrize('stored,bucket', [
        (FollowUpStatus.NEW, 'NEW'),
        (FollowUpStatus.IN_PROGRESS, 'SCHEDULED'),
        (FollowUpStatus.ACTIVE, 'COMPLETED'),
        (FollowUpStatus.NEEDS_PRAYER, 'NOT_CONNECTED'),
        (FollowUpStatus.NEVER_CONTACTED, 'NOT_CONNECTED'),
    ])
    def test_display_status(self, stored, bucket):
        assert ConvertFactory(status=stored).display_status == bucket

    def test_people_reachable_from_church(self):
        convert = ConvertFactory()
        assert list(convert.church.converts.all()) == [convert]


class TestCheckin:
    def test_person_property(self):
        checkin = ConvertCheckinFactory()
        assert checkin.person == checkin.convert

    def test_scheduled_until_completed(self):
        checkin = ScheduledConvertCheckinFactory()
        assert checkin.is_scheduled

        checkin.completed_at = timezone.now()
        assert not checkin.is_scheduled

    def test_str_uses_outcome_label(self):
        checkin = ConvertCheckinFactory(outcome=CheckinOutcome.NO_RESPONSE)
        assert checkin.get_outcome_display() in str(checkin)

    def test_deleting_person_removes_checkins(self):
        checkin = ConvertCheckinFactory()
        checkin.convert.delete()
        assert not type(checkin).objects.filter(pk=checkin.pk).exists()


class TestContactRequest:
    def test_str_falls_back_to_message(self):
        contact = ContactRequestFactory(name='Ann', subject='', message='Hello there')
        assert str(contact) == 'Ann: Hello there'
