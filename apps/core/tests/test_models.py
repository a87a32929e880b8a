"""Tests for the base models: active flag, soft delete and managers."""
import pytest

from apps.ministries.models import Church
from apps.ministries.tests.factories import ChurchFactory
from apps.portal.models import Person

pytestmark = pytest.mark.django_db


class TestBaseModel:
    def test_uuid_and_timestamps(self):
        person = Person.objects.create(email='ruth@example.com', first_name='Ruth')
        assert person.pk is not None
        assert person.created_at is not None
        assert person.updated_at is not None
        assert person.is_active is True

    def test_deactivate_hides_from_default_manager(self):
        person = Person.objects.create(email='ruth@example.com', first_name='Ruth')

        person.deactivate()

        assert not Person.objects.filter(pk=person.pk).exists()
        assert Person.all_objects.filter(pk=person.pk).exists()

    def test_activate(self):
        person = Person.objects.create(email='ruth@example.com', first_name='Ruth', is_active=False)

        person.activate()

        assert Person.objects.filter(pk=person.pk).exists()


class TestSoftDeleteModel:
    def test_delete_archives(self):
        church = ChurchFactory()

        result = church.delete()

        church.refresh_from_db()
        assert result == (1, {'ministries.Church': 1})
        assert church.is_deleted
        assert church.is_active is False
        assert not Church.objects.filter(pk=church.pk).exists()
        assert Church.archived.filter(pk=church.pk).exists()

    def test_restore(self):
        church = ChurchFactory()
        church.delete()

        church.restore()

        assert Church.objects.filter(pk=church.pk).exists()
        assert not Church.archived.filter(pk=church.pk).exists()

    def test_hard_delete_removes_row(self):
        church = ChurchFactory()

        church.hard_delete()

        assert not Church.all_objects.filter(pk=church.pk).exists()

    def test_delete_with_hard_delete_flag(self):
        church = ChurchFactory()

        church.delete(hard_delete=True)

        assert not Church.all_objects.filter(pk=church.pk).exists()
