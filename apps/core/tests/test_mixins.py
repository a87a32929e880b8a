"""Tests for church scoping and the create mixin."""
from unittest.mock import MagicMock

import pytest
from rest_framework.exceptions import ValidationError

from apps.accounts.tests.factories import make_leader, make_platform_admin
from apps.core.audit import AuditLog
from apps.core.constants import AuditAction
from apps.core.mixins import ChurchScopedMixin, SetChurchOnCreateMixin
from apps.ministries.tests.factories import ChurchFactory

pytestmark = pytest.mark.django_db


class ScopedView(ChurchScopedMixin):
    def __init__(self, user, params=None):
        self.request = MagicMock()
        self.request.user = user
        self.request.query_params = params or {}


def _log(church):
    return AuditLog.objects.create(church=church, action=AuditAction.CREATE, entity_type='Convert')


class TestChurchScopedMixin:
    def test_staff_sees_own_church(self):
        leader = make_leader()
        own = _log(leader.staff_profile.church)
        other = _log(ChurchFactory())

        rows = list(ScopedView(leader).scope_queryset(AuditLog.objects.all()))

        assert own in rows
        assert other not in rows

    def test_platform_admin_sees_all(self):
        first = _log(ChurchFactory())
        second = _log(ChurchFactory())

        rows = list(ScopedView(make_platform_admin()).scope_queryset(AuditLog.objects.all()))

        assert first in rows
        assert second in rows

    def test_platform_admin_filters_by_church(self):
        church = ChurchFactory()
        wanted = _log(church)
        _log(ChurchFactory())

        view = ScopedView(make_platform_admin(), {'church': str(church.pk)})

        assert list(view.scope_queryset(AuditLog.objects.all())) == [wanted]

    def test_malformed_church_filter(self):
        view = ScopedView(make_platform_admin(), {'church': 'not-a-uuid'})

        with pytest.raises(ValidationError):
            view.scope_queryset(AuditLog.objects.all())

    def test_user_without_church_sees_nothing(self):
        _log(ChurchFactory())
        user = MagicMock(staff_profile=None, is_authenticated=True, is_superuser=False)

        assert not ScopedView(user).scope_queryset(AuditLog.objects.all()).exists()


class CreateView(SetChurchOnCreateMixin):
    def __init__(self, user):
        self.request = MagicMock()
        self.request.user = user


def _serializer(validated_data, model_fields=('church',)):
    serializer = MagicMock()
    serializer.validated_data = validated_data
    serializer.Meta.model = type('Model', (), {name: None for name in model_fields})
    return serializer


class TestSetChurchOnCreateMixin:
    def test_staff_church_is_forced(self):
        leader = make_leader()
        serializer = _serializer({'church': ChurchFactory()})

        CreateView(leader).perform_create(serializer)

        serializer.save.assert_called_once_with(church=leader.staff_profile.church)

    def test_created_by_when_model_has_it(self):
        leader = make_leader()
        serializer = _serializer({}, model_fields=('church', 'created_by'))

        CreateView(leader).perform_create(serializer)

        serializer.save.assert_called_once_with(
            created_by=leader, church=leader.staff_profile.church,
        )

    def test_platform_admin_must_name_church(self):
        serializer = _serializer({})

        with pytest.raises(ValidationError):
            CreateView(make_platform_admin()).perform_create(serializer)

    def test_platform_admin_with_church(self):
        church = ChurchFactory()
        serializer = _serializer({'church': church})

        CreateView(make_platform_admin()).perform_create(serializer)

        serializer.save.assert_called_once_with()
