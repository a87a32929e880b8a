"""Tests for the audit service, login signals and log retention."""
from datetime import timedelta

import pytest
from django.contrib.auth import authenticate
from django.test import RequestFactory
from django.utils import timezone
from freezegun import freeze_time

from apps.accounts.tests.factories import make_leader
from apps.core.audit import AuditLog, LoginAudit
from apps.core.constants import AuditAction
from apps.core.services_audit import AuditService
from apps.core.tasks import cleanup_old_audit_logs
from apps.ministries.tests.factories import ChurchFactory

pytestmark = pytest.mark.django_db


@pytest.fixture
def request_factory():
    return RequestFactory()


class TestAuditService:
    def test_log_create(self, request_factory):
        leader = make_leader()
        church = leader.staff_profile.church
        request = request_factory.post('/', HTTP_USER_AGENT='pytest', REMOTE_ADDR='10.0.0.8')
        request.user = leader

        AuditService.log_create(request, church)

        entry = AuditLog.objects.get()
        assert entry.action == AuditAction.CREATE
        assert entry.entity_type == 'Church'
        assert entry.entity_id == str(church.pk)
        assert entry.church == church
        assert entry.user == leader
        assert entry.ip_address == '10.0.0.8'
        assert entry.user_agent == 'pytest'

    def test_log_update_records_diff(self, request_factory):
        church = ChurchFactory(name='Old Name')
        old_data = AuditService.snapshot(church)
        church.name = 'New Name'
        church.save()
        request = request_factory.patch('/')
        request.user = make_leader(church=church)

        AuditService.log_update(request, church, old_data)

        entry = AuditLog.objects.get()
        assert entry.changes == {'name': {'old': 'Old Name', 'new': 'New Name'}}

    def test_forwarded_ip(self, request_factory):
        request = request_factory.get('/', HTTP_X_FORWARDED_FOR='203.0.113.5, 10.0.0.1')
        request.user = make_leader()

        AuditService.log_delete(request, ChurchFactory())

        assert AuditLog.objects.get().ip_address == '203.0.113.5'

    def test_anonymous_user_stored_as_none(self, request_factory):
        from django.contrib.auth.models import AnonymousUser

        AuditService.log(AnonymousUser(), AuditAction.APPROVE, ChurchFactory())

        assert AuditLog.objects.get().user is None

    def test_log_export(self, request_factory):
        leader = make_leader()
        request = request_factory.get('/')
        request.user = leader

        AuditService.log_export(request, 'Convert', 12, church=leader.staff_profile.church)

        entry = AuditLog.objects.get()
        assert entry.action == AuditAction.EXPORT
        assert entry.object_repr == 'Export of 12 records'

    def test_str(self):
        entry = AuditService.log(None, AuditAction.ARCHIVE, ChurchFactory())
        assert str(entry).startswith('Archive Church ')


class TestLoginSignals:
    def test_failed_authenticate_is_recorded(self, request_factory):
        leader = make_leader()
        request = request_factory.post('/admin/login/')

        assert authenticate(request, username=leader.username, password='wrong') is None

        audit = LoginAudit.objects.get()
        assert audit.success is False
        assert audit.email_attempted == leader.username
        assert audit.failure_reason == 'invalid_credentials'

    def test_str(self):
        audit = LoginAudit.objects.create(email_attempted='a@example.com', ip_address='10.0.0.1', success=False)
        assert str(audit) == 'a@example.com [FAIL] 10.0.0.1'


class TestCleanupTask:
    def test_deletes_only_old_rows(self):
        with freeze_time(timezone.now() - timedelta(days=400)):
            AuditService.log(None, AuditAction.CREATE, ChurchFactory())
            LoginAudit.objects.create(email_attempted='old@example.com', ip_address='10.0.0.1')
        recent = AuditService.log(None, AuditAction.CREATE, ChurchFactory())

        assert cleanup_old_audit_logs(days=365) == 2
        assert list(AuditLog.objects.all()) == [recent]
        assert not LoginAudit.objects.exists()
