"""Tests for the audit trail API."""
import pytest
from rest_framework import status
from rest_framework.test import APIClient

from apps.accounts.tests.factories import make_leader, make_ministry_admin, make_platform_admin
from apps.core.audit import LoginAudit
from apps.core.constants import AuditAction
from apps.core.services_audit import AuditService
from apps.ministries.tests.factories import ChurchFactory

pytestmark = pytest.mark.django_db

AUDIT_URL = '/api/v1/audit/audit-logs/'
LOGIN_AUDIT_URL = '/api/v1/audit/login-audits/'


@pytest.fixture
def api_client():
    return APIClient()


class TestAuditLogViewSet:
    def test_ministry_admin_sees_own_church(self, api_client):
        admin = make_ministry_admin()
        church = admin.staff_profile.church
        AuditService.log(admin, AuditAction.UPDATE, church)
        AuditService.log(None, AuditAction.UPDATE, ChurchFactory())

        api_client.force_authenticate(admin)
        response = api_client.get(AUDIT_URL)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['church_name'] == church.name

    def test_platform_admin_sees_all(self, api_client):
        AuditService.log(None, AuditAction.UPDATE, ChurchFactory())
        AuditService.log(None, AuditAction.DELETE, ChurchFactory())

        api_client.force_authenticate(make_platform_admin())
        response = api_client.get(AUDIT_URL)

        assert response.data['count'] == 2

    def test_filter_by_action(self, api_client):
        AuditService.log(None, AuditAction.UPDATE, ChurchFactory())
        AuditService.log(None, AuditAction.DELETE, ChurchFactory())

        api_client.force_authenticate(make_platform_admin())
        response = api_client.get(AUDIT_URL, {'action': AuditAction.DELETE})

        assert response.data['count'] == 1
        assert response.data['results'][0]['action_display'] == 'Delete'

    def test_leader_forbidden(self, api_client):
        api_client.force_authenticate(make_leader())
        assert api_client.get(AUDIT_URL).status_code == status.HTTP_403_FORBIDDEN

    def test_anonymous_rejected(self, api_client):
        assert api_client.get(AUDIT_URL).status_code in (
            status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN,
        )


class TestLoginAuditViewSet:
    def test_platform_admin_only(self, api_client):
        LoginAudit.objects.create(email_attempted='x@example.com', ip_address='10.0.0.1', success=False)

        api_client.force_authenticate(make_ministry_admin())
        assert api_client.get(LOGIN_AUDIT_URL).status_code == status.HTTP_403_FORBIDDEN

        api_client.force_authenticate(make_platform_admin())
        response = api_client.get(LOGIN_AUDIT_URL)
        assert response.data['count'] == 1
        assert response.data['results'][0]['email_attempted'] == 'x@example.com'
