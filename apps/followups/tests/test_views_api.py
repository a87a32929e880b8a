"""Tests for the follow-up REST API."""
from datetime import timedelta

import pytest
from django.core import mail
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from apps.core.audit import AuditLog
from apps.core.constants import AuditAction, CheckinOutcome, FollowUpStatus, PersonCategory
from apps.followups.models import ContactRequest, Convert, ConvertCheckin, NewMember
from apps.accounts.tests.factories import make_leader, make_ministry_admin, make_platform_admin
from apps.ministries.tests.factories import ChurchFactory

from .factories import (
    ContactRequestFactory, ConvertFactory, GuestFactory, MemberFactory, NewMemberFactory,
    PrayerRequestFactory, ScheduledConvertCheckinFactory,
)

pytestmark = pytest.mark.django_db


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def church():
    return ChurchFactory()


@pytest.fixture
def leader(church):
    return make_leader(church=church)


@pytest.fixture
def leader_client(api_client, leader):
    api_client.force_authenticate(user=leader)
    return api_client


class TestPersonAccess:
    def test_anonymous_rejected(self, api_client):
        response = api_client.get('/api/v1/followups/converts/')
        assert response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)

    def test_leader_sees_only_own_church(self, leader_client, church):
        ConvertFactory.create_batch(2, church=church)
        ConvertFactory()

        response = leader_client.get('/api/v1/followups/converts/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 2

    def test_other_church_person_is_not_found(self, leader_client):
        stranger = ConvertFactory()
        response = leader_client.get(f'/api/v1/followups/converts/{stranger.pk}/')
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_platform_admin_sees_all_and_filters_by_church(self, api_client, church):
        ConvertFactory(church=church)
        ConvertFactory()
        api_client.force_authenticate(user=make_platform_admin())

        assert api_client.get('/api/v1/followups/converts/').data['count'] == 2
        response = api_client.get('/api/v1/followups/converts/', {'church': str(church.pk)})
        assert response.data['count'] == 1

    def test_malformed_church_filter_is_400(self, api_client):
        api_client.force_authenticate(user=make_platform_admin())

        for url in ('/api/v1/followups/converts/', '/api/v1/followups/followups/'):
            response = api_client.get(url, {'church': 'not-a-uuid'})
            assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestPersonCrud:
    def test_create_sets_church_and_creator(self, leader_client, leader, church):
        response = leader_client.post('/api/v1/followups/members/', {
            'first_name': 'Ruth',
            'last_name': 'Moabite',
            'email': 'ruth@example.com',
            'member_since': '2024-05-01',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['church'] == church.pk
        assert response.data['created_by'] == leader.pk
        assert response.data['status'] == FollowUpStatus.NEW
        assert response.data['display_status'] == 'NEW'
        assert AuditLog.objects.filter(action=AuditAction.CREATE, entity_type='Member').exists()

    def test_platform_admin_must_name_church(self, api_client):
        api_client.force_authenticate(user=make_platform_admin())
        response = api_client.post('/api/v1/followups/guests/', {
            'first_name': 'Lydia', 'last_name': 'Purple', 'visit_date': '2025-01-05',
        }, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'church' in response.data

    def test_status_bucket_written_as_stored_status(self, leader_client, church):
        convert = ConvertFactory(church=church)

        response = leader_client.patch(
            f'/api/v1/followups/converts/{convert.pk}/', {'status': 'COMPLETED'}, format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        convert.refresh_from_db()
        assert convert.status == FollowUpStatus.CONNECTED
        assert AuditLog.objects.filter(
            action=AuditAction.STATUS_CHANGE, entity_id=str(convert.pk),
        ).exists()

    def test_not_connected_bucket(self, leader_client, church):
        convert = ConvertFactory(church=church)

        leader_client.patch(
            f'/api/v1/followups/converts/{convert.pk}/', {'status': 'NOT_CONNECTED'}, format='json',
        )

        convert.refresh_from_db()
        assert convert.status == FollowUpStatus.NOT_COMPLETED

    def test_invalid_status_rejected(self, leader_client, church):
        convert = ConvertFactory(church=church)
        response = leader_client.patch(
            f'/api/v1/followups/converts/{convert.pk}/', {'status': 'LOST'}, format='json',
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_church_cannot_be_moved(self, leader_client, church):
        convert = ConvertFactory(church=church)
        other = ChurchFactory()
        leader_client.patch(
            f'/api/v1/followups/converts/{convert.pk}/', {'church': str(other.pk)}, format='json',
        )
        convert.refresh_from_db()
        assert convert.church == church

    def test_delete(self, leader_client, church):
        guest = GuestFactory(church=church)
        response = leader_client.delete(f'/api/v1/followups/guests/{guest.pk}/')
        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert AuditLog.objects.filter(action=AuditAction.DELETE, entity_id=str(guest.pk)).exists()


class TestStatusFilter:
    def test_display_bucket_groups_statuses(self, leader_client, church):
        ConvertFactory(church=church, status=FollowUpStatus.NO_RESPONSE)
        ConvertFactory(church=church, status=FollowUpStatus.NEVER_CONTACTED)
        ConvertFactory(church=church, status=FollowUpStatus.CONNECTED)

        response = leader_client.get('/api/v1/followups/converts/', {'status': 'NOT_CONNECTED'})

        assert response.data['count'] == 2

    def test_stored_status(self, leader_client, church):
        ConvertFactory(church=church, status=FollowUpStatus.NO_RESPONSE)
        ConvertFactory(church=church, status=FollowUpStatus.NEVER_CONTACTED)

        response = leader_client.get('/api/v1/followups/converts/', {'status': FollowUpStatus.NO_RESPONSE})

        assert response.data['count'] == 1

    def test_search(self, leader_client, church):
        MemberFactory(church=church, first_name='Priscilla')
        MemberFactory(church=church, first_name='Aquila')
        response = leader_client.get('/api/v1/followups/members/', {'search': 'prisc'})
        assert response.data['count'] == 1


class TestCheckinActions:
    def test_record_checkin(self, leader_client, church):
        convert = ConvertFactory(church=church)

        response = leader_client.post(
            f'/api/v1/followups/converts/{convert.pk}/checkins/',
            {'outcome': CheckinOutcome.CONNECTED, 'notes': 'Prayed together'},
            format='json',
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['person_name'] == convert.full_name
        convert.refresh_from_db()
        assert convert.status == FollowUpStatus.CONNECTED

    def test_list_checkins(self, leader_client, church):
        checkin = ScheduledConvertCheckinFactory(convert__church=church)
        response = leader_client.get(f'/api/v1/followups/converts/{checkin.convert.pk}/checkins/')
        assert response.status_code == status.HTTP_200_OK
        assert [row['id'] for row in response.data] == [str(checkin.pk)]

    def test_schedule_followup(self, leader_client, church, leader):
        new_member = NewMemberFactory(church=church)
        followup_date = timezone.localdate() + timedelta(days=4)

        response = leader_client.post(
            f'/api/v1/followups/new-members/{new_member.pk}/schedule-followup/',
            {'followup_date': followup_date.isoformat(), 'followup_time': '18:00', 'include_video_link': True},
            format='json',
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['next_followup_date'] == followup_date.isoformat()
        assert response.data['video_link'].startswith('https://meet.jit.si/')
        new_member.refresh_from_db()
        assert new_member.status == FollowUpStatus.SCHEDULED
        assert leader.email in [m.to[0] for m in mail.outbox]

    def test_schedule_in_the_past_rejected(self, leader_client, church):
        convert = ConvertFactory(church=church)
        response = leader_client.post(
            f'/api/v1/followups/converts/{convert.pk}/schedule-followup/',
            {'followup_date': (timezone.localdate() - timedelta(days=1)).isoformat()},
            format='json',
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_complete_checkin(self, leader_client, church):
        checkin = ScheduledConvertCheckinFactory(convert__church=church)

        response = leader_client.patch(
            f'/api/v1/followups/convert-checkins/{checkin.pk}/complete/',
            {'outcome': CheckinOutcome.NO_RESPONSE},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['outcome'] == CheckinOutcome.NO_RESPONSE
        checkin.convert.refresh_from_db()
        assert checkin.convert.status == FollowUpStatus.NO_RESPONSE

    def test_complete_twice_returns_400(self, leader_client, church):
        checkin = ScheduledConvertCheckinFactory(convert__church=church)
        url = f'/api/v1/followups/convert-checkins/{checkin.pk}/complete/'
        leader_client.post(url, {'outcome': CheckinOutcome.CONNECTED}, format='json')

        response = leader_client.post(url, {'outcome': CheckinOutcome.CONNECTED}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['detail'] == 'This follow-up has already been completed.'

    def test_complete_other_church_checkin_not_found(self, leader_client):
        checkin = ScheduledConvertCheckinFactory()
        response = leader_client.post(
            f'/api/v1/followups/convert-checkins/{checkin.pk}/complete/',
            {'outcome': CheckinOutcome.CONNECTED}, format='json',
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestPromoteAction:
    def test_promote_convert(self, leader_client, church):
        convert = ConvertFactory(church=church, email='')

        response = leader_client.post(f'/api/v1/followups/converts/{convert.pk}/promote/')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['category'] == PersonCategory.NEW_MEMBERS
        assert NewMember.objects.filter(pk=response.data['person']['id']).exists()
        assert not Convert.objects.filter(pk=convert.pk).exists()

    def test_promote_member_rejected(self, leader_client, church):
        member = MemberFactory(church=church)
        response = leader_client.post(f'/api/v1/followups/members/{member.pk}/promote/')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['detail'] == 'Members cannot be promoted further.'


class TestExport:
    def test_csv_export(self, leader_client, church):
        ConvertFactory(church=church, first_name='Zacchaeus')

        response = leader_client.get('/api/v1/followups/converts/export/', {'file_format': 'csv'})

        assert response.status_code == status.HTTP_200_OK
        assert response['Content-Type'] == 'text/csv'
        assert 'Zacchaeus' in response.content.decode('utf-8-sig')
        assert AuditLog.objects.filter(action=AuditAction.EXPORT, church=church).exists()

    def test_excel_export_is_default(self, leader_client, church):
        GuestFactory(church=church)
        response = leader_client.get('/api/v1/followups/guests/export/')
        assert response.status_code == status.HTTP_200_OK
        assert response['Content-Disposition'] == 'attachment; filename="guests.xlsx"'


class TestFollowUpList:
    def test_lists_open_followups_of_own_church(self, leader_client, church):
        ScheduledConvertCheckinFactory(convert__church=church)
        ScheduledConvertCheckinFactory()

        response = leader_client.get('/api/v1/followups/followups/')

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1
        assert response.data[0]['category'] == PersonCategory.CONVERTS

    def test_unknown_category(self, leader_client):
        response = leader_client.get('/api/v1/followups/followups/', {'category': 'visitors'})
        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestMassFollowUp:
    def test_candidates(self, leader_client, church):
        GuestFactory(church=church, visit_date=timezone.localdate())
        GuestFactory(church=church, visit_date=timezone.localdate() - timedelta(days=60))

        response = leader_client.get('/api/v1/followups/mass-followup/candidates/', {
            'category': PersonCategory.GUESTS,
            'date_from': (timezone.localdate() - timedelta(days=7)).isoformat(),
        })

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1

    def test_schedule_for_many(self, leader_client, church):
        people = ConvertFactory.create_batch(2, church=church)

        response = leader_client.post('/api/v1/followups/mass-followup/', {
            'category': PersonCategory.CONVERTS,
            'person_ids': [str(p.pk) for p in people],
            'followup_date': (timezone.localdate() + timedelta(days=1)).isoformat(),
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['message'] == 'Follow-up scheduled for 2 of 2 people.'
        assert response.data['video_link']
        assert ConvertCheckin.objects.filter(church=church).count() == 2

    def test_platform_admin_cannot_mass_schedule(self, api_client):
        api_client.force_authenticate(user=make_platform_admin())
        response = api_client.post('/api/v1/followups/mass-followup/', {}, format='json')
        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestRequests:
    def test_contact_request_status_update(self, leader_client, leader, church):
        contact = ContactRequestFactory(church=church)

        response = leader_client.patch(
            f'/api/v1/followups/contact-requests/{contact.pk}/',
            {'status': 'RESOLVED', 'message': 'rewritten'},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        contact.refresh_from_db()
        assert contact.status == 'RESOLVED'
        assert contact.message == 'When are your services?'
        assert contact.handled_by == leader

    def test_contact_requests_scoped(self, leader_client, church):
        ContactRequestFactory(church=church)
        ContactRequestFactory()
        assert leader_client.get('/api/v1/followups/contact-requests/').data['count'] == 1

    def test_prayer_requests_read_only(self, leader_client, church):
        prayer = PrayerRequestFactory(church=church)
        assert leader_client.get('/api/v1/followups/prayer-requests/').data['count'] == 1
        response = leader_client.delete(f'/api/v1/followups/prayer-requests/{prayer.pk}/')
        assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED


class TestDashboard:
    def test_church_stats(self, leader_client, church):
        ConvertFactory(church=church, status=FollowUpStatus.CONNECTED)
        ScheduledConvertCheckinFactory(
            convert__church=church, next_followup_date=timezone.localdate(),
        )
        MemberFactory(church=church)

        response = leader_client.get('/api/v1/followups/dashboard/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['church_name'] == church.name
        assert response.data['total_converts'] == 2
        assert response.data['active_converts'] == 1
        assert len(response.data['followups_due']) == 1
        assert response.data['categories'][PersonCategory.MEMBERS]['total'] == 1

    def test_platform_admin_has_no_church_dashboard(self, api_client):
        api_client.force_authenticate(user=make_platform_admin())
        response = api_client.get('/api/v1/followups/dashboard/')
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_platform_stats(self, api_client):
        ConvertFactory.create_batch(2)
        api_client.force_authenticate(user=make_platform_admin())

        response = api_client.get('/api/v1/followups/dashboard/platform/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_converts'] == 2
        assert response.data['total_churches'] == 2

    def test_platform_stats_forbidden_for_ministry_admin(self, api_client):
        api_client.force_authenticate(user=make_ministry_admin())
        response = api_client.get('/api/v1/followups/dashboard/platform/')
        assert response.status_code == status.HTTP_403_FORBIDDEN
