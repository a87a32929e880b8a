"""REST API endpoints for tracked people, check-ins and follow-ups."""
import logging

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.constants import AuditAction, DisplayStatus, PersonCategory
from apps.core.export import export_queryset
from apps.core.mixins import ChurchScopedMixin, SetChurchOnCreateMixin, church_query_param
from apps.core.permissions import (
    IsMinistryStaff, IsPlatformAdmin, IsStaff, get_user_church,
)
from apps.core.services_audit import AuditService
from apps.core.throttles import ExportRateThrottle, MassFollowUpRateThrottle
from apps.core.utils import parse_date_param

from .models import (
    ContactRequest, Convert, ConvertCheckin, Guest, GuestCheckin, Member, MemberCheckin,
    NewMember, NewMemberCheckin, PrayerRequest,
)
from .serializers import (
    CHECKIN_SERIALIZERS, PERSON_SERIALIZERS, CandidateSerializer, CheckinCreateSerializer,
    CompleteCheckinSerializer, ContactRequestSerializer, MassFollowUpCandidatesSerializer,
    MassFollowUpSerializer, PrayerRequestSerializer, ScheduleFollowUpSerializer,
    UpcomingFollowUpSerializer,
)
from .services import FollowUpService, checkins_for
from .stats import DashboardService

logger = logging.getLogger(__name__)


EXPORT_FIELDS = [
    'first_name',
    'last_name',
    'email',
    'phone',
    'country',
    'gender',
    'age_group',
    lambda obj: DisplayStatus.EXPORT_LABELS[obj.display_status],
    lambda obj: obj.created_at.strftime('%Y-%m-%d'),
]
EXPORT_HEADERS = [
    'First Name', 'Last Name', 'Email', 'Phone', 'Country', 'Gender',
    'Age Group', 'Status', 'Created',
]


# =============================================================================
# TRACKED PEOPLE
# =============================================================================

class TrackedPersonViewSet(ChurchScopedMixin, SetChurchOnCreateMixin, viewsets.ModelViewSet):
    """
    CRUD for one category of tracked people, scoped to the caller's church.

    ?status= accepts a stored status or a display bucket (NEW, SCHEDULED,
    COMPLETED, NOT_CONNECTED); ?date_from= / ?date_to= filter on creation date.
    """

    category = None
    permission_classes = [IsStaff]
    filterset_fields = ['gender', 'age_group']
    search_fields = ['first_name', 'last_name', 'email', 'phone']
    ordering_fields = ['created_at', 'first_name', 'last_name', 'status']
    ordering = ['-created_at']

    def get_serializer_class(self):
        return PERSON_SERIALIZERS[self.category]

    def get_queryset(self):
        queryset = super().get_queryset().select_related('church', 'created_by')
        params = self.request.query_params

        status_param = params.get('status')
        if status_param:
            if status_param in DisplayStatus.VALUES:
                queryset = queryset.filter(status__in=DisplayStatus.stored_statuses(status_param))
            else:
                queryset = queryset.filter(status=status_param)

        date_from = parse_date_param(params.get('date_from'))
        if date_from:
            queryset = queryset.filter(created_at__date__gte=date_from)
        date_to = parse_date_param(params.get('date_to'))
        if date_to:
            queryset = queryset.filter(created_at__date__lte=date_to)

        return queryset

    def perform_create(self, serializer):
        super().perform_create(serializer)
        AuditService.log_create(self.request, serializer.instance)

    def perform_update(self, serializer):
        old_data = AuditService.snapshot(serializer.instance)
        old_status = serializer.instance.status
        instance = serializer.save()
        if instance.status != old_status:
            AuditService.log(
                self.request.user,
                AuditAction.STATUS_CHANGE,
                instance,
                changes={'status': {'old': old_status, 'new': instance.status}},
                request=self.request,
            )
        else:
            AuditService.log_update(self.request, instance, old_data)

    def perform_destroy(self, instance):
        AuditService.log_delete(self.request, instance)
        instance.delete()

    @action(detail=True, methods=['get', 'post'])
    def checkins(self, request, pk=None):
        """List a person's check-ins, or record a new one."""
        person = self.get_object()
        serializer_class = CHECKIN_SERIALIZERS[self.category]

        if request.method == 'GET':
            queryset = checkins_for(person).select_related('created_by')
            return Response(serializer_class(queryset, many=True).data)

        payload = CheckinCreateSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        checkin = FollowUpService.record_checkin(person, request.user, **payload.validated_data)
        AuditService.log_create(request, checkin)
        return Response(serializer_class(checkin).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'], url_path='schedule-followup')
    def schedule_followup(self, request, pk=None):
        """Schedule the next follow-up and notify the leader and the person."""
        person = self.get_object()
        payload = ScheduleFollowUpSerializer(data=request.data)
        payload.is_valid(raise_exception=True)

        data = payload.validated_data
        checkin = FollowUpService.schedule_followup(
            person,
            request.user,
            data.pop('followup_date'),
            **data,
        )
        AuditService.log_create(request, checkin)
        return Response(
            CHECKIN_SERIALIZERS[self.category](checkin).data,
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=['post'])
    def promote(self, request, pk=None):
        """Move the person to the next category (guest/new member -> member, convert -> new member)."""
        person = self.get_object()
        old_repr = str(person)
        try:
            promoted = FollowUpService.promote(person, request.user)
        except ValueError as e:
            return Response({'detail': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        AuditService.log(
            request.user,
            AuditAction.STATUS_CHANGE,
            promoted,
            changes={'promoted_from': {'old': self.category, 'new': promoted.category}, 'person': old_repr},
            request=request,
        )
        return Response(
            {
                'category': promoted.category,
                'person': PERSON_SERIALIZERS[promoted.category](promoted).data,
            },
            status=status.HTTP_201_CREATED,
        )

    @action(detail=False, methods=['get'], throttle_classes=[ExportRateThrottle])
    def export(self, request):
        """Download the filtered list as Excel (default) or CSV (?file_format=csv)."""
        queryset = self.filter_queryset(self.get_queryset())
        file_format = request.query_params.get('file_format', 'xlsx')
        AuditService.log_export(
            request, self.category, queryset.count(), church=get_user_church(request.user)
        )
        return export_queryset(
            queryset,
            EXPORT_FIELDS,
            self.category,
            headers=EXPORT_HEADERS,
            file_format=file_format,
        )


class ConvertViewSet(TrackedPersonViewSet):
    category = PersonCategory.CONVERTS
    queryset = Convert.objects.all()
    filterset_fields = ['gender', 'age_group', 'wants_contact', 'is_church_member']


class NewMemberViewSet(TrackedPersonViewSet):
    category = PersonCategory.NEW_MEMBERS
    queryset = NewMember.objects.all()
    filterset_fields = ['gender', 'age_group', 'follow_up_stage']


class MemberViewSet(TrackedPersonViewSet):
    category = PersonCategory.MEMBERS
    queryset = Member.objects.all()


class GuestViewSet(TrackedPersonViewSet):
    category = PersonCategory.GUESTS
    queryset = Guest.objects.all()


# =============================================================================
# CHECK-INS
# =============================================================================

class CheckinViewSet(ChurchScopedMixin, viewsets.ReadOnlyModelViewSet):
    """Check-ins of one category; scheduled ones are closed with `complete`."""

    category = None
    permission_classes = [IsStaff]
    filterset_fields = ['outcome', 'notification_method']
    ordering_fields = ['checkin_date', 'next_followup_date', 'created_at']
    ordering = ['-checkin_date', '-created_at']

    def get_serializer_class(self):
        return CHECKIN_SERIALIZERS[self.category]

    def get_queryset(self):
        return super().get_queryset().select_related('created_by')

    @action(detail=True, methods=['patch', 'post'])
    def complete(self, request, pk=None):
        checkin = self.get_object()
        payload = CompleteCheckinSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        try:
            FollowUpService.complete_checkin(
                checkin,
                payload.validated_data['outcome'],
                payload.validated_data.get('notes'),
            )
        except ValueError as e:
            return Response({'detail': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        AuditService.log(
            request.user,
            AuditAction.STATUS_CHANGE,
            checkin,
            changes={'outcome': checkin.outcome},
            request=request,
        )
        return Response(self.get_serializer(checkin).data)


class ConvertCheckinViewSet(CheckinViewSet):
    category = PersonCategory.CONVERTS
    queryset = ConvertCheckin.objects.select_related('convert')


class NewMemberCheckinViewSet(CheckinViewSet):
    category = PersonCategory.NEW_MEMBERS
    queryset = NewMemberCheckin.objects.select_related('new_member')


class MemberCheckinViewSet(CheckinViewSet):
    category = PersonCategory.MEMBERS
    queryset = MemberCheckin.objects.select_related('member')


class GuestCheckinViewSet(CheckinViewSet):
    category = PersonCategory.GUESTS
    queryset = GuestCheckin.objects.select_related('guest')


# =============================================================================
# FOLLOW-UPS
# =============================================================================

class FollowUpViewSet(viewsets.ViewSet):
    """Open scheduled follow-ups across all categories, soonest first."""

    permission_classes = [IsStaff]

    def list(self, request):
        category = request.query_params.get('category')
        if category and category not in PersonCategory.VALUES:
            return Response(
                {'detail': f'Unknown category: {category}'},
                status=status.HTTP_400_BAD_REQUEST,
            )

        church = get_user_church(request.user)
        church_id = church_query_param(request)
        if church is None and church_id:
            from apps.ministries.models import Church
            church = Church.objects.filter(pk=church_id).first()

        items = FollowUpService.upcoming_followups(church=church, category=category or None)
        return Response(UpcomingFollowUpSerializer(items, many=True).data)


class MassFollowUpViewSet(viewsets.ViewSet):
    """Schedule one follow-up for many people of the caller's church."""

    permission_classes = [IsMinistryStaff]

    def get_throttles(self):
        if self.action == 'create':
            return [MassFollowUpRateThrottle()]
        return super().get_throttles()

    @action(detail=False, methods=['get', 'post'])
    def candidates(self, request):
        data = request.query_params if request.method == 'GET' else request.data
        payload = MassFollowUpCandidatesSerializer(data=data)
        payload.is_valid(raise_exception=True)

        people = FollowUpService.mass_followup_candidates(
            get_user_church(request.user),
            payload.validated_data['category'],
            payload.validated_data.get('date_from'),
            payload.validated_data.get('date_to'),
        )
        return Response(CandidateSerializer(people, many=True).data)

    def create(self, request):
        payload = MassFollowUpSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data

        video_link, results = FollowUpService.mass_followup(
            get_user_church(request.user),
            request.user,
            data['category'],
            data['person_ids'],
            data['followup_date'],
            followup_time=data.get('followup_time'),
            include_video_link=data['include_video_link'],
            custom_subject=data['custom_subject'],
            custom_message=data['custom_message'],
            notification_method=data['notification_method'],
        )
        succeeded = sum(1 for r in results if r['success'])
        return Response({
            'message': f'Follow-up scheduled for {succeeded} of {len(results)} people.',
            'video_link': video_link,
            'results': results,
        })


# =============================================================================
# CONTACT AND PRAYER REQUESTS
# =============================================================================

class ContactRequestViewSet(ChurchScopedMixin,
                            mixins.ListModelMixin,
                            mixins.RetrieveModelMixin,
                            mixins.UpdateModelMixin,
                            mixins.DestroyModelMixin,
                            viewsets.GenericViewSet):
    """Contact-us messages addressed to the church. Staff only change the status."""

    queryset = ContactRequest.objects.all()
    serializer_class = ContactRequestSerializer
    permission_classes = [IsStaff]
    filterset_fields = ['status']
    search_fields = ['name', 'email', 'subject']
    ordering_fields = ['created_at', 'status']
    ordering = ['-created_at']

    def perform_update(self, serializer):
        old_data = AuditService.snapshot(serializer.instance)
        instance = serializer.save(handled_by=self.request.user)
        AuditService.log_update(self.request, instance, old_data)


class PrayerRequestViewSet(ChurchScopedMixin, viewsets.ReadOnlyModelViewSet):
    """Prayer requests submitted through the public site."""

    queryset = PrayerRequest.objects.select_related('church')
    serializer_class = PrayerRequestSerializer
    permission_classes = [IsStaff]
    search_fields = ['name', 'email', 'message']
    ordering_fields = ['created_at']
    ordering = ['-created_at']


# =============================================================================
# DASHBOARD
# =============================================================================

class DashboardViewSet(viewsets.ViewSet):
    """Dashboard numbers for ministry staff and for the platform admin."""

    permission_classes = [IsStaff]

    def list(self, request):
        church = get_user_church(request.user)
        if church is None:
            return Response(
                {'detail': 'No ministry is attached to this account.'},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(DashboardService.get_church_stats(church))

    @action(detail=False, methods=['get'], permission_classes=[IsPlatformAdmin])
    def platform(self, request):
        return Response(DashboardService.get_platform_stats())
