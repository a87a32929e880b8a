"""REST API endpoints of the member portal and the staff view of portal accounts."""
import logging

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from apps.core.constants import AuditAction
from apps.core.mixins import ChurchScopedMixin, church_query_param
from apps.core.permissions import (
    IsMemberAccount, IsMinistryStaff, IsPlatformAdmin, get_user_church, is_platform_admin,
)
from apps.core.services_audit import AuditService
from apps.core.throttles import LoginRateThrottle, PasswordResetRateThrottle

from .authentication import (
    MINISTRY_SESSION_KEY, MemberSessionAuthentication, login_member, logout_member,
)
from .models import JournalEntry, MemberAccount, MemberPrayerRequest
from .serializers import (
    AffiliationSerializer, ClaimSerializer, JournalEntrySerializer, MemberAccountSerializer,
    MemberAccountStatusSerializer, MemberLoginSerializer, MemberPrayerRequestSerializer,
    StaffMemberPrayerRequestSerializer, SwitchMinistrySerializer, UpcomingCheckinSerializer,
)
from .services import MemberAccountService, PortalService

logger = logging.getLogger(__name__)


class MemberPortalMixin:
    """Member session authentication and the ministry selected in the session."""

    authentication_classes = [MemberSessionAuthentication]
    permission_classes = [IsMemberAccount]

    def get_affiliation(self):
        return PortalService.current_affiliation(
            self.request.user, self.request.session.get(MINISTRY_SESSION_KEY),
        )


# =============================================================================
# MEMBER SESSION
# =============================================================================

class MemberAuthViewSet(MemberPortalMixin, viewsets.ViewSet):
    """Sign-in, password claim, profile and journey of the signed-in member."""

    @action(detail=False, methods=['post'], permission_classes=[AllowAny],
            throttle_classes=[LoginRateThrottle])
    def login(self, request):
        serializer = MemberLoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            account = MemberAccountService.authenticate(
                serializer.validated_data['email'], serializer.validated_data['password'],
            )
        except ValueError as e:
            return Response({'detail': str(e)}, status=status.HTTP_401_UNAUTHORIZED)

        login_member(request, account)
        logger.info(f'Member login: {account.person.email}')
        return Response(self._me(account, None))

    @action(detail=False, methods=['post'], permission_classes=[AllowAny])
    def logout(self, request):
        logout_member(request)
        return Response({'detail': 'Logged out.'})

    @action(detail=False, methods=['post'], permission_classes=[AllowAny],
            throttle_classes=[PasswordResetRateThrottle])
    def claim(self, request):
        serializer = ClaimSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            MemberAccountService.claim(
                serializer.validated_data['token'], serializer.validated_data['password'],
            )
        except ValueError as e:
            return Response({'detail': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({'detail': 'Your password is set. You can now sign in.'})

    @action(detail=False, methods=['get'])
    def me(self, request):
        return Response(self._me(request.user, self.get_affiliation()))

    @action(detail=False, methods=['post'], url_path='switch-ministry')
    def switch_ministry(self, request):
        serializer = SwitchMinistrySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ministry_id = serializer.validated_data['ministry_id']

        affiliation = PortalService.affiliations(request.user).filter(church_id=ministry_id).first()
        if affiliation is None:
            return Response({'detail': 'You are not part of this ministry.'}, status=status.HTTP_404_NOT_FOUND)

        request.session[MINISTRY_SESSION_KEY] = str(ministry_id)
        return Response(self._me(request.user, affiliation))

    @action(detail=False, methods=['get'])
    def journey(self, request):
        affiliation = self.get_affiliation()
        if affiliation is None:
            return Response(None)
        return Response(PortalService.journey(affiliation))

    @action(detail=False, methods=['get'], url_path='follow-ups')
    def follow_ups(self, request):
        affiliation = self.get_affiliation()
        if affiliation is None:
            return Response([])
        checkins = PortalService.upcoming_followups(affiliation)
        return Response(UpcomingCheckinSerializer(checkins, many=True).data)

    @staticmethod
    def _me(account, affiliation):
        person = account.person
        if affiliation is None:
            affiliation = PortalService.current_affiliation(account)
        return {
            'person': {
                'id': str(person.pk),
                'email': person.email,
                'first_name': person.first_name,
                'last_name': person.last_name,
                'phone': person.phone,
            },
            'account_status': account.status,
            'affiliations': AffiliationSerializer(PortalService.affiliations(account), many=True).data,
            'current_ministry': (
                {'id': str(affiliation.church_id), 'name': affiliation.church.name}
                if affiliation else None
            ),
        }


# =============================================================================
# JOURNAL & PRAYER REQUESTS
# =============================================================================

class JournalEntryViewSet(MemberPortalMixin, viewsets.ModelViewSet):
    """The signed-in member's journal. Other members' entries are a 404."""

    serializer_class = JournalEntrySerializer
    filter_backends = []

    def get_queryset(self):
        return JournalEntry.objects.filter(account=self.request.user)

    def perform_create(self, serializer):
        affiliation = self.get_affiliation()
        serializer.save(
            account=self.request.user,
            church=affiliation.church if affiliation else None,
        )


class MemberPrayerRequestViewSet(MemberPortalMixin, viewsets.ModelViewSet):
    """Prayer requests of the signed-in member, sent to the current ministry."""

    serializer_class = MemberPrayerRequestSerializer
    filter_backends = []

    def get_queryset(self):
        return MemberPrayerRequest.objects.filter(account=self.request.user).select_related('church')

    def perform_create(self, serializer):
        affiliation = self.get_affiliation()
        if affiliation is None:
            raise ValidationError({'detail': 'Join a ministry before sending a prayer request.'})
        serializer.save(account=self.request.user, church=affiliation.church)


# =============================================================================
# STAFF
# =============================================================================

class MemberAccountViewSet(mixins.ListModelMixin,
                           mixins.RetrieveModelMixin,
                           viewsets.GenericViewSet):
    """
    Portal accounts of people affiliated with the caller's church.

    Staff can resend a claim link or suspend and reactivate an account.
    """

    serializer_class = MemberAccountSerializer
    permission_classes = [IsMinistryStaff | IsPlatformAdmin]
    filterset_fields = ['status']
    search_fields = ['person__email', 'person__first_name', 'person__last_name']
    ordering_fields = ['created_at', 'last_login']
    ordering = ['-created_at']

    def get_church(self):
        return get_user_church(self.request.user)

    def get_queryset(self):
        queryset = MemberAccount.objects.select_related('person').prefetch_related(
            'person__affiliations__church',
        )
        if is_platform_admin(self.request.user):
            church_id = church_query_param(self.request)
            if church_id:
                queryset = queryset.filter(person__affiliations__church_id=church_id)
            return queryset.distinct()
        church = self.get_church()
        if church is None:
            return queryset.none()
        return queryset.filter(person__affiliations__church=church).distinct()

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['church'] = self.get_church()
        return context

    @action(detail=True, methods=['post'], url_path='resend-claim')
    def resend_claim(self, request, pk=None):
        account = self.get_object()
        try:
            MemberAccountService.resend_claim(account, church=self.get_church())
        except ValueError as e:
            return Response({'detail': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({'detail': f'A new setup link was sent to {account.person.email}.'})

    @action(detail=True, methods=['post', 'patch'], url_path='set-status')
    def set_status(self, request, pk=None):
        account = self.get_object()
        serializer = MemberAccountStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        old_status = account.status
        try:
            MemberAccountService.set_status(account, serializer.validated_data['status'])
        except ValueError as e:
            return Response({'detail': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        AuditService.log(
            request.user,
            AuditAction.STATUS_CHANGE,
            account,
            changes={'status': {'old': old_status, 'new': account.status}},
            request=request,
        )
        return Response(self.get_serializer(account).data)


class StaffMemberPrayerRequestViewSet(ChurchScopedMixin,
                                      mixins.ListModelMixin,
                                      mixins.RetrieveModelMixin,
                                      mixins.UpdateModelMixin,
                                      viewsets.GenericViewSet):
    """Portal prayer requests shared with the church. Staff update their status."""

    serializer_class = StaffMemberPrayerRequestSerializer
    permission_classes = [IsMinistryStaff | IsPlatformAdmin]
    filterset_fields = ['status', 'category']
    ordering = ['-created_at']
    queryset = MemberPrayerRequest.objects.filter(is_private=False).select_related('account__person')
