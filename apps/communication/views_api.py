"""Communication API Views."""
import logging

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.constants import AnnouncementStatus
from apps.core.mixins import ChurchScopedMixin, SetChurchOnCreateMixin
from apps.core.permissions import IsMinistryAdmin, IsMinistryStaff, get_user_church
from apps.core.services_audit import AuditService

from .models import MessagingAutomation, ScheduledAnnouncement, SMSMessage
from .serializers import (
    MessagingAutomationSerializer, ScheduledAnnouncementSerializer, SMSMessageSerializer,
    SmsUsageSerializer,
)
from .services_announcements import AnnouncementService
from .services_sms import SMSQuotaService

logger = logging.getLogger(__name__)


# ─── Announcements ───────────────────────────────────────────────────────────────


class ScheduledAnnouncementViewSet(ChurchScopedMixin, SetChurchOnCreateMixin, viewsets.ModelViewSet):
    """
    Announcements of the caller's church.

    Only SCHEDULED announcements can be edited, cancelled or sent early.
    """
    queryset = ScheduledAnnouncement.objects.select_related('created_by')
    serializer_class = ScheduledAnnouncementSerializer
    permission_classes = [IsMinistryStaff]
    filterset_fields = ['status']
    search_fields = ['subject', 'message']
    ordering_fields = ['scheduled_at', 'created_at']
    ordering = ['-scheduled_at']

    def perform_create(self, serializer):
        super().perform_create(serializer)
        AuditService.log_create(self.request, serializer.instance)

    def perform_update(self, serializer):
        old_data = AuditService.snapshot(serializer.instance)
        serializer.save()
        AuditService.log_update(self.request, serializer.instance, old_data)

    def perform_destroy(self, instance):
        AuditService.log_delete(self.request, instance)
        instance.delete()

    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        announcement = self.get_object()
        try:
            AnnouncementService.cancel(announcement)
        except ValueError as e:
            return Response({'detail': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(self.get_serializer(announcement).data)

    @action(detail=True, methods=['post'], url_path='send-now')
    def send_now(self, request, pk=None):
        announcement = self.get_object()
        if announcement.status != AnnouncementStatus.SCHEDULED:
            return Response(
                {'detail': 'Only scheduled announcements can be sent.'},
                status=status.HTTP_400_BAD_REQUEST,
            )
        AnnouncementService.send(announcement)
        return Response(self.get_serializer(announcement).data)


# ─── SMS ─────────────────────────────────────────────────────────────────────────


class SMSMessageViewSet(ChurchScopedMixin,
                        mixins.ListModelMixin,
                        mixins.RetrieveModelMixin,
                        viewsets.GenericViewSet):
    """Log of SMS and MMS sent for the caller's church."""
    queryset = SMSMessage.objects.all()
    serializer_class = SMSMessageSerializer
    permission_classes = [IsMinistryStaff]
    filterset_fields = ['status', 'kind']
    search_fields = ['phone_number', 'body']
    ordering = ['-created_at']


class SmsUsageViewSet(viewsets.ViewSet):
    permission_classes = [IsMinistryStaff]

    def list(self, request):
        church = get_user_church(request.user)
        return Response(SmsUsageSerializer(SMSQuotaService.summary(church)).data)


# ─── Automation ──────────────────────────────────────────────────────────────────


class MessagingAutomationViewSet(viewsets.ViewSet):
    """Reminder settings of the caller's church; created with defaults on first read."""
    permission_classes = [IsMinistryAdmin]

    def _get_settings(self, request):
        automation, _ = MessagingAutomation.objects.get_or_create(church=get_user_church(request.user))
        return automation

    @action(detail=False, methods=['get', 'put', 'patch'])
    def current(self, request):
        automation = self._get_settings(request)
        if request.method == 'GET':
            return Response(MessagingAutomationSerializer(automation).data)

        serializer = MessagingAutomationSerializer(
            automation, data=request.data, partial=request.method == 'PATCH',
        )
        serializer.is_valid(raise_exception=True)
        old_data = AuditService.snapshot(automation)
        serializer.save()
        AuditService.log_update(request, automation, old_data)
        logger.info(f'Messaging automation updated for {automation.church}')
        return Response(serializer.data)
