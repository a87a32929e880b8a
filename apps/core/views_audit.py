"""API views for audit trails."""
from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated

from apps.core.mixins import ChurchScopedMixin
from apps.core.permissions import IsMinistryAdmin, IsPlatformAdmin
from .audit import AuditLog, LoginAudit
from .serializers_audit import AuditLogSerializer, LoginAuditSerializer


class LoginAuditViewSet(viewsets.ReadOnlyModelViewSet):
    """Staff login attempts (platform admin only)."""
    serializer_class = LoginAuditSerializer
    permission_classes = [IsAuthenticated, IsPlatformAdmin]
    queryset = LoginAudit.objects.select_related('user')
    filterset_fields = ['success']
    search_fields = ['email_attempted', 'ip_address']
    ordering_fields = ['created_at']


class AuditLogViewSet(ChurchScopedMixin, viewsets.ReadOnlyModelViewSet):
    """
    Data change history.

    Platform admins see everything; ministry admins see their own ministry.
    """
    serializer_class = AuditLogSerializer
    permission_classes = [IsAuthenticated, IsPlatformAdmin | IsMinistryAdmin]
    queryset = AuditLog.objects.select_related('user', 'church')
    filterset_fields = ['action', 'entity_type', 'entity_id']
    search_fields = ['object_repr', 'entity_type', 'user__email']
    ordering_fields = ['created_at', 'action']
