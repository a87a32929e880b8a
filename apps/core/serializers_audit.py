"""Serializers for audit models."""
from rest_framework import serializers

from .audit import AuditLog, LoginAudit


class LoginAuditSerializer(serializers.ModelSerializer):
    user_email = serializers.CharField(source='user.email', read_only=True, default='')

    class Meta:
        model = LoginAudit
        fields = [
            'id', 'user', 'user_email', 'email_attempted',
            'ip_address', 'user_agent', 'success', 'failure_reason',
            'created_at',
        ]


class AuditLogSerializer(serializers.ModelSerializer):
    user_email = serializers.CharField(source='user.email', read_only=True, default='')
    church_name = serializers.CharField(source='church.name', read_only=True, default='')
    action_display = serializers.CharField(source='get_action_display', read_only=True)

    class Meta:
        model = AuditLog
        fields = [
            'id', 'user', 'user_email', 'church', 'church_name',
            'action', 'action_display', 'entity_type', 'entity_id',
            'object_repr', 'changes', 'ip_address', 'created_at',
        ]
