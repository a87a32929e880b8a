"""Communication serializers."""
import bleach
from django.utils import timezone
from rest_framework import serializers

from apps.core.constants import AnnouncementStatus, PersonCategory

from .models import MessagingAutomation, ScheduledAnnouncement, SMSMessage


def strip_html(value):
    """Announcements are plain text; drop any markup."""
    return bleach.clean(value or '', tags=set(), attributes={}, strip=True).strip()


# ─── Announcements ───────────────────────────────────────────────────────────────


class ScheduledAnnouncementSerializer(serializers.ModelSerializer):
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    created_by_name = serializers.CharField(source='created_by.get_full_name', read_only=True, allow_null=True)
    recipient_groups = serializers.ListField(
        child=serializers.ChoiceField(choices=PersonCategory.CHOICES),
        allow_empty=False,
    )

    class Meta:
        model = ScheduledAnnouncement
        fields = [
            'id',
            'subject',
            'message',
            'recipient_groups',
            'send_email',
            'send_sms',
            'scheduled_at',
            'status',
            'status_display',
            'sent_at',
            'email_count',
            'sms_count',
            'error_message',
            'created_by_name',
            'created_at',
        ]
        read_only_fields = [
            'status', 'sent_at', 'email_count', 'sms_count', 'error_message', 'created_at',
        ]

    def validate_subject(self, value):
        return strip_html(value)

    def validate_message(self, value):
        value = strip_html(value)
        if not value:
            raise serializers.ValidationError('Message cannot be empty.')
        return value

    def validate_recipient_groups(self, value):
        return list(dict.fromkeys(value))

    def validate(self, attrs):
        send_email = attrs.get('send_email', getattr(self.instance, 'send_email', True))
        send_sms = attrs.get('send_sms', getattr(self.instance, 'send_sms', False))
        if not send_email and not send_sms:
            raise serializers.ValidationError('Choose email, SMS or both.')

        if self.instance is not None and self.instance.status != AnnouncementStatus.SCHEDULED:
            raise serializers.ValidationError('Only scheduled announcements can be edited.')

        scheduled_at = attrs.get('scheduled_at')
        if scheduled_at is not None and self.instance is None and scheduled_at < timezone.now():
            raise serializers.ValidationError({'scheduled_at': 'Scheduled time must be in the future.'})
        return attrs


# ─── SMS ─────────────────────────────────────────────────────────────────────────


class SMSMessageSerializer(serializers.ModelSerializer):
    status_display = serializers.CharField(source='get_status_display', read_only=True)

    class Meta:
        model = SMSMessage
        fields = [
            'id', 'kind', 'phone_number', 'body', 'status', 'status_display',
            'error_message', 'sent_at', 'created_at',
        ]
        read_only_fields = fields


class SmsUsageSerializer(serializers.Serializer):
    billing_period = serializers.CharField()
    plan = serializers.CharField()
    sms_used = serializers.IntegerField()
    sms_limit = serializers.IntegerField()
    mms_used = serializers.IntegerField()
    mms_limit = serializers.IntegerField()


# ─── Automation ──────────────────────────────────────────────────────────────────


class MessagingAutomationSerializer(serializers.ModelSerializer):
    class Meta:
        model = MessagingAutomation
        fields = [
            'day_before_reminders_enabled',
            'notify_leader',
            'default_notification_method',
            'reminder_subject',
            'reminder_message',
            'updated_at',
        ]
        read_only_fields = ['updated_at']
