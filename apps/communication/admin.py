"""Communication admin."""
from django.contrib import admin

from apps.core.admin import BaseModelAdmin

from .models import MessagingAutomation, ReminderLog, ScheduledAnnouncement, SMSMessage, SmsUsage


# ─── SMS ─────────────────────────────────────────────────────────────────────────


@admin.register(SMSMessage)
class SMSMessageAdmin(BaseModelAdmin):
    list_display = ['phone_number', 'church', 'kind', 'status', 'sent_at', 'created_at']
    list_filter = ['status', 'kind']
    search_fields = ['phone_number', 'body', 'twilio_sid']
    raw_id_fields = ['church', 'sent_by']


@admin.register(SmsUsage)
class SmsUsageAdmin(BaseModelAdmin):
    list_display = ['church', 'billing_period', 'sms_count', 'mms_count']
    list_filter = ['billing_period']
    search_fields = ['church__name']


# ─── Automation ──────────────────────────────────────────────────────────────────


@admin.register(MessagingAutomation)
class MessagingAutomationAdmin(BaseModelAdmin):
    list_display = ['church', 'day_before_reminders_enabled', 'notify_leader', 'default_notification_method']
    list_filter = ['day_before_reminders_enabled']
    raw_id_fields = ['church']


@admin.register(ReminderLog)
class ReminderLogAdmin(BaseModelAdmin):
    list_display = ['reminder_type', 'entity_type', 'entity_id', 'church', 'sent_at']
    list_filter = ['reminder_type', 'entity_type']
    search_fields = ['entity_id']


# ─── Announcements ───────────────────────────────────────────────────────────────


@admin.register(ScheduledAnnouncement)
class ScheduledAnnouncementAdmin(BaseModelAdmin):
    list_display = ['subject', 'church', 'status', 'scheduled_at', 'sent_at', 'email_count', 'sms_count']
    list_filter = ['status', 'send_email', 'send_sms']
    search_fields = ['subject', 'message', 'church__name']
    raw_id_fields = ['church', 'created_by']
