"""Communication models."""
from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.models import BaseModel
from apps.core.constants import (
    AnnouncementStatus, MessageKind, NotificationMethod, ReminderType, SMSStatus,
)


# ─── SMS / MMS ──────────────────────────────────────────────────────────────────


class SMSMessage(BaseModel):
    """Individual SMS or MMS sent on behalf of a church."""
    church = models.ForeignKey(
        'ministries.Church', on_delete=models.CASCADE,
        related_name='sms_messages', verbose_name=_('Church'),
    )
    kind = models.CharField(max_length=5, choices=MessageKind.choices, default=MessageKind.SMS, verbose_name=_('Kind'))
    phone_number = models.CharField(max_length=20, verbose_name=_('Phone number'))
    body = models.TextField(verbose_name=_('Message'))
    media_url = models.URLField(blank=True, verbose_name=_('Media URL'))
    status = models.CharField(
        max_length=20, choices=SMSStatus.choices, default=SMSStatus.PENDING,
        verbose_name=_('Status'),
    )
    twilio_sid = models.CharField(max_length=50, blank=True, verbose_name=_('Twilio SID'))
    error_message = models.TextField(blank=True, verbose_name=_('Error'))
    sent_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Sent at'))
    sent_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='sent_sms', verbose_name=_('Sent by'),
    )

    class Meta:
        verbose_name = _('SMS message')
        verbose_name_plural = _('SMS messages')
        ordering = ['-created_at']

    def __str__(self):
        return f'{self.get_kind_display()} -> {self.phone_number} ({self.get_status_display()})'


class SmsUsage(BaseModel):
    """Messages sent by a church in one billing period (YYYY-MM)."""
    church = models.ForeignKey(
        'ministries.Church', on_delete=models.CASCADE,
        related_name='sms_usage', verbose_name=_('Church'),
    )
    billing_period = models.CharField(max_length=7, verbose_name=_('Billing period'))
    sms_count = models.PositiveIntegerField(default=0, verbose_name=_('SMS sent'))
    mms_count = models.PositiveIntegerField(default=0, verbose_name=_('MMS sent'))

    class Meta:
        verbose_name = _('SMS usage')
        verbose_name_plural = _('SMS usage')
        ordering = ['-billing_period']
        unique_together = ['church', 'billing_period']

    def __str__(self):
        return f'{self.church} {self.billing_period}: {self.sms_count} SMS / {self.mms_count} MMS'


# ─── Automation ─────────────────────────────────────────────────────────────────


class MessagingAutomation(BaseModel):
    """Per-church settings for automatic follow-up reminders."""
    church = models.OneToOneField(
        'ministries.Church', on_delete=models.CASCADE,
        related_name='messaging_automation', verbose_name=_('Church'),
    )
    day_before_reminders_enabled = models.BooleanField(default=True, verbose_name=_('Day-before reminders'))
    notify_leader = models.BooleanField(default=True, verbose_name=_('Also remind the leader'))
    default_notification_method = models.CharField(
        max_length=20, choices=NotificationMethod.CHOICES, default=NotificationMethod.EMAIL,
        verbose_name=_('Default notification method'),
    )
    reminder_subject = models.CharField(max_length=200, blank=True, verbose_name=_('Reminder subject'))
    reminder_message = models.TextField(
        blank=True, verbose_name=_('Reminder message'),
        help_text=_('Overrides the default reminder text when set'),
    )

    class Meta:
        verbose_name = _('Messaging automation')
        verbose_name_plural = _('Messaging automation')

    def __str__(self):
        return f'Automation for {self.church}'


class ReminderLog(BaseModel):
    """One row per reminder sent, so periodic jobs never send twice."""
    church = models.ForeignKey(
        'ministries.Church', on_delete=models.CASCADE,
        related_name='reminder_logs', verbose_name=_('Church'),
    )
    entity_type = models.CharField(max_length=30, verbose_name=_('Entity type'))
    entity_id = models.CharField(max_length=64, verbose_name=_('Entity ID'))
    reminder_type = models.CharField(
        max_length=20, choices=ReminderType.choices, default=ReminderType.DAY_BEFORE,
        verbose_name=_('Reminder type'),
    )
    sent_at = models.DateTimeField(auto_now_add=True, verbose_name=_('Sent at'))

    class Meta:
        verbose_name = _('Reminder log')
        verbose_name_plural = _('Reminder logs')
        ordering = ['-sent_at']
        unique_together = ['entity_type', 'entity_id', 'reminder_type']

    def __str__(self):
        return f'{self.reminder_type} {self.entity_type}:{self.entity_id}'


# ─── Announcements ──────────────────────────────────────────────────────────────


class ScheduledAnnouncement(BaseModel):
    """Broadcast to one or more person categories of a church at a set time."""
    church = models.ForeignKey(
        'ministries.Church', on_delete=models.CASCADE,
        related_name='announcements', verbose_name=_('Church'),
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='announcements', verbose_name=_('Created by'),
    )
    subject = models.CharField(max_length=200, verbose_name=_('Subject'))
    message = models.TextField(verbose_name=_('Message'))
    recipient_groups = models.JSONField(
        default=list, verbose_name=_('Recipient groups'),
        help_text=_('Any of converts, new_members, members, guests'),
    )
    send_email = models.BooleanField(default=True, verbose_name=_('Send email'))
    send_sms = models.BooleanField(default=False, verbose_name=_('Send SMS'))
    scheduled_at = models.DateTimeField(verbose_name=_('Scheduled at'))
    status = models.CharField(
        max_length=20, choices=AnnouncementStatus.choices, default=AnnouncementStatus.SCHEDULED,
        verbose_name=_('Status'),
    )
    sent_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Sent at'))
    email_count = models.PositiveIntegerField(default=0, verbose_name=_('Emails sent'))
    sms_count = models.PositiveIntegerField(default=0, verbose_name=_('SMS sent'))
    error_message = models.TextField(blank=True, verbose_name=_('Error'))

    class Meta:
        verbose_name = _('Scheduled announcement')
        verbose_name_plural = _('Scheduled announcements')
        ordering = ['-scheduled_at']

    def __str__(self):
        return f'{self.subject} ({self.get_status_display()})'
