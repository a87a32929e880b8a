"""
Follow-up models: the four tracked person types and their check-ins.

Converts, new members, members and guests share one abstract shape and
each owns a check-in table. Every row carries its church.
"""
from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.constants import (
    AgeGroup, CheckinOutcome, ContactRequestStatus, DisplayStatus, FollowUpStatus,
    Gender, NewMemberStage, NotificationMethod, PersonCategory, SalvationDecision,
)
from apps.core.models import BaseModel


class TrackedPerson(BaseModel):
    """Abstract base for a person followed up by a church."""

    category = None

    church = models.ForeignKey(
        'ministries.Church',
        on_delete=models.CASCADE,
        related_name='%(class)ss',
        verbose_name=_('Church')
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_%(class)ss',
        verbose_name=_('Created by')
    )

    first_name = models.CharField(
        max_length=100,
        verbose_name=_('First name')
    )

    last_name = models.CharField(
        max_length=100,
        verbose_name=_('Last name')
    )

    phone = models.CharField(
        max_length=30,
        blank=True,
        verbose_name=_('Phone')
    )

    email = models.EmailField(
        blank=True,
        verbose_name=_('Email')
    )

    date_of_birth = models.DateField(
        null=True,
        blank=True,
        verbose_name=_('Date of birth')
    )

    country = models.CharField(
        max_length=100,
        blank=True,
        verbose_name=_('Country')
    )

    gender = models.CharField(
        max_length=10,
        choices=Gender.CHOICES,
        blank=True,
        verbose_name=_('Gender')
    )

    age_group = models.CharField(
        max_length=20,
        choices=AgeGroup.CHOICES,
        blank=True,
        verbose_name=_('Age group')
    )

    address = models.TextField(
        blank=True,
        verbose_name=_('Address')
    )

    notes = models.TextField(
        blank=True,
        verbose_name=_('Notes')
    )

    status = models.CharField(
        max_length=20,
        choices=FollowUpStatus.CHOICES,
        default=FollowUpStatus.NEW,
        verbose_name=_('Status')
    )

    self_submitted = models.BooleanField(
        default=False,
        verbose_name=_('Self submitted'),
        help_text=_('Registered through a public form')
    )

    class Meta:
        abstract = True
        ordering = ['-created_at']

    def __str__(self):
        return self.full_name

    @property
    def full_name(self):
        return f'{self.first_name} {self.last_name}'.strip()

    @property
    def display_status(self):
        return DisplayStatus.for_status(self.status)


class Convert(TrackedPerson):
    """Someone who made or renewed a faith decision."""

    category = PersonCategory.CONVERTS

    salvation_decision = models.CharField(
        max_length=100,
        choices=SalvationDecision.CHOICES,
        blank=True,
        verbose_name=_('Salvation decision')
    )

    summary_notes = models.TextField(
        blank=True,
        verbose_name=_('Summary notes')
    )

    wants_contact = models.BooleanField(
        null=True,
        blank=True,
        verbose_name=_('Wants to be contacted')
    )

    is_church_member = models.BooleanField(
        null=True,
        blank=True,
        verbose_name=_('Already a church member')
    )

    prayer_request = models.TextField(
        blank=True,
        verbose_name=_('Prayer request')
    )

    class Meta(TrackedPerson.Meta):
        verbose_name = _('Convert')
        verbose_name_plural = _('Converts')
        indexes = [
            models.Index(fields=['church', 'status']),
            models.Index(fields=['church', '-created_at']),
        ]


class NewMember(TrackedPerson):
    """A newcomer joining the church, followed up three times."""

    category = PersonCategory.NEW_MEMBERS

    follow_up_stage = models.CharField(
        max_length=30,
        choices=NewMemberStage.CHOICES,
        default=NewMemberStage.NEW,
        verbose_name=_('Follow-up stage')
    )

    stage_updated_at = models.DateTimeField(
        default=timezone.now,
        verbose_name=_('Stage updated at')
    )

    class Meta(TrackedPerson.Meta):
        verbose_name = _('New member')
        verbose_name_plural = _('New members')
        indexes = [
            models.Index(fields=['church', 'status']),
            models.Index(fields=['follow_up_stage', 'stage_updated_at']),
        ]

    def set_stage(self, stage):
        self.follow_up_stage = stage
        self.stage_updated_at = timezone.now()


class Member(TrackedPerson):
    """An established member of the church."""

    category = PersonCategory.MEMBERS

    member_since = models.DateField(
        null=True,
        blank=True,
        verbose_name=_('Member since')
    )

    class Meta(TrackedPerson.Meta):
        verbose_name = _('Member')
        verbose_name_plural = _('Members')
        indexes = [
            models.Index(fields=['church', 'status']),
        ]


class Guest(TrackedPerson):
    """A visitor."""

    category = PersonCategory.GUESTS

    visit_date = models.DateField(
        null=True,
        blank=True,
        verbose_name=_('Visit date')
    )

    class Meta(TrackedPerson.Meta):
        verbose_name = _('Guest')
        verbose_name_plural = _('Guests')
        indexes = [
            models.Index(fields=['church', 'status']),
        ]


class Checkin(BaseModel):
    """
    Abstract follow-up record.

    A check-in is either a completed contact (outcome set, no next date)
    or a scheduled one (next_followup_date set, outcome SCHEDULED_VISIT
    until completed).
    """

    church = models.ForeignKey(
        'ministries.Church',
        on_delete=models.CASCADE,
        related_name='%(class)ss',
        verbose_name=_('Church')
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='%(class)ss',
        verbose_name=_('Created by')
    )

    checkin_date = models.DateField(
        default=timezone.localdate,
        verbose_name=_('Check-in date')
    )

    notes = models.TextField(
        blank=True,
        verbose_name=_('Notes')
    )

    outcome = models.CharField(
        max_length=20,
        choices=CheckinOutcome.CHOICES,
        verbose_name=_('Outcome')
    )

    next_followup_date = models.DateField(
        null=True,
        blank=True,
        verbose_name=_('Next follow-up date')
    )

    next_followup_time = models.TimeField(
        null=True,
        blank=True,
        verbose_name=_('Next follow-up time')
    )

    video_link = models.URLField(
        blank=True,
        verbose_name=_('Video call link')
    )

    notification_method = models.CharField(
        max_length=20,
        choices=NotificationMethod.CHOICES,
        default=NotificationMethod.EMAIL,
        verbose_name=_('Notification method')
    )

    custom_reminder_subject = models.CharField(
        max_length=200,
        blank=True,
        verbose_name=_('Custom reminder subject')
    )

    custom_reminder_message = models.TextField(
        blank=True,
        verbose_name=_('Custom reminder message')
    )

    completed_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_('Completed at')
    )

    class Meta:
        abstract = True
        ordering = ['-checkin_date', '-created_at']

    @property
    def person(self):
        raise NotImplementedError

    @property
    def is_scheduled(self):
        return self.next_followup_date is not None and self.completed_at is None

    def __str__(self):
        return f'{self.person} - {self.checkin_date} ({self.get_outcome_display()})'


class ConvertCheckin(Checkin):
    convert = models.ForeignKey(
        Convert,
        on_delete=models.CASCADE,
        related_name='checkins',
        verbose_name=_('Convert')
    )

    class Meta(Checkin.Meta):
        verbose_name = _('Convert check-in')
        verbose_name_plural = _('Convert check-ins')

    @property
    def person(self):
        return self.convert


class NewMemberCheckin(Checkin):
    new_member = models.ForeignKey(
        NewMember,
        on_delete=models.CASCADE,
        related_name='checkins',
        verbose_name=_('New member')
    )

    class Meta(Checkin.Meta):
        verbose_name = _('New member check-in')
        verbose_name_plural = _('New member check-ins')

    @property
    def person(self):
        return self.new_member


class MemberCheckin(Checkin):
    member = models.ForeignKey(
        Member,
        on_delete=models.CASCADE,
        related_name='checkins',
        verbose_name=_('Member')
    )

    class Meta(Checkin.Meta):
        verbose_name = _('Member check-in')
        verbose_name_plural = _('Member check-ins')

    @property
    def person(self):
        return self.member


class GuestCheckin(Checkin):
    guest = models.ForeignKey(
        Guest,
        on_delete=models.CASCADE,
        related_name='checkins',
        verbose_name=_('Guest')
    )

    class Meta(Checkin.Meta):
        verbose_name = _('Guest check-in')
        verbose_name_plural = _('Guest check-ins')

    @property
    def person(self):
        return self.guest


class PrayerRequest(BaseModel):
    """Prayer request submitted from the public site."""

    church = models.ForeignKey(
        'ministries.Church',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='prayer_requests',
        verbose_name=_('Church')
    )

    name = models.CharField(
        max_length=200,
        verbose_name=_('Name')
    )

    phone = models.CharField(
        max_length=30,
        blank=True,
        verbose_name=_('Phone')
    )

    email = models.EmailField(
        blank=True,
        verbose_name=_('Email')
    )

    message = models.TextField(
        verbose_name=_('Message')
    )

    church_preference = models.CharField(
        max_length=200,
        blank=True,
        verbose_name=_('Church preference')
    )

    class Meta:
        verbose_name = _('Prayer request')
        verbose_name_plural = _('Prayer requests')
        ordering = ['-created_at']

    def __str__(self):
        return f'{self.name} ({self.created_at:%Y-%m-%d})' if self.created_at else self.name


class ContactRequest(BaseModel):
    """'Contact us' message addressed to a church."""

    church = models.ForeignKey(
        'ministries.Church',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='contact_requests',
        verbose_name=_('Church')
    )

    name = models.CharField(
        max_length=200,
        verbose_name=_('Name')
    )

    email = models.EmailField(
        verbose_name=_('Email')
    )

    phone = models.CharField(
        max_length=30,
        blank=True,
        verbose_name=_('Phone')
    )

    subject = models.CharField(
        max_length=200,
        blank=True,
        verbose_name=_('Subject')
    )

    message = models.TextField(
        verbose_name=_('Message')
    )

    status = models.CharField(
        max_length=20,
        choices=ContactRequestStatus.choices,
        default=ContactRequestStatus.NEW,
        verbose_name=_('Status')
    )

    handled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='handled_contact_requests',
        verbose_name=_('Handled by')
    )

    class Meta:
        verbose_name = _('Contact request')
        verbose_name_plural = _('Contact requests')
        ordering = ['-created_at']

    def __str__(self):
        return f'{self.name}: {self.subject or self.message[:40]}'
