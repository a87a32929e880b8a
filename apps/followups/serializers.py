"""
Follow-up serializers - DRF serializers for tracked people and check-ins.

Serializers:
- ConvertSerializer / NewMemberSerializer / MemberSerializer / GuestSerializer
- *CheckinSerializer: check-in rows per category
- CheckinCreateSerializer, CompleteCheckinSerializer, ScheduleFollowUpSerializer
- MassFollowUpCandidatesSerializer, MassFollowUpSerializer
- UpcomingFollowUpSerializer: due and upcoming follow-ups
- Public*Serializer: public form submissions
- PrayerRequestSerializer, ContactRequestSerializer
"""
from django.utils import timezone
from rest_framework import serializers

from apps.core.constants import (
    CheckinOutcome, DisplayStatus, FollowUpStatus, NotificationMethod, PersonCategory,
)

from .models import (
    ContactRequest, Convert, ConvertCheckin, Guest, GuestCheckin, Member, MemberCheckin,
    NewMember, NewMemberCheckin, PrayerRequest,
)


PERSON_FIELDS = [
    'id',
    'church',
    'first_name',
    'last_name',
    'full_name',
    'phone',
    'email',
    'date_of_birth',
    'country',
    'gender',
    'age_group',
    'address',
    'notes',
    'status',
    'display_status',
    'self_submitted',
    'created_by',
    'created_at',
    'updated_at',
]

PERSON_READ_ONLY = ['self_submitted', 'created_by', 'created_at', 'updated_at']

# Ministry staff never send a church; platform admins must
PERSON_EXTRA_KWARGS = {'church': {'required': False}}

STATUS_INPUT_CHOICES = FollowUpStatus.VALUES + [DisplayStatus.COMPLETED, DisplayStatus.NOT_CONNECTED]


# =============================================================================
# PERSON SERIALIZERS
# =============================================================================

class TrackedPersonSerializer(serializers.ModelSerializer):
    """
    Shared behaviour of the four person serializers.

    `status` accepts a stored status or a display bucket; buckets are
    stored as their canonical status. The church cannot change once set.
    """

    full_name = serializers.CharField(read_only=True)
    display_status = serializers.CharField(read_only=True)
    status = serializers.ChoiceField(choices=STATUS_INPUT_CHOICES, required=False)

    def validate_status(self, value):
        return DisplayStatus.to_stored(value)

    def update(self, instance, validated_data):
        validated_data.pop('church', None)
        return super().update(instance, validated_data)


class ConvertSerializer(TrackedPersonSerializer):
    class Meta:
        model = Convert
        fields = PERSON_FIELDS + [
            'salvation_decision',
            'summary_notes',
            'wants_contact',
            'is_church_member',
            'prayer_request',
        ]
        read_only_fields = PERSON_READ_ONLY
        extra_kwargs = PERSON_EXTRA_KWARGS


class NewMemberSerializer(TrackedPersonSerializer):
    follow_up_stage_display = serializers.CharField(
        source='get_follow_up_stage_display', read_only=True
    )

    class Meta:
        model = NewMember
        fields = PERSON_FIELDS + [
            'follow_up_stage',
            'follow_up_stage_display',
            'stage_updated_at',
        ]
        read_only_fields = PERSON_READ_ONLY + ['stage_updated_at']
        extra_kwargs = PERSON_EXTRA_KWARGS


class MemberSerializer(TrackedPersonSerializer):
    class Meta:
        model = Member
        fields = PERSON_FIELDS + ['member_since']
        read_only_fields = PERSON_READ_ONLY
        extra_kwargs = PERSON_EXTRA_KWARGS


class GuestSerializer(TrackedPersonSerializer):
    class Meta:
        model = Guest
        fields = PERSON_FIELDS + ['visit_date']
        read_only_fields = PERSON_READ_ONLY
        extra_kwargs = PERSON_EXTRA_KWARGS


PERSON_SERIALIZERS = {
    PersonCategory.CONVERTS: ConvertSerializer,
    PersonCategory.NEW_MEMBERS: NewMemberSerializer,
    PersonCategory.MEMBERS: MemberSerializer,
    PersonCategory.GUESTS: GuestSerializer,
}


# =============================================================================
# CHECK-IN SERIALIZERS
# =============================================================================

CHECKIN_FIELDS = [
    'id',
    'church',
    'checkin_date',
    'notes',
    'outcome',
    'outcome_display',
    'next_followup_date',
    'next_followup_time',
    'video_link',
    'notification_method',
    'custom_reminder_subject',
    'custom_reminder_message',
    'completed_at',
    'is_scheduled',
    'created_by',
    'created_by_name',
    'created_at',
]


class CheckinSerializer(serializers.ModelSerializer):
    outcome_display = serializers.CharField(source='get_outcome_display', read_only=True)
    is_scheduled = serializers.BooleanField(read_only=True)
    created_by_name = serializers.SerializerMethodField()

    def get_created_by_name(self, obj):
        if obj.created_by is None:
            return ''
        return obj.created_by.get_full_name() or obj.created_by.email


class ConvertCheckinSerializer(CheckinSerializer):
    person_name = serializers.CharField(source='convert.full_name', read_only=True)

    class Meta:
        model = ConvertCheckin
        fields = CHECKIN_FIELDS + ['convert', 'person_name']
        read_only_fields = fields


class NewMemberCheckinSerializer(CheckinSerializer):
    person_name = serializers.CharField(source='new_member.full_name', read_only=True)

    class Meta:
        model = NewMemberCheckin
        fields = CHECKIN_FIELDS + ['new_member', 'person_name']
        read_only_fields = fields


class MemberCheckinSerializer(CheckinSerializer):
    person_name = serializers.CharField(source='member.full_name', read_only=True)

    class Meta:
        model = MemberCheckin
        fields = CHECKIN_FIELDS + ['member', 'person_name']
        read_only_fields = fields


class GuestCheckinSerializer(CheckinSerializer):
    person_name = serializers.CharField(source='guest.full_name', read_only=True)

    class Meta:
        model = GuestCheckin
        fields = CHECKIN_FIELDS + ['guest', 'person_name']
        read_only_fields = fields


CHECKIN_SERIALIZERS = {
    PersonCategory.CONVERTS: ConvertCheckinSerializer,
    PersonCategory.NEW_MEMBERS: NewMemberCheckinSerializer,
    PersonCategory.MEMBERS: MemberCheckinSerializer,
    PersonCategory.GUESTS: GuestCheckinSerializer,
}


class CheckinCreateSerializer(serializers.Serializer):
    """Payload for recording a contact."""

    checkin_date = serializers.DateField(required=False)
    outcome = serializers.ChoiceField(choices=CheckinOutcome.CHOICES)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    next_followup_date = serializers.DateField(required=False, allow_null=True)
    next_followup_time = serializers.TimeField(required=False, allow_null=True)
    notification_method = serializers.ChoiceField(
        choices=NotificationMethod.CHOICES, default=NotificationMethod.EMAIL
    )


class CompleteCheckinSerializer(serializers.Serializer):
    outcome = serializers.ChoiceField(choices=CheckinOutcome.CHOICES)
    notes = serializers.CharField(required=False, allow_blank=True)

    def validate_outcome(self, value):
        if value == CheckinOutcome.SCHEDULED_VISIT:
            raise serializers.ValidationError('Choose the outcome of the follow-up.')
        return value


class ScheduleFollowUpSerializer(serializers.Serializer):
    """Payload for scheduling the next follow-up with one person."""

    followup_date = serializers.DateField()
    followup_time = serializers.TimeField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    notification_method = serializers.ChoiceField(
        choices=NotificationMethod.CHOICES, default=NotificationMethod.EMAIL
    )
    include_video_link = serializers.BooleanField(default=False)
    custom_leader_subject = serializers.CharField(required=False, allow_blank=True, default='', max_length=200)
    custom_leader_message = serializers.CharField(required=False, allow_blank=True, default='')
    custom_person_subject = serializers.CharField(required=False, allow_blank=True, default='', max_length=200)
    custom_person_message = serializers.CharField(required=False, allow_blank=True, default='')
    media_url = serializers.URLField(required=False, allow_blank=True, default='')

    def validate_followup_date(self, value):
        if value < timezone.localdate():
            raise serializers.ValidationError('Follow-up date cannot be in the past.')
        return value


class MassFollowUpCandidatesSerializer(serializers.Serializer):
    category = serializers.ChoiceField(choices=PersonCategory.CHOICES)
    date_from = serializers.DateField(required=False, allow_null=True)
    date_to = serializers.DateField(required=False, allow_null=True)

    def validate(self, attrs):
        date_from, date_to = attrs.get('date_from'), attrs.get('date_to')
        if date_from and date_to and date_from > date_to:
            raise serializers.ValidationError({'date_to': 'End date must be after start date.'})
        return attrs


class MassFollowUpSerializer(ScheduleFollowUpSerializer):
    category = serializers.ChoiceField(choices=PersonCategory.CHOICES)
    person_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)
    include_video_link = serializers.BooleanField(default=True)
    custom_subject = serializers.CharField(required=False, allow_blank=True, default='', max_length=200)
    custom_message = serializers.CharField(required=False, allow_blank=True, default='')


class CandidateSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    full_name = serializers.CharField()
    email = serializers.EmailField()
    phone = serializers.CharField()
    status = serializers.CharField()
    display_status = serializers.CharField()
    created_at = serializers.DateTimeField()


class UpcomingFollowUpSerializer(serializers.Serializer):
    """Serializes the dicts built by FollowUpService.upcoming_followups."""

    id = serializers.UUIDField(source='checkin.pk')
    category = serializers.CharField()
    person_id = serializers.UUIDField(source='person.pk')
    person_name = serializers.CharField(source='person.full_name')
    person_email = serializers.CharField(source='person.email')
    person_phone = serializers.CharField(source='person.phone')
    next_followup_date = serializers.DateField(source='checkin.next_followup_date')
    next_followup_time = serializers.TimeField(source='checkin.next_followup_time', allow_null=True)
    notes = serializers.CharField(source='checkin.notes')
    video_link = serializers.CharField(source='checkin.video_link')
    notification_method = serializers.CharField(source='checkin.notification_method')
    overdue = serializers.BooleanField()


# =============================================================================
# PUBLIC FORM SERIALIZERS
# =============================================================================

PUBLIC_PERSON_FIELDS = [
    'first_name',
    'last_name',
    'phone',
    'email',
    'date_of_birth',
    'country',
    'gender',
    'age_group',
    'address',
]


class PublicConvertSerializer(serializers.ModelSerializer):
    class Meta:
        model = Convert
        fields = PUBLIC_PERSON_FIELDS + [
            'salvation_decision',
            'wants_contact',
            'is_church_member',
            'prayer_request',
        ]


class PublicNewMemberSerializer(serializers.ModelSerializer):
    class Meta:
        model = NewMember
        fields = PUBLIC_PERSON_FIELDS + ['notes']


class PublicMemberSerializer(serializers.ModelSerializer):
    class Meta:
        model = Member
        fields = PUBLIC_PERSON_FIELDS + ['member_since', 'notes']


# =============================================================================
# PRAYER / CONTACT REQUESTS
# =============================================================================

class PrayerRequestSerializer(serializers.ModelSerializer):
    church_name = serializers.CharField(source='church.name', read_only=True, default='')

    class Meta:
        model = PrayerRequest
        fields = [
            'id',
            'church',
            'church_name',
            'name',
            'phone',
            'email',
            'message',
            'church_preference',
            'created_at',
        ]
        read_only_fields = ['created_at']


class ContactRequestSerializer(serializers.ModelSerializer):
    status_display = serializers.CharField(source='get_status_display', read_only=True)

    class Meta:
        model = ContactRequest
        fields = [
            'id',
            'church',
            'name',
            'email',
            'phone',
            'subject',
            'message',
            'status',
            'status_display',
            'handled_by',
            'created_at',
        ]
        read_only_fields = [
            'church', 'name', 'email', 'phone', 'subject', 'message',
            'handled_by', 'created_at',
        ]


class PublicContactRequestSerializer(serializers.ModelSerializer):
    class Meta:
        model = ContactRequest
        fields = ['church', 'name', 'email', 'phone', 'subject', 'message']
