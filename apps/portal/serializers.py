"""
Portal serializers - member sign-in, profile, journal and prayer requests.

Serializers:
- MemberLoginSerializer, ClaimSerializer, SwitchMinistrySerializer
- AffiliationSerializer, UpcomingCheckinSerializer
- JournalEntrySerializer, MemberPrayerRequestSerializer
- MemberAccountSerializer: staff view of portal accounts
- StaffMemberPrayerRequestSerializer: shared requests seen by ministry staff
"""
from rest_framework import serializers

from apps.core.constants import MemberAccountStatus, PrayerRequestStatus

from .models import JournalEntry, MemberAccount, MemberPrayerRequest, MinistryAffiliation
from .services import MIN_PASSWORD_LENGTH


# =============================================================================
# SIGN-IN
# =============================================================================

class MemberLoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(trim_whitespace=False)


class ClaimSerializer(serializers.Serializer):
    token = serializers.CharField()
    password = serializers.CharField(min_length=MIN_PASSWORD_LENGTH, trim_whitespace=False)


class SwitchMinistrySerializer(serializers.Serializer):
    ministry_id = serializers.UUIDField()


# =============================================================================
# PROFILE & JOURNEY
# =============================================================================

class AffiliationSerializer(serializers.ModelSerializer):
    ministry_id = serializers.UUIDField(source='church_id', read_only=True)
    ministry_name = serializers.CharField(source='church.name', read_only=True)

    class Meta:
        model = MinistryAffiliation
        fields = ['id', 'ministry_id', 'ministry_name', 'relationship_type', 'created_at']
        read_only_fields = fields


class UpcomingCheckinSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    scheduled_date = serializers.DateField(source='checkin_date')
    next_followup_date = serializers.DateField()
    next_followup_time = serializers.TimeField(allow_null=True)
    video_link = serializers.CharField()
    completed_at = serializers.DateTimeField(allow_null=True)


# =============================================================================
# JOURNAL & PRAYER
# =============================================================================

class JournalEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = JournalEntry
        fields = [
            'id',
            'title',
            'content',
            'is_private',
            'share_with_ministry',
            'church',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['church', 'created_at', 'updated_at']


class MemberPrayerRequestSerializer(serializers.ModelSerializer):
    status_display = serializers.CharField(source='get_status_display', read_only=True)

    class Meta:
        model = MemberPrayerRequest
        fields = [
            'id',
            'request_text',
            'category',
            'is_private',
            'status',
            'status_display',
            'church',
            'created_at',
        ]
        read_only_fields = ['status', 'church', 'created_at']


# =============================================================================
# STAFF VIEWS
# =============================================================================

class MemberAccountSerializer(serializers.ModelSerializer):
    person_id = serializers.UUIDField(source='person.pk', read_only=True)
    first_name = serializers.CharField(source='person.first_name', read_only=True)
    last_name = serializers.CharField(source='person.last_name', read_only=True)
    email = serializers.EmailField(source='person.email', read_only=True)
    phone = serializers.CharField(source='person.phone', read_only=True)
    affiliations = serializers.SerializerMethodField()

    class Meta:
        model = MemberAccount
        fields = [
            'id',
            'person_id',
            'first_name',
            'last_name',
            'email',
            'phone',
            'status',
            'last_login',
            'affiliations',
            'created_at',
        ]
        read_only_fields = fields

    def get_affiliations(self, obj):
        church = self.context.get('church')
        affiliations = obj.person.affiliations.all()
        if church is not None:
            affiliations = [a for a in affiliations if a.church_id == church.pk]
        return AffiliationSerializer(affiliations, many=True).data


class MemberAccountStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[MemberAccountStatus.ACTIVE, MemberAccountStatus.SUSPENDED])


class StaffMemberPrayerRequestSerializer(serializers.ModelSerializer):
    member_name = serializers.CharField(source='account.person.full_name', read_only=True)
    member_email = serializers.EmailField(source='account.person.email', read_only=True)
    status = serializers.ChoiceField(choices=PrayerRequestStatus.choices)

    class Meta:
        model = MemberPrayerRequest
        fields = [
            'id',
            'member_name',
            'member_email',
            'request_text',
            'category',
            'status',
            'created_at',
        ]
        read_only_fields = ['request_text', 'category', 'created_at']
