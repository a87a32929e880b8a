"""
Ministries serializers - churches, sign-up requests and form settings.

Serializers:
- ChurchSerializer: platform admin view with leader/convert counts
- ChurchCreateSerializer: church created directly by a platform admin
- CurrentChurchSerializer: the caller's own church
- AccountRequestSerializer / PublicAccountRequestSerializer
- MinistryRequestSerializer / PublicMinistryRequestSerializer / MinistryApprovalSerializer
- FormConfigurationSerializer
"""
from rest_framework import serializers

from apps.core.constants import FormType, Plan

from .models import AccountRequest, Church, FormConfiguration, MinistryRequest
from .services import OPTIONAL_FIELDS


# =============================================================================
# CHURCHES
# =============================================================================

class ChurchSerializer(serializers.ModelSerializer):
    leader_count = serializers.IntegerField(read_only=True, default=0)
    convert_count = serializers.IntegerField(read_only=True, default=0)
    max_leaders = serializers.IntegerField(read_only=True)
    plan_display = serializers.CharField(source='get_plan_display', read_only=True)

    class Meta:
        model = Church
        fields = [
            'id',
            'name',
            'location',
            'logo',
            'public_token',
            'new_member_token',
            'member_token',
            'plan',
            'plan_display',
            'subscription_status',
            'max_leaders',
            'leader_count',
            'convert_count',
            'deleted_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = [
            'public_token', 'new_member_token', 'member_token',
            'subscription_status', 'deleted_at', 'created_at', 'updated_at',
        ]


class ChurchCreateSerializer(serializers.ModelSerializer):
    """A platform admin may attach a first ministry admin by email."""

    admin_email = serializers.EmailField(required=False, write_only=True)
    admin_first_name = serializers.CharField(required=False, allow_blank=True, default='', write_only=True)
    admin_last_name = serializers.CharField(required=False, allow_blank=True, default='', write_only=True)

    class Meta:
        model = Church
        fields = ['id', 'name', 'location', 'plan', 'admin_email', 'admin_first_name', 'admin_last_name']


class CurrentChurchSerializer(serializers.ModelSerializer):
    """The caller's own church. Ministry admins may edit name, location and logo."""

    plan_display = serializers.CharField(source='get_plan_display', read_only=True)
    max_leaders = serializers.IntegerField(read_only=True)
    forms = serializers.SerializerMethodField()

    class Meta:
        model = Church
        fields = [
            'id',
            'name',
            'location',
            'logo',
            'plan',
            'plan_display',
            'subscription_status',
            'max_leaders',
            'forms',
        ]
        read_only_fields = ['plan', 'subscription_status']

    def get_forms(self, obj):
        from .services import MinistryService
        return MinistryService.form_links(obj, self.context.get('request'))


# =============================================================================
# ACCOUNT REQUESTS
# =============================================================================

class AccountRequestSerializer(serializers.ModelSerializer):
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    reviewed_by_email = serializers.EmailField(source='reviewed_by.email', read_only=True, default=None)

    class Meta:
        model = AccountRequest
        fields = [
            'id',
            'full_name',
            'email',
            'phone',
            'church_name',
            'church',
            'reason',
            'status',
            'status_display',
            'reviewed_by_email',
            'reviewed_at',
            'created_at',
        ]
        read_only_fields = fields


class PublicAccountRequestSerializer(serializers.ModelSerializer):
    class Meta:
        model = AccountRequest
        fields = ['full_name', 'email', 'phone', 'church_name', 'church', 'reason']
        extra_kwargs = {'church_name': {'required': False}}

    def validate(self, attrs):
        church = attrs.get('church')
        if church is not None:
            attrs['church_name'] = church.name
        elif not attrs.get('church_name'):
            raise serializers.ValidationError({'church_name': 'This field is required.'})
        return attrs


# =============================================================================
# MINISTRY REQUESTS
# =============================================================================

class MinistryRequestSerializer(serializers.ModelSerializer):
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    plan_display = serializers.CharField(source='get_plan_display', read_only=True)

    class Meta:
        model = MinistryRequest
        fields = [
            'id',
            'ministry_name',
            'location',
            'admin_full_name',
            'admin_email',
            'admin_phone',
            'description',
            'plan',
            'plan_display',
            'is_paid',
            'status',
            'status_display',
            'church',
            'reviewed_at',
            'created_at',
        ]
        read_only_fields = fields


class PublicMinistryRequestSerializer(serializers.ModelSerializer):
    plan = serializers.ChoiceField(choices=Plan.CHOICES, default=Plan.FREE)

    class Meta:
        model = MinistryRequest
        fields = [
            'ministry_name',
            'location',
            'admin_full_name',
            'admin_email',
            'admin_phone',
            'description',
            'plan',
        ]


class MinistryApprovalSerializer(serializers.Serializer):
    """Corrections the reviewer may make before approving."""

    ministry_name = serializers.CharField(max_length=200, required=False)
    location = serializers.CharField(max_length=255, required=False, allow_blank=True)
    admin_full_name = serializers.CharField(max_length=200, required=False)
    admin_email = serializers.EmailField(required=False)
    admin_phone = serializers.CharField(max_length=30, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)


# =============================================================================
# FORM CONFIGURATION
# =============================================================================

class FormConfigurationSerializer(serializers.ModelSerializer):
    available_fields = serializers.SerializerMethodField()

    class Meta:
        model = FormConfiguration
        fields = [
            'form_type',
            'title',
            'description',
            'success_message',
            'enabled_fields',
            'available_fields',
            'updated_at',
        ]
        read_only_fields = ['form_type', 'updated_at']

    def get_available_fields(self, obj):
        return OPTIONAL_FIELDS.get(obj.form_type, [])

    def validate_enabled_fields(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError('Expected a list of field names.')
        form_type = self.context.get('form_type', FormType.CONVERT)
        unknown = [field for field in value if field not in OPTIONAL_FIELDS[form_type]]
        if unknown:
            raise serializers.ValidationError(f'Unknown fields: {", ".join(unknown)}')
        return value
