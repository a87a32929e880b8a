"""
Accounts serializers - staff authentication and leader management.

Serializers:
- LoginSerializer, SetupSerializer, AdminResetSerializer
- ForgotPasswordSerializer, ResetPasswordSerializer, ChangePasswordSerializer
- StaffUserSerializer: the signed-in user (`me/`)
- LeaderSerializer / LeaderCreateSerializer: leader management
"""
from rest_framework import serializers

from apps.core.constants import Roles

from .models import StaffProfile
from .services import MIN_PASSWORD_LENGTH


# =============================================================================
# AUTHENTICATION
# =============================================================================

class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(trim_whitespace=False)


class SetupSerializer(serializers.Serializer):
    """First platform admin."""

    setup_key = serializers.CharField()
    email = serializers.EmailField()
    password = serializers.CharField(min_length=MIN_PASSWORD_LENGTH, trim_whitespace=False)
    first_name = serializers.CharField(required=False, allow_blank=True, default='')
    last_name = serializers.CharField(required=False, allow_blank=True, default='')


class AdminResetSerializer(serializers.Serializer):
    """Platform admin password recovery with the setup key."""

    setup_key = serializers.CharField()
    email = serializers.EmailField()
    new_password = serializers.CharField(min_length=MIN_PASSWORD_LENGTH, trim_whitespace=False)


class ForgotPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField()


class ResetPasswordSerializer(serializers.Serializer):
    token = serializers.CharField()
    password = serializers.CharField(min_length=MIN_PASSWORD_LENGTH, trim_whitespace=False)


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(trim_whitespace=False)
    new_password = serializers.CharField(min_length=MIN_PASSWORD_LENGTH, trim_whitespace=False)


class StaffUserSerializer(serializers.Serializer):
    """Signed-in staff user with role and church."""

    id = serializers.IntegerField(source='user.pk')
    email = serializers.EmailField(source='user.email')
    first_name = serializers.CharField(source='user.first_name')
    last_name = serializers.CharField(source='user.last_name')
    full_name = serializers.CharField()
    role = serializers.CharField()
    role_display = serializers.CharField(source='get_role_display')
    phone = serializers.CharField()
    church = serializers.SerializerMethodField()

    def get_church(self, obj):
        if obj.church is None:
            return None
        return {'id': str(obj.church.pk), 'name': obj.church.name}


# =============================================================================
# LEADER MANAGEMENT
# =============================================================================

class LeaderSerializer(serializers.ModelSerializer):
    email = serializers.EmailField(source='user.email', read_only=True)
    first_name = serializers.CharField(source='user.first_name', read_only=True)
    last_name = serializers.CharField(source='user.last_name', read_only=True)
    full_name = serializers.CharField(read_only=True)
    role_display = serializers.CharField(source='get_role_display', read_only=True)
    church_name = serializers.CharField(source='church.name', read_only=True, default='')
    last_login = serializers.DateTimeField(source='user.last_login', read_only=True)

    class Meta:
        model = StaffProfile
        fields = [
            'id',
            'email',
            'first_name',
            'last_name',
            'full_name',
            'role',
            'role_display',
            'church',
            'church_name',
            'phone',
            'last_login',
            'created_at',
        ]
        read_only_fields = fields


class LeaderCreateSerializer(serializers.Serializer):
    """
    Payload for adding staff.

    Ministry admins may only add leaders to their own church; the view
    fills in the church for them.
    """

    email = serializers.EmailField()
    password = serializers.CharField(min_length=MIN_PASSWORD_LENGTH, trim_whitespace=False)
    first_name = serializers.CharField(max_length=150)
    last_name = serializers.CharField(max_length=150, required=False, allow_blank=True, default='')
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True, default='')
    role = serializers.ChoiceField(choices=Roles.MINISTRY_ROLES, default=Roles.LEADER)
    church = serializers.UUIDField(required=False)
