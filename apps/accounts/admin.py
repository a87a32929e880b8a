"""Admin configuration for staff accounts."""
from django.contrib import admin

from apps.core.admin import BaseModelAdmin

from .models import PasswordResetToken, StaffProfile


@admin.register(StaffProfile)
class StaffProfileAdmin(BaseModelAdmin):
    list_display = ['full_name', 'email', 'role', 'church', 'phone', 'is_active']
    list_filter = ['role', 'is_active', 'church']
    search_fields = ['user__email', 'user__first_name', 'user__last_name', 'phone']
    raw_id_fields = ['user', 'church']
    ordering = ['user__last_name', 'user__first_name']


@admin.register(PasswordResetToken)
class PasswordResetTokenAdmin(BaseModelAdmin):
    list_display = ['user', 'expires_at', 'used_at', 'created_at']
    list_filter = ['used_at', 'expires_at']
    search_fields = ['user__email']
    readonly_fields = ['id', 'user', 'token_hash', 'expires_at', 'used_at', 'created_at', 'updated_at']
