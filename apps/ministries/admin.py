"""Admin configuration for ministries."""
from django.contrib import admin

from apps.core.admin import BaseModelAdmin, SoftDeleteModelAdmin

from .models import AccountRequest, Church, FormConfiguration, MinistryRequest


@admin.register(Church)
class ChurchAdmin(SoftDeleteModelAdmin):
    list_display = ['name', 'location', 'plan', 'subscription_status', 'is_active', 'deleted_at']
    list_filter = ['plan', 'subscription_status', 'is_active', 'deleted_at']
    search_fields = ['name', 'location', 'stripe_customer_id']
    readonly_fields = [
        'id', 'public_token', 'new_member_token', 'member_token',
        'created_at', 'updated_at', 'deleted_at',
    ]
    ordering = ['name']


@admin.register(AccountRequest)
class AccountRequestAdmin(BaseModelAdmin):
    list_display = ['full_name', 'email', 'church_name', 'status', 'reviewed_at', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['full_name', 'email', 'church_name']
    raw_id_fields = ['church', 'reviewed_by']


@admin.register(MinistryRequest)
class MinistryRequestAdmin(BaseModelAdmin):
    list_display = ['ministry_name', 'admin_email', 'plan', 'is_paid', 'status', 'created_at']
    list_filter = ['status', 'plan', 'is_paid']
    search_fields = ['ministry_name', 'admin_full_name', 'admin_email']
    raw_id_fields = ['church', 'reviewed_by']


@admin.register(FormConfiguration)
class FormConfigurationAdmin(BaseModelAdmin):
    list_display = ['church', 'form_type', 'title', 'updated_at']
    list_filter = ['form_type']
    search_fields = ['church__name', 'title']
    raw_id_fields = ['church']
