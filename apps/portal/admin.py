"""Admin configuration for the member portal."""
from django.contrib import admin

from apps.core.admin import BaseModelAdmin

from .models import (
    AccountClaimToken, JournalEntry, MemberAccount, MemberPrayerRequest, MinistryAffiliation, Person,
)


class MinistryAffiliationInline(admin.TabularInline):
    model = MinistryAffiliation
    extra = 0
    raw_id_fields = ['church', 'convert', 'new_member', 'member']


@admin.register(Person)
class PersonAdmin(BaseModelAdmin):
    list_display = ['email', 'first_name', 'last_name', 'phone', 'created_at']
    search_fields = ['email', 'first_name', 'last_name', 'phone']
    inlines = [MinistryAffiliationInline]


@admin.register(MemberAccount)
class MemberAccountAdmin(BaseModelAdmin):
    list_display = ['person', 'status', 'last_login', 'created_at']
    list_filter = ['status']
    search_fields = ['person__email', 'person__first_name', 'person__last_name']
    raw_id_fields = ['person']
    exclude = ['password']


@admin.register(AccountClaimToken)
class AccountClaimTokenAdmin(BaseModelAdmin):
    list_display = ['account', 'expires_at', 'used_at', 'created_at']
    raw_id_fields = ['account']
    readonly_fields = ['token_hash', 'created_at', 'updated_at']


@admin.register(JournalEntry)
class JournalEntryAdmin(BaseModelAdmin):
    list_display = ['account', 'title', 'church', 'is_private', 'created_at']
    list_filter = ['is_private', 'share_with_ministry']
    raw_id_fields = ['account', 'church']


@admin.register(MemberPrayerRequest)
class MemberPrayerRequestAdmin(BaseModelAdmin):
    list_display = ['account', 'church', 'category', 'status', 'is_private', 'created_at']
    list_filter = ['status', 'is_private']
    search_fields = ['request_text', 'account__person__email']
    raw_id_fields = ['account', 'church']
