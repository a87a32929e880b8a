"""Admin configuration for tracked people and check-ins."""
from django.contrib import admin

from apps.core.admin import BaseModelAdmin

from .models import (
    ContactRequest, Convert, ConvertCheckin, Guest, GuestCheckin, Member, MemberCheckin,
    NewMember, NewMemberCheckin, PrayerRequest,
)


class TrackedPersonAdmin(BaseModelAdmin):
    list_display = ['full_name', 'church', 'email', 'phone', 'status', 'self_submitted', 'created_at']
    list_filter = ['status', 'self_submitted', 'church', 'created_at']
    search_fields = ['first_name', 'last_name', 'email', 'phone']
    raw_id_fields = ['church', 'created_by']


class CheckinInline(admin.TabularInline):
    extra = 0
    fields = ['checkin_date', 'outcome', 'next_followup_date', 'next_followup_time', 'completed_at']
    readonly_fields = ['completed_at']
    show_change_link = True


class ConvertCheckinInline(CheckinInline):
    model = ConvertCheckin


class NewMemberCheckinInline(CheckinInline):
    model = NewMemberCheckin


class MemberCheckinInline(CheckinInline):
    model = MemberCheckin


class GuestCheckinInline(CheckinInline):
    model = GuestCheckin


@admin.register(Convert)
class ConvertAdmin(TrackedPersonAdmin):
    inlines = [ConvertCheckinInline]


@admin.register(NewMember)
class NewMemberAdmin(TrackedPersonAdmin):
    list_display = TrackedPersonAdmin.list_display + ['follow_up_stage']
    list_filter = TrackedPersonAdmin.list_filter + ['follow_up_stage']
    inlines = [NewMemberCheckinInline]


@admin.register(Member)
class MemberAdmin(TrackedPersonAdmin):
    inlines = [MemberCheckinInline]


@admin.register(Guest)
class GuestAdmin(TrackedPersonAdmin):
    inlines = [GuestCheckinInline]


class CheckinAdmin(BaseModelAdmin):
    list_display = ['person', 'church', 'checkin_date', 'outcome', 'next_followup_date', 'completed_at']
    list_filter = ['outcome', 'notification_method', 'checkin_date']
    raw_id_fields = ['church', 'created_by']


@admin.register(ConvertCheckin)
class ConvertCheckinAdmin(CheckinAdmin):
    search_fields = ['convert__first_name', 'convert__last_name']


@admin.register(NewMemberCheckin)
class NewMemberCheckinAdmin(CheckinAdmin):
    search_fields = ['new_member__first_name', 'new_member__last_name']


@admin.register(MemberCheckin)
class MemberCheckinAdmin(CheckinAdmin):
    search_fields = ['member__first_name', 'member__last_name']


@admin.register(GuestCheckin)
class GuestCheckinAdmin(CheckinAdmin):
    search_fields = ['guest__first_name', 'guest__last_name']


@admin.register(PrayerRequest)
class PrayerRequestAdmin(BaseModelAdmin):
    list_display = ['name', 'church', 'email', 'created_at']
    search_fields = ['name', 'email', 'message']


@admin.register(ContactRequest)
class ContactRequestAdmin(BaseModelAdmin):
    list_display = ['name', 'church', 'subject', 'status', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['name', 'email', 'subject']
