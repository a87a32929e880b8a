"""Base admin classes for all apps."""
from django.contrib import admin

from apps.core.audit import AuditLog, LoginAudit


class BaseModelAdmin(admin.ModelAdmin):
    """Base admin for models with common audit fields."""
    list_display = ['id', 'created_at', 'updated_at', 'is_active']
    list_filter = ['is_active', 'created_at']
    search_fields = ['id']
    readonly_fields = ['id', 'created_at', 'updated_at']
    ordering = ['-created_at']

    def get_queryset(self, request):
        """Include inactive objects in admin."""
        return self.model.all_objects.all()


class SoftDeleteModelAdmin(BaseModelAdmin):
    """Base admin for soft-deletable models with restore/hard-delete actions."""
    list_display = ['id', 'created_at', 'updated_at', 'is_active', 'deleted_at']
    list_filter = ['is_active', 'deleted_at', 'created_at']
    readonly_fields = ['id', 'created_at', 'updated_at', 'deleted_at']

    actions = ['restore_selected', 'hard_delete_selected']

    @admin.action(description='Restore selected records')
    def restore_selected(self, request, queryset):
        count = 0
        for obj in queryset:
            if obj.is_deleted:
                obj.restore()
                count += 1
        self.message_user(request, f'{count} record(s) restored.')

    @admin.action(description='Permanently delete selected records')
    def hard_delete_selected(self, request, queryset):
        count = queryset.count()
        for obj in queryset:
            obj.hard_delete()
        self.message_user(request, f'{count} record(s) permanently deleted.')


class ReadOnlyAuditAdmin(admin.ModelAdmin):
    """Audit rows are written by the app only."""
    date_hierarchy = 'created_at'
    ordering = ['-created_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return request.user.is_superuser


@admin.register(LoginAudit)
class LoginAuditAdmin(ReadOnlyAuditAdmin):
    list_display = ['email_attempted', 'success', 'ip_address', 'created_at']
    list_filter = ['success', 'created_at']
    search_fields = ['email_attempted', 'ip_address']


@admin.register(AuditLog)
class AuditLogAdmin(ReadOnlyAuditAdmin):
    list_display = ['action', 'entity_type', 'entity_id', 'user', 'church', 'created_at']
    list_filter = ['action', 'entity_type', 'created_at']
    search_fields = ['entity_id', 'object_repr', 'user__email']
