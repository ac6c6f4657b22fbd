from django.contrib import admin
from .models import AppSettings


class AuditedModelAdmin(admin.ModelAdmin):
    """ModelAdmin that attributes every save to the logged-in user."""

    def save_model(self, request, obj, form, change):
        obj.save(audit_actor=request.user)

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(AppSettings)
class AppSettingsAdmin(AuditedModelAdmin):
    list_display = ['id', 'buffer_time_minutes', 'consultation_duration_minutes', 'break_duration_minutes']
    readonly_fields = ['id', 'created_at', 'updated_at']
