from django.contrib import admin
from .models import AuditEvent


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ['event_timestamp', 'event_type', 'entity_type', 'entity_id', 'actor']
    list_filter = ['event_type', 'entity_type']
    search_fields = ['entity_id', 'actor__email']
    readonly_fields = [
        'event_timestamp', 'actor', 'event_type', 'entity_type', 'entity_id', 'changed_fields'
    ]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
