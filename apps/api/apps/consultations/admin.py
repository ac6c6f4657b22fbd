from django.contrib import admin

from apps.core.admin import AuditedModelAdmin
from .models import Consultation, ConsultationRequest


@admin.register(ConsultationRequest)
class ConsultationRequestAdmin(AuditedModelAdmin):
    list_display = ['id', 'status', 'status_actioned_by', 'status_actioned_at', 'created_at']
    list_filter = ['status']
    readonly_fields = ['status', 'status_actioned_by', 'status_actioned_at', 'created_at']


@admin.register(Consultation)
class ConsultationAdmin(AuditedModelAdmin):
    list_display = ['id', 'assigned_to', 'request', 'slot', 'created_at']
    readonly_fields = ['assigned_to', 'request', 'slot', 'created_at']

    def has_add_permission(self, request):
        return False
