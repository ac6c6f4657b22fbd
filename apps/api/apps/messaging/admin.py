from django.contrib import admin

from apps.core.admin import AuditedModelAdmin
from .models import OutgoingSmsMessage, SmsMessage


@admin.register(SmsMessage)
class SmsMessageAdmin(AuditedModelAdmin):
    list_display = ['id', 'direction', 'created_at']
    list_filter = ['direction']
    readonly_fields = ['created_at']


@admin.register(OutgoingSmsMessage)
class OutgoingSmsMessageAdmin(AuditedModelAdmin):
    list_display = ['id', 'success', 'sent_by', 'consultation', 'created_at']
    list_filter = ['success']
    readonly_fields = ['created_at', 'sent_message']
    raw_id_fields = ['consultation', 'sent_by']
