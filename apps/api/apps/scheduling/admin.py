from django.contrib import admin

from apps.core.admin import AuditedModelAdmin
from .models import Slot


@admin.register(Slot)
class SlotAdmin(AuditedModelAdmin):
    list_display = ['id', 'owner', 'start_datetime', 'end_datetime', 'is_booked']
    list_filter = ['owner']
    search_fields = ['owner__email', 'owner__name']
    autocomplete_fields = ['owner']
