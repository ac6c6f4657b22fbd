"""
Core models: app_settings

Admin-editable runtime configuration (single row).
"""
from django.conf import settings
from django.db import models

from apps.audit.gatekeeper import AuditedModel


def default_buffer_time_minutes():
    return settings.DEFAULT_BUFFER_TIME_MINUTES


def default_sms_templates():
    return [
        {
            'name': 'Consultation booked',
            'body': 'Your consultation is booked for {consultationTime}. A clinician will call you.',
        },
    ]


class AppSettings(AuditedModel):
    """
    Global application settings (single row).

    Fields:
    - consultation_duration_minutes: default 10
    - break_duration_minutes: default 5
    - buffer_time_minutes: minimum lead time before a slot is bookable
      (default: settings.DEFAULT_BUFFER_TIME_MINUTES)
    - consultation_sms_templates: JSON array of {name, body}
    - created_at, updated_at
    """
    SINGLETON_PK = 1

    id = models.PositiveSmallIntegerField(primary_key=True, default=SINGLETON_PK, editable=False)
    consultation_duration_minutes = models.PositiveIntegerField(default=10)
    break_duration_minutes = models.PositiveIntegerField(default=5)
    buffer_time_minutes = models.PositiveIntegerField(
        default=default_buffer_time_minutes,
        help_text='Slots starting before now + buffer are not bookable'
    )
    consultation_sms_templates = models.JSONField(
        default=default_sms_templates,
        help_text='Array of {name, body}; body may contain {consultationTime}'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'app_settings'
        verbose_name = 'App Settings'
        verbose_name_plural = 'App Settings'

    def __str__(self):
        return f"App Settings (buffer {self.buffer_time_minutes} min)"

    @classmethod
    def load(cls):
        """
        Return the stored settings row, or an unsaved instance carrying
        the defaults. Never writes.
        """
        instance = cls.objects.filter(pk=cls.SINGLETON_PK).first()
        if instance is None:
            instance = cls()
        return instance


def update_app_settings(actor, **fields):
    """Upsert the settings row through the gatekeeper."""
    instance, _ = AppSettings.objects.update_or_create(
        pk=AppSettings.SINGLETON_PK,
        defaults=fields,
        audit_actor=actor,
    )
    return instance
