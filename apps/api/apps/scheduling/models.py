"""
Scheduling models: slot

A slot is a bookable availability window published by one clinician.
"""
from django.conf import settings
from django.db import models
from django.db.models import F, Q

from apps.audit.gatekeeper import AuditedManager, AuditedQuerySet, AuditedModel
from apps.scheduling.exceptions import SlotBooked


class SlotQuerySet(AuditedQuerySet):

    def without_consultation(self):
        """Unbooked slots; the only slots a bulk delete may target."""
        return self.unlinked()

    def bookable(self, buffer_instant):
        """Unbooked slots of availability-enabled owners starting at or after buffer_instant."""
        return self.filter(
            consultation__isnull=True,
            start_datetime__gte=buffer_instant,
            owner__can_have_availability=True,
        )


class SlotManager(AuditedManager.from_queryset(SlotQuerySet)):
    pass


class Slot(AuditedModel):
    """
    Availability window owned by exactly one clinician.

    BUSINESS RULES:
    - At most one consultation references a slot (unique constraint on
      consultation.slot_id adjudicates booking races)
    - A slot linked to a consultation is never deleted
    - end_datetime must be after start_datetime
    """
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='slots'
    )
    start_datetime = models.DateTimeField()
    end_datetime = models.DateTimeField()

    delete_guard_relation = 'consultation'
    linked_delete_error = SlotBooked

    objects = SlotManager()

    class Meta:
        db_table = 'slot'
        verbose_name = 'Slot'
        verbose_name_plural = 'Slots'
        ordering = ['start_datetime', 'id']
        indexes = [
            models.Index(fields=['owner', 'start_datetime'], name='idx_slot_owner_start'),
            models.Index(fields=['start_datetime'], name='idx_slot_start'),
        ]
        constraints = [
            models.CheckConstraint(
                check=Q(end_datetime__gt=F('start_datetime')),
                name='slot_end_after_start'
            ),
        ]

    def __str__(self):
        return f"Slot {self.start_datetime:%Y-%m-%d %H:%M}-{self.end_datetime:%H:%M} ({self.owner_id})"

    @property
    def is_booked(self):
        return hasattr(self, 'consultation')
