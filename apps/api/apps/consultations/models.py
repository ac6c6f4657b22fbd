"""
Consultation models: consultation_request, consultation

A request is created pending and transitions exactly once, to accepted
(together with a consultation) or rejected.
"""
from django.conf import settings
from django.db import models

from apps.audit.gatekeeper import AuditedModel


class ConsultationRequestStatusChoices(models.TextChoices):
    PENDING = 'pending', 'Pending'
    ACCEPTED = 'accepted', 'Accepted'
    REJECTED = 'rejected', 'Rejected'


class ConsultationRequest(AuditedModel):
    """
    Inbound request for care.

    BUSINESS RULES:
    - Created pending
    - pending -> accepted | rejected, then terminal
    - status_actioned_by / status_actioned_at record the transition
    """
    phone_number = models.CharField(max_length=32, help_text='Contact reference for notifications')
    description = models.TextField(blank=True)
    status = models.CharField(
        max_length=20,
        choices=ConsultationRequestStatusChoices.choices,
        default=ConsultationRequestStatusChoices.PENDING,
        db_index=True
    )
    status_actioned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='actioned_consultation_requests'
    )
    status_actioned_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'consultation_request'
        verbose_name = 'Consultation Request'
        verbose_name_plural = 'Consultation Requests'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['status', 'created_at'], name='idx_request_status_created'),
        ]

    def __str__(self):
        return f"Consultation request {self.pk} ({self.status})"

    @property
    def is_pending(self):
        return self.status == ConsultationRequestStatusChoices.PENDING


class Consultation(AuditedModel):
    """
    The booking outcome: one request served in one slot.

    The unique slot reference is the arbiter of booking races.
    Never deleted.
    """
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='assigned_consultations'
    )
    request = models.OneToOneField(
        ConsultationRequest,
        on_delete=models.PROTECT,
        related_name='consultation'
    )
    slot = models.OneToOneField(
        'scheduling.Slot',
        on_delete=models.PROTECT,
        related_name='consultation'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'consultation'
        verbose_name = 'Consultation'
        verbose_name_plural = 'Consultations'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"Consultation {self.pk} (slot {self.slot_id})"
