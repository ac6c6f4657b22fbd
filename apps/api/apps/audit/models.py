"""
Audit models: audit_event

Append-only record of every CREATE/UPDATE that passes through the
mutation gatekeeper (see apps.audit.gatekeeper).
"""
from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models


class AuditEventTypeChoices(models.TextChoices):
    """Audit event kinds"""
    CREATE = 'CREATE', 'Create'
    UPDATE = 'UPDATE', 'Update'


class AuditEventQuerySet(models.QuerySet):
    """Audit rows are immutable: no bulk update, no delete."""

    def update(self, **kwargs):
        raise RuntimeError('Audit events are immutable')

    def delete(self):
        raise RuntimeError('Audit events cannot be deleted')


class AuditEvent(models.Model):
    """
    Immutable audit trail entry.

    Fields:
    - actor: user the mutation is attributed to (required)
    - event_type: CREATE|UPDATE
    - entity_type: model name of the mutated entity (e.g. 'Consultation')
    - entity_id: primary key of the mutated entity, as text
    - changed_fields: {"changes": {...}} payload submitted by the caller
    - event_timestamp: when the event was recorded

    Written only by apps.audit.tasks.record_audit_event. AuditEvent itself
    is not an audited model, so recording an event never recurses.
    """
    event_timestamp = models.DateTimeField(auto_now_add=True)

    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='audit_events',
        help_text='User the mutation is attributed to'
    )

    event_type = models.CharField(
        max_length=10,
        choices=AuditEventTypeChoices.choices
    )

    entity_type = models.CharField(
        max_length=100,
        help_text='Model name of the mutated entity'
    )

    entity_id = models.CharField(
        max_length=64,
        help_text='Primary key of the mutated entity'
    )

    changed_fields = models.JSONField(
        blank=True,
        null=True,
        encoder=DjangoJSONEncoder,
        help_text='Payload submitted with the mutation: {"changes": {...}}'
    )

    objects = AuditEventQuerySet.as_manager()

    class Meta:
        db_table = 'audit_event'
        verbose_name = 'Audit Event'
        verbose_name_plural = 'Audit Events'
        indexes = [
            models.Index(fields=['event_timestamp'], name='idx_audit_event_timestamp'),
            models.Index(fields=['actor'], name='idx_audit_event_actor'),
            models.Index(fields=['entity_type', 'entity_id'], name='idx_audit_event_entity'),
        ]
        ordering = ['-event_timestamp', '-id']

    def __str__(self):
        return f"{self.event_type} {self.entity_type}[{self.entity_id}] by {self.actor_id}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise RuntimeError('Audit events are immutable')
        super().save(*args, **kwargs)

    def delete(self, using=None, keep_parents=False):
        raise RuntimeError('Audit events cannot be deleted')


def audit_history(entity):
    """Audit events recorded for one entity instance, newest first."""
    return AuditEvent.objects.filter(
        entity_type=entity._meta.object_name,
        entity_id=str(entity.pk),
    ).select_related('actor')
