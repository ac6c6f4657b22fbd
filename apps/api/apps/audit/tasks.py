"""
Celery tasks for the audit trail.
"""
from celery import shared_task
from django.db import DatabaseError, transaction

from apps.core.observability import metrics
from apps.core.observability.events import log_audit_write_failed


@shared_task(name='apps.audit.tasks.record_audit_event', ignore_result=True)
def record_audit_event(actor_id, event_type, entity_type, entity_id, changed_fields=None):
    """
    Persist one AuditEvent.

    Best-effort: a failed write is logged and counted but never retried
    into the caller's path, and never raised.

    Args:
        actor_id: primary key of the user the mutation is attributed to
        event_type: 'CREATE' or 'UPDATE'
        entity_type: model name of the mutated entity
        entity_id: primary key of the mutated entity (text)
        changed_fields: {"changes": {...}} or None
    """
    from .models import AuditEvent

    try:
        with transaction.atomic():
            event = AuditEvent.objects.create(
                actor_id=actor_id,
                event_type=event_type,
                entity_type=entity_type,
                entity_id=entity_id,
                changed_fields=changed_fields,
            )
    except DatabaseError as exc:
        metrics.audit_event_write_failed_total.labels(stage='write').inc()
        log_audit_write_failed('write', entity_type, entity_id, event_type, str(exc))
        return None

    metrics.audit_events_written_total.labels(
        entity_type=entity_type,
        event_type=event_type
    ).inc()
    return event.pk
