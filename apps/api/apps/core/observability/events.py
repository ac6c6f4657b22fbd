"""
Domain events logging helpers.

Provides structured event logging for business operations.
"""
from typing import Dict, Optional
from .logging import get_sanitized_logger, sanitize_dict

logger = get_sanitized_logger(__name__)


def log_domain_event(
    event_name: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    entity_ids: Optional[Dict[str, str]] = None,
    result: str = 'success',
    **extra_fields
):
    """
    Log a domain event with structured data.
    
    Args:
        event_name: Name of the event (e.g., 'consultation_booked', 'booking_slot_conflict')
        entity_type: Type of entity (e.g., 'Consultation', 'Slot')
        entity_id: ID of primary entity
        entity_ids: Dictionary of related entity IDs
        result: Result of operation (success, failure, etc.)
        **extra_fields: Additional fields to log (will be sanitized)
    
    Example:
        log_domain_event(
            'consultation_booked',
            entity_type='Consultation',
            entity_id=str(consultation.id),
            entity_ids={'slot_id': str(consultation.slot_id)},
            result='success',
            attempts=2
        )
    """
    event_data = {
        'event': event_name,
        'result': result,
    }
    
    if entity_type:
        event_data['entity_type'] = entity_type
    
    if entity_id:
        event_data['entity_id'] = entity_id
    
    if entity_ids:
        event_data.update(entity_ids)
    
    # Sanitize extra fields
    sanitized_extra = sanitize_dict(extra_fields)
    event_data.update(sanitized_extra)
    
    # Log at appropriate level based on result
    if result in ['failure', 'error']:
        logger.error(f'Domain event: {event_name}', extra=event_data)
    elif result in ['warning', 'blocked', 'throttled']:
        logger.warning(f'Domain event: {event_name}', extra=event_data)
    else:
        logger.info(f'Domain event: {event_name}', extra=event_data)


def log_booking_committed(consultation, actor_id, attempts, tried_slot_ids):
    """Log a committed booking (consultation created, request accepted)."""
    log_domain_event(
        'consultation_booked',
        entity_type='Consultation',
        entity_id=str(consultation.id),
        entity_ids={
            'consultation_id': str(consultation.id),
            'consultation_request_id': str(consultation.request_id),
            'slot_id': str(consultation.slot_id),
            'assigned_to_id': str(consultation.assigned_to_id),
        },
        result='success',
        actor_id=str(actor_id),
        attempts=attempts,
        tried_slot_ids=[str(slot_id) for slot_id in tried_slot_ids],
    )


def log_slot_conflict(request_id, slot_id, attempt):
    """Log a lost race for a slot (another transaction committed first)."""
    log_domain_event(
        'booking_slot_conflict',
        entity_type='Slot',
        entity_id=str(slot_id),
        entity_ids={'consultation_request_id': str(request_id), 'slot_id': str(slot_id)},
        result='warning',
        attempt=attempt,
    )


def log_booking_exhausted(request_id, attempts, tried_slot_ids):
    """Log an accept call that spent its attempt budget under contention."""
    log_domain_event(
        'booking_attempts_exhausted',
        entity_type='ConsultationRequest',
        entity_id=str(request_id),
        entity_ids={'consultation_request_id': str(request_id)},
        result='failure',
        attempts=attempts,
        tried_slot_ids=[str(slot_id) for slot_id in tried_slot_ids],
    )


def log_gatekeeper_blocked(entity_type, operation, reason, entity_id=None):
    """Log a mutation rejected by the gatekeeper."""
    log_domain_event(
        'gatekeeper_blocked',
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id is not None else None,
        result='blocked',
        operation=operation,
        reason=reason,
    )


def log_audit_write_failed(stage, entity_type, entity_id, event_type, error):
    """Log an audit event lost on the best-effort path."""
    log_domain_event(
        'audit_event_write_failed',
        entity_type=entity_type,
        entity_id=str(entity_id),
        result='failure',
        stage=stage,
        event_type=event_type,
        error=error,
    )


def log_notification_failed(consultation, error):
    """Log a notification that could not be dispatched after a committed booking."""
    log_domain_event(
        'consultation_notification_failed',
        entity_type='Consultation',
        entity_id=str(consultation.id),
        entity_ids={'consultation_id': str(consultation.id)},
        result='failure',
        error=error,
    )
