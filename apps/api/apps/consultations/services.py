"""
Consultation request lifecycle: create and reject.

Accepting a request is the booking protocol in booking.py.
"""
from django.db import transaction
from django.utils import timezone

from apps.consultations.exceptions import RequestAlreadyFinalized
from apps.consultations.models import ConsultationRequest, ConsultationRequestStatusChoices
from apps.core.observability import log_domain_event


def create_consultation_request(phone_number, description, actor):
    """Open a pending request."""
    request = ConsultationRequest.objects.create(
        phone_number=phone_number,
        description=description or '',
        audit_actor=actor,
    )
    log_domain_event(
        'consultation_request_created',
        entity_type='ConsultationRequest',
        entity_id=str(request.pk),
        actor_id=str(actor.pk),
    )
    return request


def reject_consultation_request(request_id, actor, now=None):
    """
    Transition a pending request to rejected.

    Not idempotent: rejecting a request that is no longer pending fails.

    Raises:
        ConsultationRequest.DoesNotExist: unknown id
        RequestAlreadyFinalized: request is accepted or rejected
    """
    now = now or timezone.now()
    with transaction.atomic():
        request = ConsultationRequest.objects.select_for_update().get(pk=request_id)
        if not request.is_pending:
            raise RequestAlreadyFinalized()
        request.status = ConsultationRequestStatusChoices.REJECTED
        request.status_actioned_by = actor
        request.status_actioned_at = now
        request.save(
            update_fields=['status', 'status_actioned_by', 'status_actioned_at'],
            audit_actor=actor,
        )

    log_domain_event(
        'consultation_request_rejected',
        entity_type='ConsultationRequest',
        entity_id=str(request.pk),
        actor_id=str(actor.pk),
    )
    return request
