"""
Booking: turn a pending consultation request into a consultation.

validate -> select -> commit -> {booked | conflict, retry | exhausted}

No lock is held across attempts. The unique constraint on
consultation.slot_id decides which of two concurrent commits on the same
slot wins; the loser sees an IntegrityError and moves on to the next
slot. Two loops, bounded separately:

- outer (BOOKING_MAX_ATTEMPTS): each attempt asks the allocator for a
  slot not tried yet in this call
- inner (BOOKING_COMMIT_RETRIES): re-attempts the commit on the same
  slot when it fails with a slot conflict

The notification is sent after commit and never undoes the booking.
"""
from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.audit.gatekeeper import require_actor
from apps.consultations.exceptions import (
    NoAvailableSlots,
    NoAvailableSlotsForActor,
    NotificationDispatchFailed,
    RequestAlreadyFinalized,
)
from apps.consultations.models import (
    Consultation,
    ConsultationRequest,
    ConsultationRequestStatusChoices,
)
from apps.core.models import AppSettings
from apps.core.observability import get_sanitized_logger, metrics
from apps.core.observability.events import (
    log_booking_committed,
    log_booking_exhausted,
    log_notification_failed,
    log_slot_conflict,
)
from apps.messaging.sinks import OutgoingSmsSink
from apps.messaging.templates import format_relative, render_sms_template
from apps.scheduling.allocator import booking_buffer_instant, find_next_slot

logger = get_sanitized_logger(__name__)


class SlotConflict(Exception):
    """The candidate slot was claimed by another transaction."""

    def __init__(self, slot_id):
        super().__init__(f'Slot {slot_id} already has a consultation')
        self.slot_id = slot_id


def _violated_constraint(exc):
    cause = exc.__cause__
    diag = getattr(cause, 'diag', None)
    return getattr(diag, 'constraint_name', None) or ''


def is_slot_conflict(exc):
    """True when an IntegrityError comes from the unique slot reference."""
    constraint = _violated_constraint(exc)
    if constraint:
        return 'slot_id' in constraint
    return 'slot_id' in str(exc)


def is_request_conflict(exc):
    """True when an IntegrityError comes from the unique request reference."""
    constraint = _violated_constraint(exc)
    if constraint:
        return 'request_id' in constraint
    return 'request_id' in str(exc)


def validate_request(request_id):
    """
    Fail fast on requests that are already finalized.

    Advisory only; the commit re-checks under a row lock.
    """
    request = ConsultationRequest.objects.get(pk=request_id)
    if not request.is_pending or hasattr(request, 'consultation'):
        metrics.booking_requests_total.labels(result='already_finalized').inc()
        raise RequestAlreadyFinalized()
    return request


def _commit_booking(request_id, slot, actor, now, retries):
    """
    Create the consultation and accept the request in one transaction.

    Retries the same slot up to ``retries`` times on slot conflicts and
    raises SlotConflict once they are spent. Any other error propagates.
    """
    last_error = None
    for attempt in range(1, retries + 1):
        try:
            with transaction.atomic():
                request = ConsultationRequest.objects.select_for_update().get(pk=request_id)
                if not request.is_pending:
                    metrics.booking_requests_total.labels(result='already_finalized').inc()
                    raise RequestAlreadyFinalized()

                consultation = Consultation.objects.create(
                    assigned_to_id=slot.owner_id,
                    request=request,
                    slot=slot,
                    audit_actor=actor,
                )

                request.status = ConsultationRequestStatusChoices.ACCEPTED
                request.status_actioned_by = actor
                request.status_actioned_at = now
                request.save(
                    update_fields=['status', 'status_actioned_by', 'status_actioned_at'],
                    audit_actor=actor,
                )
            return consultation, request
        except IntegrityError as exc:
            if is_request_conflict(exc):
                metrics.booking_requests_total.labels(result='already_finalized').inc()
                raise RequestAlreadyFinalized() from exc
            if not is_slot_conflict(exc):
                raise
            metrics.booking_slot_conflicts_total.inc()
            log_slot_conflict(request_id, slot.pk, attempt)
            last_error = exc

    raise SlotConflict(slot.pk) from last_error


def _notify(consultation, request, template_body, actor, now, sink):
    consultation_time = format_relative(consultation.slot.start_datetime, now)
    body = render_sms_template(template_body, {'consultationTime': consultation_time})
    try:
        sink.send(
            phone_number=request.phone_number,
            body=body,
            actor=actor,
            consultation=consultation,
        )
    except Exception as exc:
        metrics.notification_dispatch_total.labels(result='failed').inc()
        log_notification_failed(consultation, str(exc))
        raise NotificationDispatchFailed(consultation) from exc
    metrics.notification_dispatch_total.labels(result='sent').inc()


@metrics.track_duration(metrics.booking_duration_seconds)
def accept_consultation_request(
    request_id,
    actor,
    template_body,
    assign_to_requester_only=False,
    now=None,
    sink=None,
):
    """
    Book the earliest eligible slot for a pending request.

    Args:
        request_id: ConsultationRequest pk
        actor: accepting user; attributed on every write
        template_body: notification text, may contain {consultationTime}
        assign_to_requester_only: only consider the actor's own slots
        now: current instant (defaults to timezone.now())
        sink: notification sink (defaults to OutgoingSmsSink)

    Returns:
        The committed Consultation.

    Raises:
        AuditActorRequired: actor missing
        ConsultationRequest.DoesNotExist: unknown request
        RequestAlreadyFinalized: request not pending
        NoAvailableSlotsForActor: self-only policy and the actor has no slot
        NoAvailableSlots: no eligible slot, or attempts exhausted under contention
        NotificationDispatchFailed: booked, but the sink raised
    """
    require_actor(Consultation, 'create', actor)
    now = now or timezone.now()
    if sink is None:
        sink = OutgoingSmsSink()

    validate_request(request_id)

    buffer_instant = booking_buffer_instant(now, AppSettings.load().buffer_time_minutes)
    owner = actor if assign_to_requester_only else None
    max_attempts = settings.BOOKING_MAX_ATTEMPTS
    commit_retries = settings.BOOKING_COMMIT_RETRIES
    tried_slot_ids = []

    for attempt in range(1, max_attempts + 1):
        slot = find_next_slot(buffer_instant, owner=owner, exclude_ids=tried_slot_ids)
        if slot is None:
            if owner is not None:
                metrics.booking_requests_total.labels(result='no_slots_for_user').inc()
                raise NoAvailableSlotsForActor()
            metrics.booking_requests_total.labels(result='no_slots').inc()
            raise NoAvailableSlots()

        try:
            consultation, request = _commit_booking(request_id, slot, actor, now, commit_retries)
        except SlotConflict:
            tried_slot_ids.append(slot.pk)
            continue

        metrics.booking_requests_total.labels(result='booked').inc()
        log_booking_committed(consultation, actor.pk, attempt, tried_slot_ids)
        break
    else:
        metrics.booking_requests_total.labels(result='exhausted').inc()
        metrics.booking_attempts_exhausted_total.inc()
        log_booking_exhausted(request_id, max_attempts, tried_slot_ids)
        raise NoAvailableSlots()

    _notify(consultation, request, template_body, actor, now, sink)
    return consultation
