"""
Booking tests: accept a consultation request.

CRITICAL: two requests racing for one slot never both win
CRITICAL: the notification runs after commit and never undoes a booking
"""
import threading
from datetime import timedelta

import pytest
from django.db import connection
from prometheus_client import REGISTRY

from apps.audit.exceptions import AuditActorRequired
from apps.audit.models import AuditEvent
from apps.consultations import booking
from apps.consultations.booking import accept_consultation_request, is_slot_conflict
from apps.consultations.exceptions import (
    NoAvailableSlots,
    NoAvailableSlotsForActor,
    NotificationDispatchFailed,
    RequestAlreadyFinalized,
)
from apps.consultations.models import Consultation, ConsultationRequest
from apps.consultations.services import reject_consultation_request
from apps.core.models import update_app_settings
from apps.messaging.models import OutgoingSmsMessage
from apps.messaging.templates import format_relative, render_sms_template

SMS_TEMPLATE = 'Your consultation is booked for {consultationTime}.'


def sample(name, labels=None):
    return REGISTRY.get_sample_value(name, labels or {}) or 0


class RecordingSink:
    def __init__(self):
        self.calls = []

    def send(self, phone_number, body, actor, consultation=None):
        self.calls.append({
            'phone_number': phone_number,
            'body': body,
            'actor': actor,
            'consultation': consultation,
        })


class FailingSink:
    def send(self, phone_number, body, actor, consultation=None):
        raise ConnectionError('gateway unreachable')


def stale_finder(stale_slot, always=False):
    """
    Allocator that keeps offering ``stale_slot`` as if another caller had
    not booked it yet, the way a concurrent caller would see it.
    """
    real_find = booking.find_next_slot

    def _find(buffer_instant, owner=None, exclude_ids=()):
        if always or stale_slot.pk not in exclude_ids:
            return stale_slot
        return real_find(buffer_instant, owner=owner, exclude_ids=exclude_ids)
    return _find


@pytest.mark.django_db
class TestAcceptConsultationRequest:

    def test_books_earliest_slot(self, clinician, other_clinician, make_slot, make_request, now):
        make_slot(clinician, now + timedelta(hours=2))
        earliest = make_slot(other_clinician, now + timedelta(hours=1))
        request = make_request()

        consultation = accept_consultation_request(
            request.pk, clinician, SMS_TEMPLATE, now=now, sink=RecordingSink()
        )

        assert consultation.slot == earliest
        assert consultation.assigned_to == other_clinician
        assert consultation.request_id == request.pk

        request.refresh_from_db()
        assert request.status == 'accepted'
        assert request.status_actioned_by == clinician
        assert request.status_actioned_at == now

    def test_notification_sent_once_with_rendered_time(
        self, clinician, make_slot, make_request, now
    ):
        slot = make_slot(clinician, now + timedelta(hours=1))
        request = make_request()
        sink = RecordingSink()

        consultation = accept_consultation_request(
            request.pk, clinician, SMS_TEMPLATE, now=now, sink=sink
        )

        assert len(sink.calls) == 1
        call = sink.calls[0]
        assert call['phone_number'] == request.phone_number
        assert call['actor'] == clinician
        assert call['consultation'] == consultation
        assert call['body'] == render_sms_template(
            SMS_TEMPLATE, {'consultationTime': format_relative(slot.start_datetime, now)}
        )
        assert '{consultationTime}' not in call['body']

    def test_default_sink_queues_outgoing_sms(self, clinician, make_slot, make_request, now):
        make_slot(clinician, now + timedelta(hours=1))
        request = make_request()

        consultation = accept_consultation_request(request.pk, clinician, SMS_TEMPLATE, now=now)

        outgoing = OutgoingSmsMessage.objects.get()
        assert outgoing.consultation == consultation
        assert outgoing.phone_number == request.phone_number
        assert outgoing.sent_by == clinician
        assert outgoing.success is None

    def test_buffer_from_app_settings(self, clinician, admin_user, make_slot, make_request, now):
        update_app_settings(admin_user, buffer_time_minutes=60)
        make_slot(clinician, now + timedelta(minutes=30))
        later = make_slot(clinician, now + timedelta(minutes=90))

        consultation = accept_consultation_request(
            make_request().pk, clinician, SMS_TEMPLATE, now=now, sink=RecordingSink()
        )
        assert consultation.slot == later

    def test_missing_actor(self, make_request, now):
        with pytest.raises(AuditActorRequired):
            accept_consultation_request(make_request().pk, None, SMS_TEMPLATE, now=now)

    def test_unknown_request(self, clinician, now):
        with pytest.raises(ConsultationRequest.DoesNotExist):
            accept_consultation_request(999999, clinician, SMS_TEMPLATE, now=now)


@pytest.mark.django_db
class TestTerminalStates:

    def test_accepting_accepted_request_fails(self, clinician, make_slot, make_request, now):
        make_slot(clinician, now + timedelta(hours=1))
        make_slot(clinician, now + timedelta(hours=2))
        request = make_request()
        accept_consultation_request(request.pk, clinician, SMS_TEMPLATE, now=now, sink=RecordingSink())

        with pytest.raises(RequestAlreadyFinalized) as exc_info:
            accept_consultation_request(
                request.pk, clinician, SMS_TEMPLATE, now=now, sink=RecordingSink()
            )
        assert exc_info.value.code == 'CONSULTATION_REQUEST_ALREADY_ACCEPTED'
        assert Consultation.objects.count() == 1

    def test_accepting_rejected_request_fails(self, clinician, make_slot, make_request, now):
        make_slot(clinician, now + timedelta(hours=1))
        request = make_request()
        reject_consultation_request(request.pk, clinician)

        with pytest.raises(RequestAlreadyFinalized):
            accept_consultation_request(
                request.pk, clinician, SMS_TEMPLATE, now=now, sink=RecordingSink()
            )
        assert Consultation.objects.count() == 0

    def test_status_changed_after_validation_is_caught_in_commit(
        self, clinician, make_slot, make_request, now, monkeypatch
    ):
        make_slot(clinician, now + timedelta(hours=1))
        request = make_request()
        real_validate = booking.validate_request

        def validate_then_reject(request_id):
            result = real_validate(request_id)
            reject_consultation_request(request_id, clinician)
            return result

        monkeypatch.setattr(booking, 'validate_request', validate_then_reject)

        with pytest.raises(RequestAlreadyFinalized):
            accept_consultation_request(
                request.pk, clinician, SMS_TEMPLATE, now=now, sink=RecordingSink()
            )
        assert Consultation.objects.count() == 0


@pytest.mark.django_db
class TestNoAvailability:

    def test_no_slots_anywhere(self, clinician, make_request, now):
        with pytest.raises(NoAvailableSlots) as exc_info:
            accept_consultation_request(make_request().pk, clinician, SMS_TEMPLATE, now=now)
        assert exc_info.value.code == 'NO_AVAILABLE_SLOTS'

    def test_self_only_without_own_slots_is_a_distinct_error(
        self, clinician, other_clinician, make_slot, make_request, now
    ):
        make_slot(other_clinician, now + timedelta(hours=1))

        with pytest.raises(NoAvailableSlotsForActor) as exc_info:
            accept_consultation_request(
                make_request().pk, clinician, SMS_TEMPLATE,
                assign_to_requester_only=True, now=now,
            )
        assert exc_info.value.code == 'NO_AVAILABLE_SLOTS_FOR_USER'
        assert not isinstance(exc_info.value, NoAvailableSlots)

    def test_self_only_books_own_slot(self, clinician, other_clinician, make_slot, make_request, now):
        make_slot(other_clinician, now + timedelta(hours=1))
        own = make_slot(clinician, now + timedelta(hours=2))

        consultation = accept_consultation_request(
            make_request().pk, clinician, SMS_TEMPLATE,
            assign_to_requester_only=True, now=now, sink=RecordingSink(),
        )
        assert consultation.slot == own
        assert consultation.assigned_to == clinician

    def test_request_stays_pending_when_no_slot(self, clinician, make_request, now):
        request = make_request()
        with pytest.raises(NoAvailableSlots):
            accept_consultation_request(request.pk, clinician, SMS_TEMPLATE, now=now)
        request.refresh_from_db()
        assert request.status == 'pending'


@pytest.mark.django_db
class TestSlotContention:
    """Races reproduced by offering a slot another request already holds."""

    def test_second_request_gets_no_availability(
        self, clinician, other_clinician, make_slot, make_request, now,
        django_capture_on_commit_callbacks
    ):
        make_slot(clinician, now + timedelta(hours=1))
        first, second = make_request(), make_request()

        with django_capture_on_commit_callbacks(execute=True):
            winner = accept_consultation_request(
                first.pk, clinician, SMS_TEMPLATE, now=now, sink=RecordingSink()
            )
            with pytest.raises(NoAvailableSlots):
                accept_consultation_request(
                    second.pk, other_clinician, SMS_TEMPLATE, now=now, sink=RecordingSink()
                )

        assert Consultation.objects.filter(slot=winner.slot).count() == 1
        assert AuditEvent.objects.filter(entity_type='Consultation', event_type='CREATE').count() == 1

    def test_conflict_moves_on_to_next_slot(
        self, clinician, make_slot, make_request, now, monkeypatch,
        django_capture_on_commit_callbacks
    ):
        taken = make_slot(clinician, now + timedelta(hours=1))
        free = make_slot(clinician, now + timedelta(hours=2))
        accept_consultation_request(
            make_request().pk, clinician, SMS_TEMPLATE, now=now, sink=RecordingSink()
        )
        assert Consultation.objects.get().slot == taken

        monkeypatch.setattr(booking, 'find_next_slot', stale_finder(taken))
        conflicts_before = sample('booking_slot_conflicts_total')
        request = make_request()

        with django_capture_on_commit_callbacks(execute=True):
            consultation = accept_consultation_request(
                request.pk, clinician, SMS_TEMPLATE, now=now, sink=RecordingSink()
            )

        assert consultation.slot == free
        assert sample('booking_slot_conflicts_total') == conflicts_before + 3
        assert Consultation.objects.filter(slot=taken).count() == 1
        # failed attempts were rolled back with their audit callbacks
        assert AuditEvent.objects.filter(entity_type='Consultation', event_type='CREATE').count() == 1
        assert AuditEvent.objects.filter(
            entity_type='ConsultationRequest', entity_id=str(request.pk), event_type='UPDATE'
        ).count() == 1

    def test_exhausted_attempts_report_no_availability(
        self, clinician, make_slot, make_request, now, monkeypatch, settings
    ):
        settings.BOOKING_MAX_ATTEMPTS = 5
        settings.BOOKING_COMMIT_RETRIES = 3
        taken = make_slot(clinician, now + timedelta(hours=1))
        make_slot(clinician, now + timedelta(hours=2))
        accept_consultation_request(
            make_request().pk, clinician, SMS_TEMPLATE, now=now, sink=RecordingSink()
        )

        monkeypatch.setattr(booking, 'find_next_slot', stale_finder(taken, always=True))
        exhausted_before = sample('booking_attempts_exhausted_total')
        conflicts_before = sample('booking_slot_conflicts_total')
        request = make_request()

        with pytest.raises(NoAvailableSlots):
            accept_consultation_request(
                request.pk, clinician, SMS_TEMPLATE, now=now, sink=RecordingSink()
            )

        assert sample('booking_attempts_exhausted_total') == exhausted_before + 1
        assert sample('booking_slot_conflicts_total') == conflicts_before + 15
        request.refresh_from_db()
        assert request.status == 'pending'

    def test_is_slot_conflict_reads_message(self):
        from django.db import IntegrityError

        assert is_slot_conflict(IntegrityError('UNIQUE constraint failed: consultation.slot_id'))
        assert not is_slot_conflict(IntegrityError('UNIQUE constraint failed: consultation.request_id'))


@pytest.mark.django_db
class TestNotificationFailure:

    def test_booking_survives_sink_failure(self, clinician, make_slot, make_request, now):
        slot = make_slot(clinician, now + timedelta(hours=1))
        request = make_request()

        with pytest.raises(NotificationDispatchFailed) as exc_info:
            accept_consultation_request(
                request.pk, clinician, SMS_TEMPLATE, now=now, sink=FailingSink()
            )

        consultation = exc_info.value.consultation
        assert Consultation.objects.get(pk=consultation.pk).slot == slot
        request.refresh_from_db()
        assert request.status == 'accepted'


@pytest.mark.django_db(transaction=True)
def test_concurrent_accepts_for_single_slot(clinician, other_clinician, make_slot, make_request, now):
    """
    Two accept calls on two threads, one eligible slot: exactly one wins.

    Needs a database with row-level concurrency; SQLite serialises writers.
    """
    if connection.vendor == 'sqlite':
        pytest.skip('SQLite serialises write transactions; run with --ds=config.settings_test_pg')

    slot = make_slot(clinician, now + timedelta(hours=1))
    requests = [make_request(), make_request()]
    actors = [clinician, other_clinician]
    barrier = threading.Barrier(len(requests))
    results = []
    lock = threading.Lock()

    def worker(request, actor):
        try:
            barrier.wait()
            try:
                outcome = accept_consultation_request(
                    request.pk, actor, SMS_TEMPLATE, now=now, sink=RecordingSink()
                )
            except NoAvailableSlots as exc:
                outcome = exc
            with lock:
                results.append(outcome)
        finally:
            connection.close()

    threads = [threading.Thread(target=worker, args=pair) for pair in zip(requests, actors)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    booked = [r for r in results if isinstance(r, Consultation)]
    refused = [r for r in results if isinstance(r, NoAvailableSlots)]
    assert len(booked) == 1
    assert len(refused) == 1
    assert Consultation.objects.filter(slot=slot).count() == 1
