"""
SMS gateway services and notification text.
"""
from datetime import datetime

import pytest
import pytz
from django.utils import timezone

from apps.audit.exceptions import DeletionForbidden
from apps.audit.models import AuditEvent
from apps.consultations.models import ConsultationRequest
from apps.messaging.exceptions import OutgoingMessageNotFound
from apps.messaging.models import OutgoingSmsMessage, SmsMessage
from apps.messaging.services import (
    ingest_incoming_messages,
    mark_outgoing_message_sent,
    pending_outgoing_messages,
)
from apps.messaging.sinks import OutgoingSmsSink
from apps.messaging.templates import format_relative, render_sms_template

KINSHASA = pytz.timezone('Africa/Kinshasa')
NOW = KINSHASA.localize(datetime(2030, 1, 15, 12, 0))


class TestRenderSmsTemplate:

    def test_replaces_every_occurrence(self):
        body = render_sms_template('{a} and {a} then {b}', {'a': 'x', 'b': 'y'})
        assert body == 'x and x then y'

    def test_unknown_tokens_left_untouched(self):
        assert render_sms_template('Hello {name}', {'other': 'x'}) == 'Hello {name}'


class TestFormatRelative:

    @pytest.mark.parametrize('instant, expected', [
        (KINSHASA.localize(datetime(2030, 1, 15, 14, 30)), 'Today 14:30'),
        (KINSHASA.localize(datetime(2030, 1, 16, 9, 0)), 'Tomorrow 09:00'),
        (KINSHASA.localize(datetime(2030, 1, 14, 8, 0)), 'Yesterday 08:00'),
        (KINSHASA.localize(datetime(2030, 1, 17, 9, 5)), '17/01/2030 09:05'),
    ])
    def test_relative_labels(self, instant, expected):
        assert format_relative(instant, NOW, KINSHASA) == expected

    def test_converts_utc_to_clinic_time(self):
        instant = pytz.utc.localize(datetime(2030, 1, 15, 13, 30))
        assert format_relative(instant, NOW, 'Africa/Kinshasa') == 'Today 14:30'

    def test_day_boundary_uses_clinic_date(self):
        # 23:30 UTC on the 15th is 00:30 on the 16th in Kinshasa
        instant = pytz.utc.localize(datetime(2030, 1, 15, 23, 30))
        assert format_relative(instant, NOW, KINSHASA) == 'Tomorrow 00:30'

    def test_defaults_to_clinic_time_zone(self):
        instant = KINSHASA.localize(datetime(2030, 1, 15, 14, 30))
        assert format_relative(instant, NOW) == 'Today 14:30'


@pytest.mark.django_db
class TestIngestIncomingMessages:

    def test_creates_sms_and_pending_request_per_message(self, sms_actor, django_capture_on_commit_callbacks):
        received = timezone.now().replace(microsecond=0)

        with django_capture_on_commit_callbacks(execute=True):
            requests = ingest_incoming_messages([
                {'sender': '+243810000001', 'text': 'Fever', 'created_at': received},
                {'sender': '+243810000002', 'text': 'Headache', 'created_at': received},
            ])

        assert len(requests) == 2
        assert all(r.status == 'pending' for r in requests)
        assert ConsultationRequest.objects.get(phone_number='+243810000002').description == 'Headache'

        sms = SmsMessage.objects.get(phone_number='+243810000001')
        assert sms.direction == 'incoming'
        assert sms.created_at == received

        events = AuditEvent.objects.filter(entity_type__in=['SmsMessage', 'ConsultationRequest'])
        assert events.count() == 4
        assert {e.actor_id for e in events} == {sms_actor.pk}


@pytest.mark.django_db
class TestOutgoingQueue:

    def test_sink_enqueues_pending_message(self, clinician):
        message = OutgoingSmsSink().send('+243810000001', 'See you soon', clinician)
        assert message.success is None
        assert list(pending_outgoing_messages()) == [message]

    def test_mark_sent_logs_and_links_message(self, clinician):
        message = OutgoingSmsSink().send('+243810000001', 'See you soon', clinician)

        mark_outgoing_message_sent(message.pk, True)

        message.refresh_from_db()
        assert message.success is True
        assert message.sent_message.direction == 'outgoing'
        assert message.sent_message.body == 'See you soon'
        assert not pending_outgoing_messages().exists()

    def test_mark_failed(self, clinician):
        message = OutgoingSmsSink().send('+243810000001', 'See you soon', clinician)

        mark_outgoing_message_sent(message.pk, False)

        message.refresh_from_db()
        assert message.success is False
        assert message.sent_message is None
        assert not SmsMessage.objects.filter(direction='outgoing').exists()

    def test_unknown_message(self, db):
        with pytest.raises(OutgoingMessageNotFound):
            mark_outgoing_message_sent(424242, True)

    def test_outgoing_messages_are_never_deleted(self, clinician):
        message = OutgoingSmsSink().send('+243810000001', 'See you soon', clinician)
        with pytest.raises(DeletionForbidden):
            message.delete()
        assert OutgoingSmsMessage.objects.filter(pk=message.pk).exists()
