"""
Notification sinks.

A sink receives a rendered message and a destination. The booking flow
calls it after commit; whatever it raises is reported as a failed
notification, never as a failed booking.
"""
from apps.core.observability import get_sanitized_logger
from apps.messaging.models import OutgoingSmsMessage

logger = get_sanitized_logger(__name__)


class OutgoingSmsSink:
    """Queue the message for the SMS gateway."""

    def send(self, phone_number, body, actor, consultation=None):
        message = OutgoingSmsMessage.objects.create(
            phone_number=phone_number,
            body=body,
            sent_by=actor,
            consultation=consultation,
            audit_actor=actor,
        )
        logger.info(
            'Outgoing SMS queued',
            extra={
                'outgoing_sms_id': message.pk,
                'consultation_id': str(consultation.pk) if consultation else None,
            }
        )
        return message
