"""
SMS gateway services: inbound ingestion and the outgoing queue.

Every write here is machine-originated and attributed to the SMS
service actor.
"""
from django.db import transaction
from django.utils import timezone

from apps.authz.system_actors import SMS_SERVICE, get_system_actor
from apps.consultations.services import create_consultation_request
from apps.core.observability import get_sanitized_logger, log_domain_event, metrics
from apps.messaging.exceptions import OutgoingMessageNotFound
from apps.messaging.models import OutgoingSmsMessage, SmsDirectionChoices, SmsMessage

logger = get_sanitized_logger(__name__)


def ingest_incoming_messages(messages):
    """
    Record inbound messages and open one consultation request per message.

    Args:
        messages: iterable of {'sender', 'text', 'created_at'} where
            created_at is an aware datetime

    Returns:
        list of created ConsultationRequest
    """
    actor = get_system_actor(SMS_SERVICE)
    created = []
    with transaction.atomic():
        for message in messages:
            SmsMessage.objects.create(
                phone_number=message['sender'],
                body=message['text'],
                direction=SmsDirectionChoices.INCOMING,
                created_at=message['created_at'],
                audit_actor=actor,
            )
            created.append(
                create_consultation_request(
                    phone_number=message['sender'],
                    description=message['text'],
                    actor=actor,
                )
            )

    metrics.sms_ingested_total.inc(len(created))
    log_domain_event(
        'sms_ingested',
        entity_type='SmsMessage',
        actor_id=str(actor.pk),
        message_count=len(created),
    )
    return created


def pending_outgoing_messages():
    """Messages the gateway has not reported on yet, oldest first."""
    return OutgoingSmsMessage.objects.filter(success__isnull=True).order_by('created_at', 'id')


def mark_outgoing_message_sent(message_id, success):
    """
    Record the gateway's delivery report for one outgoing message.

    On success the delivered text is logged as an outgoing SmsMessage and
    linked; otherwise the message is marked failed.

    Raises:
        OutgoingMessageNotFound: unknown id
    """
    actor = get_system_actor(SMS_SERVICE)
    with transaction.atomic():
        outgoing = OutgoingSmsMessage.objects.select_for_update().filter(pk=message_id).first()
        if outgoing is None:
            raise OutgoingMessageNotFound()

        if success:
            sent = SmsMessage.objects.create(
                phone_number=outgoing.phone_number,
                body=outgoing.body,
                direction=SmsDirectionChoices.OUTGOING,
                created_at=timezone.now(),
                audit_actor=actor,
            )
            outgoing.sent_message = sent
            outgoing.success = True
            outgoing.save(update_fields=['sent_message', 'success'], audit_actor=actor)
        else:
            outgoing.success = False
            outgoing.save(update_fields=['success'], audit_actor=actor)

    log_domain_event(
        'outgoing_sms_reported',
        entity_type='OutgoingSmsMessage',
        entity_id=str(outgoing.pk),
        result='success' if success else 'failure',
    )
    return outgoing
