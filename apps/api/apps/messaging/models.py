"""
Messaging models: sms_message, outgoing_sms_message

sms_message is the log of messages received from and delivered to
patients. outgoing_sms_message is the queue polled by the SMS gateway.
"""
from django.conf import settings
from django.db import models
from django.utils import timezone

from apps.audit.gatekeeper import AuditedModel


class SmsDirectionChoices(models.TextChoices):
    INCOMING = 'incoming', 'Incoming'
    OUTGOING = 'outgoing', 'Outgoing'


class SmsMessage(AuditedModel):
    phone_number = models.CharField(max_length=32)
    body = models.TextField()
    direction = models.CharField(
        max_length=10,
        choices=SmsDirectionChoices.choices,
        default=SmsDirectionChoices.INCOMING
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'sms_message'
        verbose_name = 'SMS Message'
        verbose_name_plural = 'SMS Messages'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['phone_number', 'created_at'], name='idx_sms_phone_created'),
        ]

    def __str__(self):
        return f"SMS {self.pk} ({self.direction})"


class OutgoingSmsMessage(AuditedModel):
    """
    Message waiting to be sent by the SMS gateway.

    success is None while pending, then True or False once the gateway
    reports back. A successful send is linked to the logged SmsMessage.
    """
    phone_number = models.CharField(max_length=32)
    body = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)
    success = models.BooleanField(null=True, blank=True)
    sent_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='outgoing_sms_messages'
    )
    sent_message = models.OneToOneField(
        SmsMessage,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='outgoing_message'
    )
    consultation = models.ForeignKey(
        'consultations.Consultation',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='outgoing_sms_messages'
    )

    class Meta:
        db_table = 'outgoing_sms_message'
        verbose_name = 'Outgoing SMS Message'
        verbose_name_plural = 'Outgoing SMS Messages'
        ordering = ['created_at', 'id']

    def __str__(self):
        state = 'pending' if self.success is None else ('sent' if self.success else 'failed')
        return f"Outgoing SMS {self.pk} ({state})"
