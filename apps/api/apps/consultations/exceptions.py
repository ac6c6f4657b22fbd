"""
Consultation domain errors.
"""
from apps.core.exceptions import DomainError


class RequestAlreadyFinalized(DomainError):
    code = 'CONSULTATION_REQUEST_ALREADY_ACCEPTED'
    default_message = 'This consultation request has already been accepted or rejected.'


class NoAvailableSlots(DomainError):
    code = 'NO_AVAILABLE_SLOTS'
    default_message = 'No available slots. Please try again later.'


class NoAvailableSlotsForActor(DomainError):
    code = 'NO_AVAILABLE_SLOTS_FOR_USER'
    default_message = 'You have no available slots. Please manage your availability first.'


class NotificationDispatchFailed(DomainError):
    """
    The booking committed but the notification could not be dispatched.

    The consultation is final; ``consultation`` carries it.
    """
    code = 'NOTIFICATION_DISPATCH_FAILED'
    default_message = 'Consultation booked, but the notification could not be sent.'
    status_code = 502

    def __init__(self, consultation, message=None):
        super().__init__(message, consultation_id=consultation.pk)
        self.consultation = consultation
