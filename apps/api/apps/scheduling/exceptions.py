"""
Scheduling domain errors.
"""
from apps.audit.exceptions import ProtectedRecordDeletion
from apps.core.exceptions import DomainError


class SlotNotFound(DomainError):
    code = 'SLOT_NOT_FOUND'
    default_message = 'Slot not found'
    status_code = 404


class SlotBooked(ProtectedRecordDeletion):
    code = 'SLOT_HAS_CONSULTATION'
    default_message = (
        'Cannot delete a slot that has a consultation assigned. '
        'This slot is part of a medical record and must be preserved.'
    )


class AvailabilityNotAllowed(DomainError):
    code = 'AVAILABILITY_NOT_ALLOWED'
    default_message = 'This user cannot manage availability.'
    status_code = 403


class InvalidSlotTimes(DomainError):
    code = 'INVALID_SLOT_TIMES'
    default_message = 'Invalid slot times'
