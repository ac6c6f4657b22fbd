"""
Errors raised by the mutation gatekeeper.
"""
from apps.core.exceptions import DomainError


class AuditActorRequired(RuntimeError):
    """
    A mutating call on an audited model did not carry an actor.

    This is a programming error, not a business error: every write must
    be attributed (use the request user, or the SMS service actor for
    machine-originated writes). It is never defaulted or swallowed.
    """


class DeletionForbidden(DomainError):
    code = 'DELETE_FORBIDDEN'
    default_message = (
        'DELETE operations are disabled for clinical and administrative data. '
        'Records cannot be deleted; use a status field instead.'
    )


class ProtectedRecordDeletion(DomainError):
    code = 'RECORD_IS_MEDICAL_HISTORY'
    default_message = (
        'This record is part of a medical record and must be preserved.'
    )


class UnsafeBulkDelete(DomainError):
    code = 'UNSAFE_BULK_DELETE'
    default_message = (
        'Bulk deletions must explicitly exclude records linked to medical '
        'history. Narrow the queryset with .unlinked() first.'
    )
