from apps.core.exceptions import DomainError


class OutgoingMessageNotFound(DomainError):
    code = 'OUTGOING_MESSAGE_NOT_FOUND'
    default_message = 'Outgoing message not found'
    status_code = 404
