"""
Structured logging that keeps patient data out of log output.

Consultation requests carry a phone number and a free-text description of
symptoms; SMS bodies repeat both. None of these may reach a log line.
"""
import logging
import json
from datetime import datetime, timezone
from .correlation import get_request_id, get_user_id, get_user_roles

REDACTED = '[REDACTED]'

# Keys whose values are never logged
SENSITIVE_FIELDS = {
    'password',
    'token',
    'secret',
    'api_key',
    'description',
    'body',
    'text',
    'sender',
    'message',
    'name',
    'email',
    'phone',
    'phone_number',
    'template_body',
}

# Attributes every LogRecord carries; anything else came in through extra={}
_RECORD_ATTRS = set(vars(logging.makeLogRecord({}))) | {'message', 'asctime'}


class CorrelationFilter(logging.Filter):
    """Stamp request id and caller onto every record."""

    def filter(self, record):
        record.request_id = get_request_id() or '-'
        record.user_id = get_user_id() or '-'
        record.user_roles = ','.join(get_user_roles()) or '-'
        return True


class SanitizedJSONFormatter(logging.Formatter):
    """One JSON object per line; extra fields pass through sanitize_dict."""

    def format(self, record):
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'request_id': getattr(record, 'request_id', '-'),
            'user_id': getattr(record, 'user_id', '-'),
            'user_roles': getattr(record, 'user_roles', '-'),
        }

        extra = {
            key: value for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and key not in log_data and not key.startswith('_')
        }
        log_data.update(sanitize_dict(extra))

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def get_sanitized_logger(name):
    """
    Get a logger with correlation filter applied.

    Usage:
        logger = get_sanitized_logger(__name__)
        logger.info('Slot deleted', extra={'event': 'slot_deleted', 'slot_id': slot_id})
    """
    logger = logging.getLogger(name)

    if not any(isinstance(f, CorrelationFilter) for f in logger.filters):
        logger.addFilter(CorrelationFilter())

    return logger


def sanitize_dict(data):
    """
    Copy of ``data`` with sensitive keys redacted, recursing into
    nested dicts and lists of dicts.
    """
    if not isinstance(data, dict):
        return data

    sanitized = {}
    for key, value in data.items():
        if key.lower() in SENSITIVE_FIELDS:
            sanitized[key] = REDACTED
        elif isinstance(value, dict):
            sanitized[key] = sanitize_dict(value)
        elif isinstance(value, (list, tuple)):
            sanitized[key] = [sanitize_dict(v) for v in value]
        else:
            sanitized[key] = value

    return sanitized
