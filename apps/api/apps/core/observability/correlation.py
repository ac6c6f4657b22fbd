"""
Request correlation middleware.

Generates/propagates X-Request-ID, keeps the caller in thread-local
context for log records, and counts requests per route.
"""
import uuid
import time
import logging
from django.utils.deprecation import MiddlewareMixin
from threading import local

from .metrics import metrics

_request_context = local()

logger = logging.getLogger(__name__)


def get_request_id():
    """Get current request ID from thread-local storage."""
    return getattr(_request_context, 'request_id', None)


def get_user_id():
    """Get current user ID from thread-local storage."""
    return getattr(_request_context, 'user_id', None)


def get_user_roles():
    """Get current user roles from thread-local storage."""
    return getattr(_request_context, 'user_roles', [])


def _route_label(request):
    """URL pattern of the matched view, never the raw path (ids stay out of labels)."""
    match = getattr(request, 'resolver_match', None)
    if match is not None and match.route:
        return match.route
    return 'unmatched'


class RequestCorrelationMiddleware(MiddlewareMixin):
    """
    - Generates/propagates X-Request-ID
    - Stores request id and session user in thread-local for logging
    - Echoes X-Request-ID on the response
    - Logs completion and counts http_requests_total by route
    """

    REQUEST_ID_HEADER = 'HTTP_X_REQUEST_ID'

    def process_request(self, request):
        request_id = request.META.get(self.REQUEST_ID_HEADER) or str(uuid.uuid4())

        request.request_id = request_id
        request.start_time = time.time()
        _request_context.request_id = request_id

        # JWT users are resolved later by DRF; only session users are known here
        user = getattr(request, 'user', None)
        if user is not None and user.is_authenticated:
            _request_context.user_id = str(user.id)
            _request_context.user_roles = list(
                user.user_roles.values_list('role__name', flat=True)
            )
        else:
            _request_context.user_id = None
            _request_context.user_roles = []

    def process_response(self, request, response):
        if hasattr(request, 'request_id'):
            response['X-Request-ID'] = request.request_id

        if hasattr(request, 'start_time'):
            duration_ms = (time.time() - request.start_time) * 1000
            route = _route_label(request)

            metrics.http_requests_total.labels(
                path=route,
                method=request.method,
                status=str(response.status_code)
            ).inc()

            logger.info(
                'Request completed',
                extra={
                    'event': 'http_request_completed',
                    'route': route,
                    'method': request.method,
                    'status_code': response.status_code,
                    'duration_ms': round(duration_ms, 2),
                    'request_id': request.request_id,
                    'user_id': get_user_id(),
                }
            )

        return response

    def process_exception(self, request, exception):
        metrics.exceptions_total.labels(
            exception_type=exception.__class__.__name__,
            location=_route_label(request)
        ).inc()

        logger.error(
            f'Request failed: {exception.__class__.__name__}',
            exc_info=True,
            extra={
                'event': 'http_request_exception',
                'route': _route_label(request),
                'method': request.method,
                'exception_type': exception.__class__.__name__,
                'request_id': getattr(request, 'request_id', None),
                'user_id': get_user_id(),
            }
        )


def clear_request_context():
    """Clear thread-local request context (useful for testing)."""
    for attr in ['request_id', 'user_id', 'user_roles']:
        if hasattr(_request_context, attr):
            delattr(_request_context, attr)
