"""
Health check endpoints.

/healthz: process is up. /readyz: database reachable and the audit log
table readable (bookings must not be accepted without an audit trail).
"""
import logging
from django.http import JsonResponse
from django.views import View
from django.db import DatabaseError, connection
from django.conf import settings

logger = logging.getLogger(__name__)


class HealthzView(View):
    """
    Liveness probe. Does not check dependencies.
    """

    def get(self, request):
        health_data = {
            'status': 'ok',
            'version': getattr(settings, 'VERSION', 'unknown'),
        }

        commit_hash = getattr(settings, 'COMMIT_HASH', None)
        if commit_hash:
            health_data['commit'] = commit_hash

        return JsonResponse(health_data, status=200)


class ReadyzView(View):
    """
    Readiness probe: 200 when every check passes, 503 otherwise.
    """

    def get(self, request):
        checks = {
            'database': self._check_database(),
            'audit_log': self._check_audit_log(),
        }

        all_healthy = all(checks.values())

        response_data = {
            'status': 'ready' if all_healthy else 'not_ready',
            'checks': checks,
        }

        return JsonResponse(response_data, status=200 if all_healthy else 503)

    def _check_database(self):
        try:
            with connection.cursor() as cursor:
                cursor.execute('SELECT 1')
                return True
        except DatabaseError as e:
            self._log_failure('database', e)
            return False

    def _check_audit_log(self):
        from apps.audit.models import AuditEvent

        try:
            AuditEvent.objects.only('id').first()
            return True
        except DatabaseError as e:
            self._log_failure('audit_log', e)
            return False

    def _log_failure(self, check, error):
        logger.error(
            'Readiness check failed',
            extra={
                'event': 'health_check_failed',
                'check': check,
                'error': str(error)
            }
        )
