"""
Metrics instrumentation wrapper around prometheus_client.
"""
import time
from functools import wraps

from prometheus_client import Counter, Histogram


class MetricsRegistry:
    """
    Central metrics registry.

    Provides typed access to all application metrics.
    """

    def __init__(self):
        """Initialize metrics registry."""
        self._setup_metrics()

    def _create_counter(self, name, description, labels=None):
        """Create a counter metric."""
        return Counter(name, description, labels or [])

    def _create_histogram(self, name, description, labels=None, buckets=None):
        """Create a histogram metric."""
        if buckets:
            return Histogram(name, description, labels or [], buckets=buckets)
        return Histogram(name, description, labels or [])

    def _setup_metrics(self):
        """Setup all application metrics."""

        # ===================================================================
        # HTTP Metrics
        # ===================================================================
        self.http_requests_total = self._create_counter(
            'http_requests_total',
            'Total HTTP requests',
            ['path', 'method', 'status']
        )

        self.exceptions_total = self._create_counter(
            'exceptions_total',
            'Total exceptions',
            ['exception_type', 'location']
        )

        # ===================================================================
        # Booking Metrics
        # ===================================================================
        self.booking_requests_total = self._create_counter(
            'booking_requests_total',
            'Accept-request calls by outcome',
            ['result']  # booked, no_slots, no_slots_for_user, exhausted, already_finalized
        )

        self.booking_slot_conflicts_total = self._create_counter(
            'booking_slot_conflicts_total',
            'Slot uniqueness conflicts observed while committing a booking'
        )

        self.booking_attempts_exhausted_total = self._create_counter(
            'booking_attempts_exhausted_total',
            'Accept calls that ran out of attempts under contention'
        )

        self.booking_duration_seconds = self._create_histogram(
            'booking_duration_seconds',
            'Duration of accept-request calls',
            buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0]
        )

        self.notification_dispatch_total = self._create_counter(
            'notification_dispatch_total',
            'Post-booking notification dispatches',
            ['result']  # sent, failed
        )

        # ===================================================================
        # Audit / Gatekeeper Metrics
        # ===================================================================
        self.audit_events_written_total = self._create_counter(
            'audit_events_written_total',
            'Audit events persisted',
            ['entity_type', 'event_type']
        )

        self.audit_event_write_failed_total = self._create_counter(
            'audit_event_write_failed_total',
            'Audit events that could not be dispatched or persisted',
            ['stage']  # dispatch, write
        )

        self.gatekeeper_blocked_total = self._create_counter(
            'gatekeeper_blocked_total',
            'Mutations rejected by the gatekeeper',
            ['entity_type', 'reason']  # missing_actor, delete_forbidden, linked_record, unsafe_bulk_delete
        )

        # ===================================================================
        # SMS Metrics
        # ===================================================================
        self.sms_ingested_total = self._create_counter(
            'sms_ingested_total',
            'Inbound SMS messages turned into consultation requests'
        )

    def track_duration(self, histogram_metric):
        """
        Decorator to track function duration.

        Usage:
            @metrics.track_duration(metrics.booking_duration_seconds)
            def accept_consultation_request(...):
                ...
        """
        def decorator(func):
            @wraps(func)
            def wrapper(*args, **kwargs):
                start_time = time.time()
                try:
                    return func(*args, **kwargs)
                finally:
                    duration = time.time() - start_time
                    histogram_metric.observe(duration)
            return wrapper
        return decorator


# Global metrics instance
metrics = MetricsRegistry()
