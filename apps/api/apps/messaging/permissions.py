"""
SMS gateway authentication: shared API key in the X-API-Key header.
"""
import hmac

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from rest_framework import permissions
from rest_framework.exceptions import AuthenticationFailed


class HasSmsApiKey(permissions.BasePermission):
    """Allow requests carrying the configured SMS_API_KEY."""

    def has_permission(self, request, view):
        expected = settings.SMS_API_KEY
        if not expected:
            raise ImproperlyConfigured('SMS_API_KEY is not set')
        provided = request.headers.get('X-API-Key') or request.headers.get('Api-Key')
        if not provided:
            raise AuthenticationFailed('X-API-Key header is required')
        if not hmac.compare_digest(provided, expected):
            raise AuthenticationFailed('Invalid API key')
        return True
