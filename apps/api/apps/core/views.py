"""
Core views - current user, application settings.
"""
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.authz.permissions import IsAdmin
from .models import AppSettings, update_app_settings
from .serializers import AppSettingsSerializer, UserProfileSerializer


def domain_error_response(exc):
    """Translate a DomainError into {'error', 'code'} with its HTTP status."""
    return Response(exc.as_dict(), status=exc.status_code)


class CurrentUserView(APIView):
    """
    Current authenticated user profile endpoint.

    GET /api/auth/me/ - Returns profile of the authenticated user.

    Response format:
    {
        "id": "uuid",
        "email": "user@example.com",
        "name": "Dr. Example",
        "is_active": true,
        "can_have_availability": true,
        "roles": ["admin", "clinician"]
    }
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        """Return current user profile with roles."""
        user = request.user

        profile_data = {
            'id': user.id,
            'email': user.email,
            'name': user.name,
            'is_active': user.is_active,
            'can_have_availability': user.can_have_availability,
            'roles': list(user.user_roles.values_list('role__name', flat=True)),
        }

        serializer = UserProfileSerializer(profile_data)
        return Response(serializer.data, status=status.HTTP_200_OK)


class AppSettingsView(APIView):
    """
    GET /api/v1/settings/ - current settings (defaults if never saved)
    PATCH /api/v1/settings/ - update settings (Admin only)
    """

    def get_permissions(self):
        if self.request.method == 'GET':
            return [IsAuthenticated()]
        return [IsAuthenticated(), IsAdmin()]

    def get(self, request):
        return Response(AppSettingsSerializer(AppSettings.load()).data)

    def patch(self, request):
        serializer = AppSettingsSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        instance = update_app_settings(request.user, **serializer.validated_data)
        return Response(AppSettingsSerializer(instance).data)
