"""
Consultation URLs.
"""
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import ConsultationRequestViewSet

router = DefaultRouter()
router.register(r'consultation-requests', ConsultationRequestViewSet, basename='consultation-request')

urlpatterns = [
    path('', include(router.urls)),
]
