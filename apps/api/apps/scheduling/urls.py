"""
Scheduling URLs - slots.
"""
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import SlotViewSet

router = DefaultRouter()
router.register(r'slots', SlotViewSet, basename='slot')

urlpatterns = [
    path('', include(router.urls)),
]
