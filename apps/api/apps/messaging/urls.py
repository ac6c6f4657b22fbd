"""
SMS gateway URLs (X-API-Key).
"""
from django.urls import path

from .views import IncomingSmsView, MarkOutgoingSentView, OutgoingSmsView

urlpatterns = [
    path('sms/messages/', IncomingSmsView.as_view(), name='sms-incoming'),
    path('sms/outgoing/', OutgoingSmsView.as_view(), name='sms-outgoing'),
    path('sms/outgoing/mark-sent/', MarkOutgoingSentView.as_view(), name='sms-mark-sent'),
]
