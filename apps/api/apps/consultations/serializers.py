"""
Consultation serializers.
"""
from rest_framework import serializers

from .models import Consultation, ConsultationRequest


class ConsultationRequestSerializer(serializers.ModelSerializer):
    class Meta:
        model = ConsultationRequest
        fields = [
            'id',
            'phone_number',
            'description',
            'status',
            'status_actioned_by',
            'status_actioned_at',
            'created_at',
        ]
        read_only_fields = ['id', 'status', 'status_actioned_by', 'status_actioned_at', 'created_at']


class ConsultationSerializer(serializers.ModelSerializer):
    slot_start = serializers.DateTimeField(source='slot.start_datetime', read_only=True)

    class Meta:
        model = Consultation
        fields = ['id', 'assigned_to', 'request', 'slot', 'slot_start', 'created_at']
        read_only_fields = fields


class AcceptRequestSerializer(serializers.Serializer):
    """
    POST /api/v1/consultation-requests/{id}/accept/ body.

    template_body may contain {consultationTime}.
    """
    template_body = serializers.CharField()
    assign_to_requester_only = serializers.BooleanField(default=False)
