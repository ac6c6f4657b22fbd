"""
Scheduling serializers.
"""
from rest_framework import serializers

from .models import Slot


class SlotSerializer(serializers.ModelSerializer):
    """Read-only slot representation"""
    is_booked = serializers.BooleanField(read_only=True)

    class Meta:
        model = Slot
        fields = ['id', 'owner', 'start_datetime', 'end_datetime', 'is_booked']
        read_only_fields = fields


class TimeWindowSerializer(serializers.Serializer):
    start = serializers.CharField(max_length=5)
    end = serializers.CharField(max_length=5)


class DayAvailabilitySerializer(serializers.Serializer):
    """
    PUT /api/v1/slots/day/ body.

    {
        "date": "2026-03-02",
        "owner": "uuid",          # optional, defaults to the caller
        "slots": [{"start": "09:00", "end": "09:30"}]
    }
    """
    date = serializers.DateField()
    owner = serializers.UUIDField(required=False)
    slots = TimeWindowSerializer(many=True)
