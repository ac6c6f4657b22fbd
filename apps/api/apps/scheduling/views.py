"""
Scheduling views - slot listing, day availability, slot deletion.
"""
from django.shortcuts import get_object_or_404
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.authz.models import User
from apps.authz.permissions import IsClinicalStaff
from apps.core.exceptions import DomainError
from apps.core.views import domain_error_response
from .models import Slot
from .serializers import DayAvailabilitySerializer, SlotSerializer
from .services import delete_slot, replace_day_slots


class SlotViewSet(viewsets.GenericViewSet):
    """
    GET    /api/v1/slots/?owner=<uuid>  - list slots
    PUT    /api/v1/slots/day/           - replace a day's unbooked slots
    DELETE /api/v1/slots/{id}/          - delete an unbooked slot
    """
    serializer_class = SlotSerializer
    permission_classes = [IsClinicalStaff]
    lookup_value_regex = r'\d+'

    def get_queryset(self):
        queryset = Slot.objects.select_related('owner', 'consultation')
        owner_id = self.request.query_params.get('owner')
        if owner_id:
            queryset = queryset.filter(owner_id=owner_id)
        return queryset.order_by('start_datetime', 'id')

    def list(self, request):
        serializer = self.get_serializer(self.get_queryset(), many=True)
        return Response(serializer.data)

    def destroy(self, request, pk=None):
        try:
            delete_slot(request.user, pk)
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=['put'], url_path='day')
    def replace_day(self, request):
        serializer = DayAvailabilitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        owner = request.user
        if data.get('owner'):
            owner = get_object_or_404(User, pk=data['owner'])

        try:
            slots = replace_day_slots(request.user, owner, data['date'], data['slots'])
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(SlotSerializer(slots, many=True).data, status=status.HTTP_200_OK)
