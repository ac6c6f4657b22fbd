"""
Consultation views - request intake, accept (booking), reject.
"""
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from apps.authz.permissions import IsClinicalStaff
from apps.core.exceptions import DomainError
from apps.core.views import domain_error_response
from .booking import accept_consultation_request
from .exceptions import NotificationDispatchFailed
from .models import ConsultationRequest
from .serializers import (
    AcceptRequestSerializer,
    ConsultationRequestSerializer,
    ConsultationSerializer,
)
from .services import create_consultation_request, reject_consultation_request


class ConsultationRequestViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    GET  /api/v1/consultation-requests/?status=pending
    POST /api/v1/consultation-requests/
    POST /api/v1/consultation-requests/{id}/accept/
    POST /api/v1/consultation-requests/{id}/reject/
    """
    serializer_class = ConsultationRequestSerializer
    permission_classes = [IsClinicalStaff]
    lookup_value_regex = r'\d+'

    def get_queryset(self):
        queryset = ConsultationRequest.objects.all()
        request_status = self.request.query_params.get('status')
        if request_status:
            queryset = queryset.filter(status=request_status)
        return queryset

    def create(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        consultation_request = create_consultation_request(
            phone_number=serializer.validated_data['phone_number'],
            description=serializer.validated_data.get('description', ''),
            actor=request.user,
        )
        return Response(
            ConsultationRequestSerializer(consultation_request).data,
            status=status.HTTP_201_CREATED
        )

    @action(detail=True, methods=['post'])
    def accept(self, request, pk=None):
        """
        Book the earliest eligible slot for this request.

        Returns:
            201: consultation booked (notification included)
            201: consultation booked, "notification" carries the dispatch error
            400: request already finalized, or no availability
            404: unknown request
        """
        serializer = AcceptRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            consultation = accept_consultation_request(
                pk,
                request.user,
                serializer.validated_data['template_body'],
                assign_to_requester_only=serializer.validated_data['assign_to_requester_only'],
            )
        except ConsultationRequest.DoesNotExist:
            raise NotFound('Consultation request not found')
        except NotificationDispatchFailed as exc:
            data = ConsultationSerializer(exc.consultation).data
            data['notification'] = exc.as_dict()
            return Response(data, status=status.HTTP_201_CREATED)
        except DomainError as exc:
            return domain_error_response(exc)

        return Response(ConsultationSerializer(consultation).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def reject(self, request, pk=None):
        try:
            consultation_request = reject_consultation_request(pk, request.user)
        except ConsultationRequest.DoesNotExist:
            raise NotFound('Consultation request not found')
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(ConsultationRequestSerializer(consultation_request).data)
