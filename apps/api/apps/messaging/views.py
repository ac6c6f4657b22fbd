"""
SMS gateway views.

POST /api/v1/sms/messages/           - inbound messages, one request each
GET  /api/v1/sms/outgoing/           - messages waiting to be sent
POST /api/v1/sms/outgoing/mark-sent/ - delivery report
"""
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.exceptions import DomainError
from apps.core.views import domain_error_response
from .permissions import HasSmsApiKey
from .serializers import IncomingSmsSerializer, MarkSentSerializer, OutgoingSmsSerializer
from .services import ingest_incoming_messages, mark_outgoing_message_sent, pending_outgoing_messages


class SmsGatewayView(APIView):
    authentication_classes = []
    permission_classes = [HasSmsApiKey]


class IncomingSmsView(SmsGatewayView):

    def post(self, request):
        serializer = IncomingSmsSerializer(data=request.data, many=True)
        serializer.is_valid(raise_exception=True)
        ingest_incoming_messages(serializer.validated_data)
        return Response({'success': True}, status=status.HTTP_200_OK)


class OutgoingSmsView(SmsGatewayView):

    def get(self, request):
        return Response(OutgoingSmsSerializer(pending_outgoing_messages(), many=True).data)


class MarkOutgoingSentView(SmsGatewayView):

    def post(self, request):
        serializer = MarkSentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            mark_outgoing_message_sent(
                serializer.validated_data['id'],
                serializer.validated_data['success'],
            )
        except DomainError as exc:
            return domain_error_response(exc)
        return Response({'success': True})
