from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import UserRateThrottle

from api.permissions import IsActiveUser
from common.responses import success_response
from .serializers import QuerySerializer, ClearSerializer
from .services import AssistantService


class AssistantRateThrottle(UserRateThrottle):
    scope = 'ai'


def _session_id(request, value):
    # History is kept per user
    return f"{request.user.pk}:{value}"


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsActiveUser])
@throttle_classes([AssistantRateThrottle])
def query_view(request):
    """POST ai/query {query, sessionId} -> {success, response, timestamp}"""
    serializer = QuerySerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    service = AssistantService(
        _session_id(request, serializer.validated_data['sessionId']), user=request.user, request=request
    )
    answer = service.answer(serializer.validated_data['query'])
    return Response({'success': True, 'response': answer, 'timestamp': timezone.now().isoformat()})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsActiveUser])
def clear_view(request):
    serializer = ClearSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    AssistantService(
        _session_id(request, serializer.validated_data['sessionId']), user=request.user, request=request
    ).clear()
    return success_response(message="Conversation cleared")
