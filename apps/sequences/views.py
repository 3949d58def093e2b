from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.permissions import IsVenueAdmin
from .models import Counter
from .serializers import CounterSerializer, CounterValueSerializer, ErrorSerializer
from .services import current_value, InvalidCounterNameError


@extend_schema(
    responses={200: CounterSerializer(many=True)},
    description="Current value of every sequence counter. Read-only.",
    tags=['sequences'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsVenueAdmin])
def counter_list(request):
    return Response(CounterSerializer(Counter.objects.all(), many=True).data)


@extend_schema(
    responses={
        200: CounterValueSerializer,
        400: ErrorSerializer,
    },
    description="Peek at one counter without advancing it. Unknown names read as 0.",
    tags=['sequences'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsVenueAdmin])
def counter_detail(request, name):
    try:
        value = current_value(name)
    except InvalidCounterNameError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(CounterValueSerializer({'name': name, 'value': value}).data)
