from rest_framework import status, serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema
from .models import User
from .permissions import IsVenueAdmin
from .serializers import (
    UserLoginSerializer,
    UserSerializer,
    UserCreateSerializer,
    UserUpdateSerializer,
)
from .services import (
    authenticate_user,
    issue_tokens,
    create_staff_user,
    update_user,
    deactivate_user,
    InvalidCredentialsError,
    InactiveAccountError,
    UserRegistrationError,
    UserNotFoundError,
    CannotDeactivateSelfError,
)


# Response serializers for API documentation
class TokensResponseSerializer(serializers.Serializer):
    refresh = serializers.CharField()
    access = serializers.CharField()


class AuthResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    user = UserSerializer()
    tokens = TokensResponseSerializer()


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


@extend_schema(
    request=UserLoginSerializer,
    responses={
        200: AuthResponseSerializer,
        400: ErrorResponseSerializer,
        401: ErrorResponseSerializer,
        403: ErrorResponseSerializer,
    },
    description="Authenticate with email and password to receive JWT tokens.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    """Login with email and password."""
    serializer = UserLoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        user = authenticate_user(**serializer.validated_data)
    except InvalidCredentialsError as e:
        return Response({'error': str(e)}, status=status.HTTP_401_UNAUTHORIZED)
    except InactiveAccountError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

    return Response({
        'message': 'Login successful',
        'user': UserSerializer(user).data,
        'tokens': issue_tokens(user),
    })


@extend_schema(
    methods=['GET'],
    responses={200: UserSerializer},
    description="Get the current authenticated user's profile.",
    tags=['auth'],
)
@extend_schema(
    methods=['PATCH'],
    request=UserSerializer,
    responses={200: UserSerializer},
    description="Update the current user's display name or phone.",
    tags=['auth'],
)
@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def current_user(request):
    """Get or update the current user's profile."""
    if request.method == 'GET':
        return Response(UserSerializer(request.user).data)

    serializer = UserSerializer(request.user, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    serializer.save()
    return Response(serializer.data)


@extend_schema(
    methods=['GET'],
    responses={200: UserSerializer(many=True)},
    description="List accounts. Admins see their branch; superusers see everyone.",
    tags=['users'],
)
@extend_schema(
    methods=['POST'],
    request=UserCreateSerializer,
    responses={201: UserSerializer, 400: ErrorResponseSerializer},
    description="Create a staff or admin account.",
    tags=['users'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsVenueAdmin])
def users(request):
    """List or create user accounts."""
    if request.method == 'GET':
        queryset = User.objects.select_related('branch').order_by('email')
        if not request.user.is_superuser:
            queryset = queryset.filter(branch_id=request.user.branch_id)
        return Response(UserSerializer(queryset, many=True).data)

    serializer = UserCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        user = create_staff_user(created_by=request.user, **serializer.validated_data)
    except UserRegistrationError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


@extend_schema(
    request=UserUpdateSerializer,
    responses={200: UserSerializer, 404: ErrorResponseSerializer},
    description="Update another user's profile, role or branch.",
    tags=['users'],
)
@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsVenueAdmin])
def user_detail(request, pk):
    serializer = UserUpdateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        user = update_user(user_id=pk, **serializer.validated_data)
    except UserNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    return Response(UserSerializer(user).data)


@extend_schema(
    request=None,
    responses={200: UserSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    description="Deactivate an account so it can no longer log in.",
    tags=['users'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsVenueAdmin])
def deactivate(request, pk):
    try:
        user = deactivate_user(user_id=pk, acting_user=request.user)
    except UserNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except CannotDeactivateSelfError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(UserSerializer(user).data)
