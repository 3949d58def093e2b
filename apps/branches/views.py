from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.permissions import IsVenueAdmin
from .models import Branch
from .serializers import (
    BranchSerializer,
    BranchInputSerializer,
    BranchSettingsSerializer,
    BranchSettingsInputSerializer,
)
from .services import (
    create_branch,
    update_branch,
    deactivate_branch,
    get_branch_settings,
    update_branch_settings,
    BranchServiceError,
    BranchNotFoundError,
    BranchPermissionError,
)


class BranchViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Branch operations.

    list: Active branches (admins see inactive ones too)
    create: Create a branch (admin)
    retrieve: Get a branch
    update: Update a branch (admin)
    destroy: Deactivate a branch (admin)
    venue_settings: Read (any user) or change (admin) receipt settings
    """

    queryset = Branch.objects.select_related('created_by')
    serializer_class = BranchSerializer
    lookup_value_regex = '[0-9a-f-]{36}'
    permission_classes = [IsAuthenticated]

    def get_permissions(self):
        if self.action in ['create', 'update', 'partial_update', 'destroy']:
            return [IsAuthenticated(), IsVenueAdmin()]
        if self.action == 'venue_settings' and self.request.method != 'GET':
            return [IsAuthenticated(), IsVenueAdmin()]
        return super().get_permissions()

    def get_queryset(self):
        queryset = super().get_queryset()
        if not self.request.user.is_venue_admin:
            queryset = queryset.filter(is_active=True)
        return queryset

    @extend_schema(request=BranchInputSerializer, responses={201: BranchSerializer})
    def create(self, request, *args, **kwargs):
        serializer = BranchInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data.copy()
        data.pop('is_active', None)

        try:
            branch = create_branch(created_by=request.user, **data)
        except BranchServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(BranchSerializer(branch).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=BranchInputSerializer, responses={200: BranchSerializer})
    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        serializer = BranchInputSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        try:
            branch = update_branch(branch_id=kwargs['pk'], **serializer.validated_data)
        except BranchNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except BranchServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(BranchSerializer(branch).data)

    def destroy(self, request, *args, **kwargs):
        """Deactivate instead of deleting; history keeps referencing the branch."""
        try:
            deactivate_branch(branch_id=kwargs['pk'])
        except BranchNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        methods=['GET'],
        responses={200: BranchSettingsSerializer},
        description="Receipt header and ticket rules; defaults are created on first read.",
    )
    @extend_schema(
        methods=['PUT', 'PATCH'],
        request=BranchSettingsInputSerializer,
        responses={200: BranchSettingsSerializer},
        description="Change receipt settings (admin).",
    )
    @action(detail=True, methods=['get', 'put', 'patch'], url_path='settings', url_name='settings')
    def venue_settings(self, request, pk=None):
        """
        GET       /api/branches/{id}/settings/
        PUT/PATCH /api/branches/{id}/settings/
        """
        branch = self.get_object()

        if request.method == 'GET':
            return Response(BranchSettingsSerializer(get_branch_settings(branch=branch)).data)

        serializer = BranchSettingsInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        try:
            branch_settings = update_branch_settings(
                branch_id=branch.id,
                user=request.user,
                **serializer.validated_data,
            )
        except BranchNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except BranchPermissionError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except BranchServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(BranchSettingsSerializer(branch_settings).data)
