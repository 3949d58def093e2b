from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from apps.accounts.permissions import IsVenueAdmin, HasBranch
from apps.accounts.services import NoBranchAssignedError
from apps.sequences.services import StorageUnavailableError
from .models import Sale
from .serializers import (
    SaleSerializer,
    SaleCreateSerializer,
    SaleFilterSerializer,
    SalesSummarySerializer,
)
from .services import (
    create_sale,
    delete_sale,
    filter_sales,
    sales_summary,
    # Exceptions
    SalesServiceError,
    SaleNotFoundError,
    SalePermissionError,
)


class SalePagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class SaleViewSet(viewsets.ModelViewSet):
    """
    ViewSet for counter sales, scoped to the user's branch.

    list: Sales, newest first (filterable by date, range, payment method, staff)
    create: Record a sale
    retrieve: Get a sale
    destroy: Delete a sale (admin)
    """

    serializer_class = SaleSerializer
    permission_classes = [IsAuthenticated, HasBranch]
    pagination_class = SalePagination
    lookup_value_regex = '[0-9a-f-]{36}'
    http_method_names = ['get', 'post', 'delete', 'head', 'options']

    def get_queryset(self):
        return Sale.objects.filter(
            branch_id=self.request.user.branch_id
        ).select_related('branch', 'staff').prefetch_related('items')

    def get_permissions(self):
        if self.action == 'destroy':
            return [IsAuthenticated(), HasBranch(), IsVenueAdmin()]
        return super().get_permissions()

    def _filtered_queryset(self, request):
        filters = SaleFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        return filter_sales(self.get_queryset(), **filters.validated_data)

    @extend_schema(parameters=[SaleFilterSerializer])
    def list(self, request, *args, **kwargs):
        queryset = self._filtered_queryset(request)

        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(SaleSerializer(page, many=True).data)
        return Response(SaleSerializer(queryset, many=True).data)

    @extend_schema(request=SaleCreateSerializer, responses={201: SaleSerializer})
    def create(self, request, *args, **kwargs):
        serializer = SaleCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            sale = create_sale(staff=request.user, **serializer.validated_data)
        except StorageUnavailableError as e:
            return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        except NoBranchAssignedError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except SalesServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(SaleSerializer(sale).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):
        try:
            delete_sale(sale_id=kwargs['pk'], user=request.user)
        except SaleNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except SalePermissionError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(parameters=[SaleFilterSerializer], responses={200: SalesSummarySerializer})
    @action(detail=False, methods=['get'])
    def summary(self, request):
        """Totals for the filtered sales."""
        queryset = self._filtered_queryset(request)
        return Response(SalesSummarySerializer(sales_summary(queryset)).data)
