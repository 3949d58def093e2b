from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiTypes

from apps.accounts.permissions import IsVenueAdmin, HasBranch
from apps.accounts.services import NoBranchAssignedError
from apps.sequences.services import StorageUnavailableError
from .models import Expense
from .serializers import (
    ExpenseSerializer,
    ExpenseInputSerializer,
    ExpenseFilterSerializer,
    ExpenseSummarySerializer,
)
from .services import (
    create_expense,
    update_expense,
    delete_expense,
    expense_categories,
    filter_expenses,
    expense_summary,
    # Exceptions
    ExpensesServiceError,
    ExpenseNotFoundError,
    ExpensePermissionError,
)


class ExpensePagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class ExpenseViewSet(viewsets.ModelViewSet):
    """
    ViewSet for branch expenses.

    list: Expenses, newest first (filterable)
    create: Record an expense
    retrieve: Get an expense
    update: Edit an expense (admin or recording staff)
    destroy: Delete an expense (admin)
    """

    serializer_class = ExpenseSerializer
    permission_classes = [IsAuthenticated, HasBranch]
    pagination_class = ExpensePagination
    lookup_value_regex = '[0-9a-f-]{36}'

    def get_queryset(self):
        return Expense.objects.filter(
            branch_id=self.request.user.branch_id
        ).select_related('branch', 'staff')

    def get_permissions(self):
        if self.action == 'destroy':
            return [IsAuthenticated(), HasBranch(), IsVenueAdmin()]
        return super().get_permissions()

    def _filtered_queryset(self, request):
        filters = ExpenseFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        return filter_expenses(self.get_queryset(), **filters.validated_data)

    @extend_schema(parameters=[ExpenseFilterSerializer])
    def list(self, request, *args, **kwargs):
        queryset = self._filtered_queryset(request)

        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(ExpenseSerializer(page, many=True).data)
        return Response(ExpenseSerializer(queryset, many=True).data)

    @extend_schema(request=ExpenseInputSerializer, responses={201: ExpenseSerializer})
    def create(self, request, *args, **kwargs):
        serializer = ExpenseInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            expense = create_expense(staff=request.user, **serializer.validated_data)
        except StorageUnavailableError as e:
            return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        except NoBranchAssignedError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except ExpensesServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=ExpenseInputSerializer, responses={200: ExpenseSerializer})
    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        serializer = ExpenseInputSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        try:
            expense = update_expense(expense_id=kwargs['pk'], user=request.user, **serializer.validated_data)
        except ExpenseNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except ExpensePermissionError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except ExpensesServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ExpenseSerializer(expense).data)

    def destroy(self, request, *args, **kwargs):
        try:
            delete_expense(expense_id=kwargs['pk'], user=request.user)
        except ExpenseNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except ExpensePermissionError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(responses={200: OpenApiTypes.OBJECT})
    @action(detail=False, methods=['get'])
    def categories(self, request):
        """Common categories plus those already used in this branch."""
        return Response({'categories': expense_categories(branch=request.user.branch)})

    @extend_schema(parameters=[ExpenseFilterSerializer], responses={200: ExpenseSummarySerializer})
    @action(detail=False, methods=['get'])
    def summary(self, request):
        """Totals for the filtered expenses, by category."""
        queryset = self._filtered_queryset(request)
        return Response(ExpenseSummarySerializer(expense_summary(queryset)).data)
