from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status
from drf_spectacular.utils import extend_schema

from apps.accounts.permissions import HasBranch
from .reports import ReportQueries
from .serializers import (
    # Input serializers
    DailyQuerySerializer,
    RangeQuerySerializer,
    # Response serializers
    DailySummarySerializer,
    RangeSummarySerializer,
    DashboardResponseSerializer,
    ErrorSerializer,
)
from .exceptions import InvalidDateRangeError


@extend_schema(
    parameters=[DailyQuerySerializer],
    responses={200: DailySummarySerializer},
    description="Totals for one venue-local day; refreshes the stored daily snapshot.",
    tags=['reports'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, HasBranch])
def daily_summary(request):
    """Daily summary for the user's branch - thin HTTP handler."""
    query_serializer = DailyQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)

    summary = ReportQueries.daily_summary(
        branch=request.user.branch,
        day=query_serializer.validated_data.get('date'),
    )

    return Response(DailySummarySerializer(summary).data)


@extend_schema(
    parameters=[RangeQuerySerializer],
    responses={
        200: RangeSummarySerializer,
        400: ErrorSerializer,
    },
    description="Per-day totals and range totals for an inclusive date range.",
    tags=['reports'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, HasBranch])
def range_summary(request):
    query_serializer = RangeQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    try:
        data = ReportQueries.range_summary(
            branch=request.user.branch,
            start_date=params['start_date'],
            end_date=params['end_date'],
        )
    except InvalidDateRangeError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(RangeSummarySerializer(data).data)


@extend_schema(
    responses={200: DashboardResponseSerializer},
    description="Today's activity, all-time totals, 10-day timeline and top customers.",
    tags=['reports'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, HasBranch])
def dashboard(request):
    data = ReportQueries.dashboard(branch=request.user.branch)
    return Response(DashboardResponseSerializer(data).data)
