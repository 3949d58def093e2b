from django.utils import timezone
from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from apps.accounts.permissions import IsVenueAdmin, HasBranch
from apps.accounts.services import NoBranchAssignedError
from apps.sequences.services import StorageUnavailableError
from .models import Ticket
from .serializers import (
    TicketSerializer,
    TicketListSerializer,
    TicketCreateSerializer,
    TicketUpdateSerializer,
    TicketFilterSerializer,
    DateRangeFilterSerializer,
    ScanHistoryFilterSerializer,
    StatsFilterSerializer,
    ExtraTimeInputSerializer,
    ExtraTimeEntrySerializer,
    ExtraTimeListResponseSerializer,
    ExtraTimeReportEntrySerializer,
    RefundInputSerializer,
    PartialRefundInputSerializer,
    PlayerStatusInputSerializer,
    QRScanInputSerializer,
    QRScanResponseSerializer,
    QRCodeResponseSerializer,
    TicketScanSerializer,
    TicketStatsSerializer,
    TicketWindowSerializer,
)
from .services import (
    create_ticket,
    lookup_ticket,
    update_ticket,
    delete_ticket,
    update_player_status,
    mark_printed,
    add_extra_time,
    get_extra_time_entries,
    extra_time_report,
    refund_ticket,
    partial_refund,
    scan_ticket,
    scan_history,
    ticket_qr,
    deactivate_expired_tickets,
    ticket_statistics,
    build_receipt,
    # Exceptions
    TicketServiceError,
    TicketNotFoundError,
    TicketPermissionError,
    QRGenerationError,
)
from .services.time_window import describe_window, local_date, local_day_bounds


class TicketPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class TicketViewSet(viewsets.ModelViewSet):
    """
    ViewSet for ticket operations, scoped to the user's branch.

    list: Today's tickets (filterable by date, range, refund state, staff)
    create: Issue a ticket
    retrieve: Get a ticket
    update: Update a ticket (admin or issuing staff)
    destroy: Delete a ticket (admin)
    """

    serializer_class = TicketSerializer
    permission_classes = [IsAuthenticated, HasBranch]
    pagination_class = TicketPagination
    lookup_value_regex = '[0-9a-f-]{36}'

    def get_queryset(self):
        return Ticket.objects.filter(
            branch_id=self.request.user.branch_id
        ).select_related('branch', 'staff', 'refunded_by').prefetch_related(
            'extra_time_entries__added_by'
        ).order_by('-started_at')

    def get_serializer_class(self):
        if self.action == 'list':
            return TicketListSerializer
        return TicketSerializer

    def get_permissions(self):
        if self.action in ['destroy', 'deactivate_expired']:
            return [IsAuthenticated(), HasBranch(), IsVenueAdmin()]
        return super().get_permissions()

    @extend_schema(parameters=[TicketFilterSerializer])
    def list(self, request, *args, **kwargs):
        filters = TicketFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        params = filters.validated_data

        queryset = self.get_queryset()

        if params.get('range') != 'history':
            if params.get('start_date') or params.get('end_date'):
                if params.get('start_date'):
                    queryset = queryset.filter(started_at__gte=local_day_bounds(params['start_date'])[0])
                if params.get('end_date'):
                    queryset = queryset.filter(started_at__lt=local_day_bounds(params['end_date'])[1])
            else:
                day = params.get('date') or local_date(timezone.now())
                start, end = local_day_bounds(day)
                queryset = queryset.filter(started_at__gte=start, started_at__lt=end)

        if params['is_refunded'] is not None:
            queryset = queryset.filter(is_refunded=params['is_refunded'])
        if params.get('staff'):
            queryset = queryset.filter(staff_id=params['staff'])
        if params.get('status'):
            queryset = queryset.filter(status=params['status'])

        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(TicketListSerializer(page, many=True).data)
        return Response(TicketListSerializer(queryset, many=True).data)

    @extend_schema(request=TicketCreateSerializer, responses={201: TicketSerializer})
    def create(self, request, *args, **kwargs):
        serializer = TicketCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            ticket = create_ticket(staff=request.user, **serializer.validated_data)
        except StorageUnavailableError as e:
            return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        except NoBranchAssignedError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except TicketServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(TicketSerializer(ticket).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=TicketUpdateSerializer, responses={200: TicketSerializer})
    def update(self, request, *args, **kwargs):
        kwargs.pop('partial', None)
        serializer = TicketUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        try:
            ticket = update_ticket(ticket_id=kwargs['pk'], user=request.user, **serializer.validated_data)
        except TicketNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except TicketPermissionError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except TicketServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(TicketSerializer(ticket).data)

    def destroy(self, request, *args, **kwargs):
        try:
            delete_ticket(ticket_id=kwargs['pk'], branch=request.user.branch)
        except TicketNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        methods=['GET'],
        responses={200: ExtraTimeListResponseSerializer},
    )
    @extend_schema(
        methods=['POST'],
        request=ExtraTimeInputSerializer,
        responses={201: TicketSerializer},
    )
    @action(detail=True, methods=['get', 'post'], url_path='extra-time')
    def extra_time(self, request, pk=None):
        """List extra-time entries or add more time to the session."""
        if request.method == 'GET':
            try:
                ticket, entries = get_extra_time_entries(ticket_id=pk, branch=request.user.branch)
            except TicketNotFoundError as e:
                return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

            return Response({
                'total_extra_minutes': ticket.total_extra_minutes,
                'entries': ExtraTimeEntrySerializer(entries, many=True).data,
            })

        serializer = ExtraTimeInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            ticket = add_extra_time(ticket_id=pk, user=request.user, **serializer.validated_data)
        except TicketNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except TicketServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(TicketSerializer(ticket).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=RefundInputSerializer, responses={200: TicketSerializer})
    @action(detail=True, methods=['post'])
    def refund(self, request, pk=None):
        """Refund the whole ticket."""
        serializer = RefundInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            ticket = refund_ticket(ticket_id=pk, user=request.user, **serializer.validated_data)
        except TicketNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except TicketPermissionError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except TicketServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(TicketSerializer(ticket).data)

    @extend_schema(request=PartialRefundInputSerializer, responses={200: TicketSerializer})
    @action(detail=True, methods=['post'], url_path='partial-refund')
    def partial_refund(self, request, pk=None):
        """Refund selected players."""
        serializer = PartialRefundInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            ticket = partial_refund(ticket_id=pk, user=request.user, **serializer.validated_data)
        except TicketNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except TicketPermissionError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except TicketServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(TicketSerializer(ticket).data)

    @extend_schema(request=PlayerStatusInputSerializer, responses={200: TicketSerializer})
    @action(detail=True, methods=['post'], url_path='player-status')
    def player_status(self, request, pk=None):
        serializer = PlayerStatusInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            ticket = update_player_status(ticket_id=pk, user=request.user, **serializer.validated_data)
        except TicketNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except TicketServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(TicketSerializer(ticket).data)

    @extend_schema(request=None, responses={200: TicketSerializer})
    @action(detail=True, methods=['post'], url_path='print')
    def mark_printed(self, request, pk=None):
        """Mark the ticket as printed."""
        try:
            ticket = mark_printed(ticket_id=pk, branch=request.user.branch)
        except TicketNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response(TicketSerializer(ticket).data)

    @extend_schema(responses={200: QRCodeResponseSerializer})
    @action(detail=True, methods=['get'])
    def qr(self, request, pk=None):
        """QR payload and PNG data URL for the ticket."""
        try:
            data = ticket_qr(ticket_id=pk, branch=request.user.branch)
        except TicketNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except QRGenerationError as e:
            return Response({'error': str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response(data)

    @action(detail=True, methods=['get'])
    def receipt(self, request, pk=None):
        """Printable receipt data."""
        ticket = self.get_object()
        return Response(build_receipt(ticket))

    @extend_schema(responses={200: TicketWindowSerializer})
    @action(detail=True, methods=['get'])
    def window(self, request, pk=None):
        """Session start, end and minutes remaining right now."""
        ticket = self.get_object()
        return Response(describe_window(
            ticket.started_at,
            ticket.total_extra_minutes,
            ticket.is_refunded,
            now=timezone.now(),
        ))

    @extend_schema(responses={200: TicketSerializer})
    @action(detail=False, methods=['get'], url_path=r'lookup/(?P<identifier>[^/.]+)')
    def lookup(self, request, identifier=None):
        """Find a ticket by ticket number, ID or contact number."""
        try:
            ticket = lookup_ticket(identifier=identifier, branch=request.user.branch)
        except TicketNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response(TicketSerializer(ticket).data)

    @extend_schema(parameters=[StatsFilterSerializer], responses={200: TicketStatsSerializer})
    @action(detail=False, methods=['get'])
    def stats(self, request):
        """Ticket counts, revenue and player totals for a period."""
        serializer = StatsFilterSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)

        data = ticket_statistics(
            branch=request.user.branch,
            period=serializer.validated_data['period'],
        )
        return Response(TicketStatsSerializer(data).data)

    @extend_schema(
        parameters=[DateRangeFilterSerializer],
        responses={200: ExtraTimeReportEntrySerializer(many=True)},
    )
    @action(detail=False, methods=['get'], url_path='extra-time/report')
    def extra_time_report(self, request):
        serializer = DateRangeFilterSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)

        entries = extra_time_report(branch=request.user.branch, **serializer.validated_data)
        return Response(ExtraTimeReportEntrySerializer(entries, many=True).data)

    @extend_schema(request=None)
    @action(detail=False, methods=['post'], url_path='deactivate-expired')
    def deactivate_expired(self, request):
        """Deactivate tickets in this branch whose session has ended (admin)."""
        count = deactivate_expired_tickets(branch=request.user.branch)
        return Response({'deactivated': count})


@extend_schema(request=QRScanInputSerializer, responses={200: QRScanResponseSerializer})
@api_view(['POST'])
@permission_classes([IsAuthenticated, HasBranch])
def scan_qr(request):
    """
    Validate a scanned ticket and report the time left.

    POST /api/qr/scan/
    Body: {"qr_data": "<scanned JSON or ticket number>"}
    """
    serializer = QRScanInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        result = scan_ticket(qr_data=serializer.validated_data['qr_data'], user=request.user)
    except TicketNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except TicketServiceError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(QRScanResponseSerializer(result).data)


@extend_schema(
    parameters=[ScanHistoryFilterSerializer],
    responses={200: TicketScanSerializer(many=True)},
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, HasBranch])
def scan_history_list(request):
    """
    Recent ticket scans in the user's branch.

    GET /api/qr/history/?start_date=2025-01-01&end_date=2025-01-31&limit=50
    """
    serializer = ScanHistoryFilterSerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)

    scans = scan_history(branch=request.user.branch, **serializer.validated_data)
    return Response(TicketScanSerializer(scans, many=True).data)
