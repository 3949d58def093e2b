"""
Ticket statistics for a branch over a local-time period.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from django.db.models import Count, Sum
from django.utils import timezone

from apps.tickets.models import Ticket

from .time_window import local_date, local_day_bounds

PERIODS = ('today', 'week', 'month')


def period_range(period: str, today: date) -> tuple[date, date]:
    """
    Inclusive local date range for a named period.

    ``week`` is the last seven days including today; ``month`` is the
    current calendar month. Unknown periods fall back to today.
    """
    if period == 'week':
        return today - timedelta(days=6), today
    if period == 'month':
        start = today.replace(day=1)
        next_month = (start + timedelta(days=32)).replace(day=1)
        return start, next_month - timedelta(days=1)
    return today, today


def ticket_statistics(*, branch, period: str = 'today', today: Optional[date] = None) -> dict:
    """
    Count, revenue, type distribution and player totals for a period.

    Returns:
        dict with keys: period, start_date, end_date, total_tickets,
        total_revenue, type_distribution, player_stats
    """
    today = today or local_date(timezone.now())
    start_date, end_date = period_range(period, today)

    queryset = Ticket.objects.filter(
        branch=branch,
        started_at__gte=local_day_bounds(start_date)[0],
        started_at__lt=local_day_bounds(end_date)[1],
    )

    totals = queryset.aggregate(
        total_tickets=Count('id'),
        total_revenue=Sum('fee'),
        total_players=Sum('total_players'),
        played_players=Sum('played_players'),
        waiting_players=Sum('waiting_players'),
        refunded_players=Sum('refunded_players_count'),
    )

    type_distribution = list(
        queryset.values('ticket_type')
        .annotate(count=Count('id'))
        .order_by('ticket_type')
    )

    return {
        'period': period if period in PERIODS else 'today',
        'start_date': start_date,
        'end_date': end_date,
        'total_tickets': totals['total_tickets'],
        'total_revenue': totals['total_revenue'] or Decimal('0.00'),
        'type_distribution': type_distribution,
        'player_stats': {
            'total_players': totals['total_players'] or 0,
            'played_players': totals['played_players'] or 0,
            'waiting_players': totals['waiting_players'] or 0,
            'refunded_players': totals['refunded_players'] or 0,
        },
    }
