"""
Reports Module
==============

Takings, expenses and profit for a branch, grouped by venue-local day.

Classes:
    ReportQueries: Static methods for daily, range and dashboard reports.

Days are bounded by the fixed venue offset (see
``apps.tickets.services.time_window``), never by the server timezone, so
a ticket sold at 00:05 local time counts toward that local day even
though it is still the previous day in UTC.

Money columns:
    - ticket sales: sum of ticket ``fee``
    - other sales: sum of sale ``total_amount``
    - refunds: sum of ticket ``refund_amount`` (reported, not deducted)
    - revenue: ticket sales + other sales
    - profit/loss: revenue - expenses

Example::

    from apps.reports.reports import ReportQueries

    summary = ReportQueries.daily_summary(branch=branch)
    print(f"Profit today: {summary.profit_loss}")

    report = ReportQueries.range_summary(
        branch=branch,
        start_date=date(2025, 1, 1),
        end_date=date(2025, 1, 31),
    )
"""

import logging
from datetime import date, timedelta
from decimal import Decimal

from django.db.models import Count, Sum
from django.utils import timezone

from apps.expenses.models import Expense
from apps.sales.models import Sale
from apps.tickets.models import Ticket, TicketStatus, TicketType
from apps.tickets.services.time_window import local_date, local_day_bounds

from .exceptions import InvalidDateRangeError
from .models import DailySummary

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')

MAX_RANGE_DAYS = 366
TIMELINE_DAYS = 10
TOP_CUSTOMER_DAYS = 30
TOP_CUSTOMER_LIMIT = 10


def _empty_row(day: date) -> dict:
    return {
        'date': day,
        'total_tickets': 0,
        'total_ticket_sales': ZERO,
        'total_other_sales': ZERO,
        'total_expenses': ZERO,
        'total_refunds': ZERO,
        'total_revenue': ZERO,
        'profit_loss': ZERO,
    }


def _daily_rows(branch, start_date: date, end_date: date) -> list:
    """Per-day totals from live data, one row per day including empty days."""
    start, _ = local_day_bounds(start_date)
    _, end = local_day_bounds(end_date)

    rows = {}
    for day_offset in range((end_date - start_date).days + 1):
        day = start_date + timedelta(days=day_offset)
        rows[day] = _empty_row(day)

    tickets = Ticket.objects.filter(
        branch=branch, started_at__gte=start, started_at__lt=end
    ).values_list('started_at', 'fee', 'refund_amount')
    for started_at, fee, refund_amount in tickets.iterator():
        row = rows[local_date(started_at)]
        row['total_tickets'] += 1
        row['total_ticket_sales'] += fee
        row['total_refunds'] += refund_amount

    sales = Sale.objects.filter(
        branch=branch, sold_at__gte=start, sold_at__lt=end
    ).values_list('sold_at', 'total_amount')
    for sold_at, total_amount in sales.iterator():
        rows[local_date(sold_at)]['total_other_sales'] += total_amount

    expenses = Expense.objects.filter(
        branch=branch, spent_at__gte=start, spent_at__lt=end
    ).values_list('spent_at', 'amount')
    for spent_at, amount in expenses.iterator():
        rows[local_date(spent_at)]['total_expenses'] += amount

    result = []
    for day in sorted(rows):
        row = rows[day]
        row['total_revenue'] = row['total_ticket_sales'] + row['total_other_sales']
        row['profit_loss'] = row['total_revenue'] - row['total_expenses']
        result.append(row)
    return result


class ReportQueries:
    """
    Read-mostly report queries for one branch.

    All methods return plain dictionaries (``daily_summary`` returns the
    refreshed :class:`DailySummary` row), suitable for the report
    serializers.
    """

    @staticmethod
    def daily_summary(*, branch, day: date = None) -> DailySummary:
        """
        Compute a local day's totals and store them as the day's snapshot.

        Args:
            branch: Branch to report on.
            day (date, optional): Venue-local day; defaults to today.

        Returns:
            DailySummary: The created or refreshed snapshot row.
        """
        day = day or local_date(timezone.now())
        row = _daily_rows(branch, day, day)[0]

        defaults = {key: value for key, value in row.items() if key != 'date'}
        summary, created = DailySummary.objects.update_or_create(
            branch=branch,
            date=day,
            defaults=defaults,
        )

        logger.debug(
            "%s daily summary for %s on %s: profit %s",
            'Created' if created else 'Refreshed', branch.branch_name, day, summary.profit_loss,
        )
        return summary

    @staticmethod
    def range_summary(*, branch, start_date: date, end_date: date) -> dict:
        """
        Per-day rows and totals for an inclusive range of local days.

        Raises:
            InvalidDateRangeError: If start is after end or the range
                spans more than ``MAX_RANGE_DAYS`` days.

        Returns:
            dict: ``start_date``, ``end_date``, ``days`` (list of rows) and
            ``totals`` (the same money columns summed over the range).
        """
        if start_date > end_date:
            raise InvalidDateRangeError("Start date must be on or before end date")
        if (end_date - start_date).days + 1 > MAX_RANGE_DAYS:
            raise InvalidDateRangeError(f"Date range cannot exceed {MAX_RANGE_DAYS} days")

        days = _daily_rows(branch, start_date, end_date)

        totals = {
            key: sum((row[key] for row in days), ZERO)
            for key in (
                'total_ticket_sales',
                'total_other_sales',
                'total_expenses',
                'total_refunds',
                'total_revenue',
                'profit_loss',
            )
        }
        totals['total_tickets'] = sum(row['total_tickets'] for row in days)

        return {
            'start_date': start_date,
            'end_date': end_date,
            'days': days,
            'totals': totals,
        }

    @staticmethod
    def dashboard(*, branch, today: date = None) -> dict:
        """
        Everything the branch dashboard shows.

        Returns:
            dict: A dictionary containing:
                - today: ticket, sale and expense counts for today
                - totals: all-time counts, revenue, expenses and net profit
                - timeline: last 10 days of tickets, ticket revenue and refunds
                - type_counts: today's tickets per ticket type
                - top_customers: 10 most frequent names over 30 days
                - checked_in: tickets currently playing
        """
        today = today or local_date(timezone.now())
        today_start, today_end = local_day_bounds(today)

        tickets = Ticket.objects.filter(branch=branch)
        sales = Sale.objects.filter(branch=branch)
        expenses = Expense.objects.filter(branch=branch)

        tickets_today = tickets.filter(started_at__gte=today_start, started_at__lt=today_end)

        ticket_totals = tickets.aggregate(count=Count('id'), revenue=Sum('fee'))
        sale_totals = sales.aggregate(count=Count('id'), revenue=Sum('total_amount'))
        expense_totals = expenses.aggregate(count=Count('id'), amount=Sum('amount'))

        revenue = (ticket_totals['revenue'] or ZERO) + (sale_totals['revenue'] or ZERO)
        expenses_amount = expense_totals['amount'] or ZERO

        timeline = [
            {
                'date': row['date'],
                'tickets': row['total_tickets'],
                'revenue': row['total_ticket_sales'],
                'refunded_amount': row['total_refunds'],
            }
            for row in _daily_rows(branch, today - timedelta(days=TIMELINE_DAYS - 1), today)
        ]

        type_counts = {value: 0 for value in TicketType.values}
        for entry in tickets_today.order_by().values('ticket_type').annotate(count=Count('id')):
            type_counts[entry['ticket_type']] = entry['count']

        customers_since, _ = local_day_bounds(today - timedelta(days=TOP_CUSTOMER_DAYS - 1))
        top_customers = list(
            tickets.filter(started_at__gte=customers_since)
            .order_by()
            .values('name')
            .annotate(tickets=Count('id'))
            .order_by('-tickets', 'name')[:TOP_CUSTOMER_LIMIT]
        )

        return {
            'today': {
                'date': today,
                'tickets': tickets_today.count(),
                'sales': sales.filter(sold_at__gte=today_start, sold_at__lt=today_end).count(),
                'expenses': expenses.filter(spent_at__gte=today_start, spent_at__lt=today_end).count(),
            },
            'totals': {
                'tickets': ticket_totals['count'],
                'sales': sale_totals['count'],
                'expenses': expense_totals['count'],
                'revenue': revenue,
                'expenses_amount': expenses_amount,
                'net_profit': revenue - expenses_amount,
            },
            'timeline': timeline,
            'type_counts': type_counts,
            'top_customers': top_customers,
            'checked_in': tickets.filter(status=TicketStatus.PLAYING).count(),
        }
