"""Organizer dashboard figures, each comparing the current calendar month with the previous one.

Months follow ``TIME_ZONE``. A purchase counts in the month it was started, and only completed
purchases count at all.
"""

from datetime import datetime, timedelta
from decimal import Decimal

import structlog
from django.conf import settings
from django.core.cache import cache
from django.db.models import Count, Q, Sum
from django.utils import timezone

from events.models import Event, Transaction
from events.schema import CountFigureSchema, DashboardSchema, EventSchema, RevenueFigureSchema, Trend

logger = structlog.get_logger(__name__)

CACHE_KEY = "dashboard:stats:{currency}"
ZERO = Decimal("0")


def month_bounds(now: datetime) -> tuple[datetime, datetime, datetime]:
    """Start of last month, start of this month and start of next month, in local time."""
    this_month = timezone.localtime(now).replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    last_month = (this_month - timedelta(days=1)).replace(day=1)
    next_month = (this_month + timedelta(days=32)).replace(day=1)
    return last_month, this_month, next_month


def percentage_change(current: Decimal | int, last: Decimal | int) -> tuple[float, Trend]:
    """Change from ``last`` to ``current`` in percent, rounded to two places.

    Growth from nothing counts as 100% and no movement from nothing as 0%.
    """
    if last > 0:
        change = (Decimal(current) - Decimal(last)) / Decimal(last) * 100
    elif current > 0:
        change = Decimal(100)
    else:
        change = ZERO
    rounded = float(round(change, 2))
    trend: Trend = "up" if rounded > 0 else "down" if rounded < 0 else "stable"
    return rounded, trend


def _count_figure(current: int, last: int) -> CountFigureSchema:
    change, trend = percentage_change(current, last)
    return CountFigureSchema(current_month=current, last_month=last, percentage_change=change, trend=trend)


def _tickets_sold(last_month: datetime, this_month: datetime, next_month: datetime) -> CountFigureSchema:
    figures = Transaction.objects.filter(status=Transaction.Status.COMPLETED).aggregate(
        current=Count("buyers", filter=Q(created_at__gte=this_month, created_at__lt=next_month)),
        last=Count("buyers", filter=Q(created_at__gte=last_month, created_at__lt=this_month)),
    )
    return _count_figure(figures["current"], figures["last"])


def _revenue(currency: str, last_month: datetime, this_month: datetime, next_month: datetime) -> RevenueFigureSchema:
    figures = Transaction.objects.filter(status=Transaction.Status.COMPLETED, currency=currency).aggregate(
        current=Sum("amount", filter=Q(created_at__gte=this_month, created_at__lt=next_month)),
        last=Sum("amount", filter=Q(created_at__gte=last_month, created_at__lt=this_month)),
    )
    current, last = figures["current"] or ZERO, figures["last"] or ZERO
    change, trend = percentage_change(current, last)
    return RevenueFigureSchema(
        current_month=current,
        last_month=last,
        percentage_change=change,
        trend=trend,
        currency=currency,
    )


def _active_events(last_month: datetime, this_month: datetime) -> CountFigureSchema:
    figures = Event.objects.filter(published=True).aggregate(
        current=Count("id", filter=Q(end__gte=this_month)),
        last=Count("id", filter=Q(end__gte=last_month, created_at__lt=this_month)),
    )
    return _count_figure(figures["current"], figures["last"])


def _upcoming_events(now: datetime) -> list[EventSchema]:
    events = Event.objects.filter(published=True, start__gte=now).order_by("start")
    return [EventSchema.from_orm(event) for event in events[: settings.UPCOMING_EVENTS_ON_DASHBOARD]]


def dashboard_stats(currency: str = "NGN") -> DashboardSchema:
    """Sales, revenue and event activity for the dashboard, cached for ``DASHBOARD_CACHE_SECONDS``."""
    key = CACHE_KEY.format(currency=currency)
    cached = cache.get(key)
    if cached is not None:
        return DashboardSchema.model_validate(cached)

    now = timezone.now()
    last_month, this_month, next_month = month_bounds(now)
    stats = DashboardSchema(
        tickets_sold=_tickets_sold(last_month, this_month, next_month),
        revenue=_revenue(currency, last_month, this_month, next_month),
        active_events=_active_events(last_month, this_month),
        upcoming_events=_upcoming_events(now),
        generated_at=now,
    )
    cache.set(key, stats.model_dump(), timeout=settings.DASHBOARD_CACHE_SECONDS)
    logger.debug("dashboard_stats_computed", currency=currency)
    return stats


def invalidate_dashboard_cache(currency: str) -> None:
    cache.delete(CACHE_KEY.format(currency=currency))
