# queuemaster/analytics.py

"""Indicadores del panel calculados desde la lista de tickets.

Cálculo puro y de solo lectura: se recalcula entero con cada petición.
- TME: espera media (creación -> llamada) de los tickets atendidos, en minutos.
- TMA: atención media (inicio, o llamada si no hay inicio -> fin) de los atendidos.
- Tasa de abandono: ausencias / total de tickets * 100.
Con listas vacías todos los indicadores valen 0.
"""

from collections import Counter
from datetime import timedelta

from queuemaster.models import COMPLETED, NO_SHOW
from queuemaster.utils import minutes_between, now as current_time, round_half_up

DAILY_SERIES_DAYS = 30


def average_wait_minutes(completed):
    total = sum(minutes_between(t.created_at, t.called_at or t.created_at) for t in completed)
    return round_half_up(total / (len(completed) or 1))


def average_service_minutes(completed):
    total = 0.0
    for t in completed:
        start = t.started_at or t.called_at or t.created_at
        total += minutes_between(start, t.completed_at or start)
    return round_half_up(total / (len(completed) or 1))


def daily_volume_series(tickets, today, days=DAILY_SERIES_DAYS):
    """Tickets creados en cada uno de los últimos `days` días, del más antiguo a hoy."""
    per_day = Counter(t.created_at.date() for t in tickets)
    series = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        series.append({"date": day.strftime("%d/%m"), "day": day.isoformat(), "count": per_day.get(day, 0)})
    return series


def category_distribution(tickets, categories):
    per_category = Counter(t.category_id for t in tickets)
    return [
        {
            "category_id": c.id,
            "name": c.name,
            "color": c.color,
            "value": per_category.get(c.id, 0),
            "total": len(tickets),
        }
        for c in categories
    ]


def compute_analytics(tickets, categories, now=None):
    tickets = list(tickets)
    completed = [t for t in tickets if t.status == COMPLETED]
    no_shows = [t for t in tickets if t.status == NO_SHOW]
    today = (now or current_time()).date()

    return {
        "average_wait_minutes": average_wait_minutes(completed),
        "average_service_minutes": average_service_minutes(completed),
        "abandonment_rate_percent": round_half_up(len(no_shows) / (len(tickets) or 1) * 100),
        "daily_volume": daily_volume_series(tickets, today),
        "category_distribution": category_distribution(tickets, categories),
        "total_tickets": len(tickets),
        "completed_count": len(completed),
        "no_show_count": len(no_shows),
    }
