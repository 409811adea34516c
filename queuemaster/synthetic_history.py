# queuemaster/synthetic_history.py

"""Historial sintético de tickets para alimentar el panel de analítica.

Modelo:
- Volumen diario uniforme en [base, base + 40): base 20 en sábado y domingo,
  60 entre semana.
- Llegadas entre las 8:00 y las 18:00; la mitad se concentra en las franjas
  pico 10-12 y 14-16.
- Espera (llegada -> llamada) uniforme de 5 a 44 minutos; atención
  (llamada -> fin) de 3 a 19 minutos. La atención empieza al ser llamado.
- 10% de ausencias (`no-show`), sin hora de fin.
- Ventanilla uniforme entre 5 ventanillas ficticias.
- La numeración es un contador global de la generación (no por categoría),
  así que pueden repetirse `display_id` entre categorías; `id` es único.

El generador no modifica el estado: devuelve la lista y quien llama la añade.
"""

import calendar
import logging
import random
from datetime import datetime, time, timedelta

from queuemaster.models import COMPLETED, NO_SHOW, Ticket
from queuemaster.queue_engine import format_display_id
from queuemaster.utils import now as current_time

logger = logging.getLogger(__name__)

WEEKDAY_BASE_VOLUME = 60
WEEKEND_BASE_VOLUME = 20
VOLUME_SPREAD = 40

OPENING_HOUR = 8
OPEN_HOURS = 10
PEAK_WINDOWS = (10, 14)
PEAK_WINDOW_HOURS = 2
PEAK_PROBABILITY = 0.5

MIN_WAIT_MINUTES = 5
WAIT_SPREAD_MINUTES = 40
MIN_SERVICE_MINUTES = 3
SERVICE_SPREAD_MINUTES = 17

NO_SHOW_PROBABILITY = 0.1
SYNTHETIC_COUNTERS = 5


def subtract_months(value, months):
    """Resta meses de calendario, ajustando el día al último del mes si hace falta."""
    month_index = value.month - 1 - months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def daily_volume(day, rng):
    base = WEEKEND_BASE_VOLUME if day.weekday() >= 5 else WEEKDAY_BASE_VOLUME
    return base + rng.randrange(VOLUME_SPREAD)


def arrival_hour(rng):
    hour = OPENING_HOUR + rng.randrange(OPEN_HOURS)
    if rng.random() < PEAK_PROBABILITY:
        window = PEAK_WINDOWS[0] if rng.random() < 0.5 else PEAK_WINDOWS[1]
        hour = window + rng.randrange(PEAK_WINDOW_HOURS)
    return hour


def generate_synthetic_history(categories, rng=None, now=None, months=6):
    """Genera tickets terminados para cada día desde hace `months` meses hasta hoy.

    Args:
        categories: categorías entre las que se reparte cada ticket.
        rng: instancia de `random.Random`; inyectarla hace la generación reproducible.
        now: fin del rango (por defecto, la hora actual).
        months: meses hacia atrás desde `now`.

    Returns:
        Lista de `Ticket` en estado `completed` o `no-show`.
    """
    categories = list(categories)
    if not categories:
        logger.warning("No hay categorías: no se genera historial sintético.")
        return []

    rng = rng or random.Random()
    end = now or current_time()
    day = subtract_months(end, months)

    tickets = []
    sequence = 1
    while day <= end:
        for _ in range(daily_volume(day, rng)):
            category = rng.choice(categories)
            hour = arrival_hour(rng)
            minute = rng.randrange(60)
            created_at = datetime.combine(day.date(), time(hour, minute))

            called_at = created_at + timedelta(minutes=MIN_WAIT_MINUTES + rng.randrange(WAIT_SPREAD_MINUTES))
            completed_at = called_at + timedelta(minutes=MIN_SERVICE_MINUTES + rng.randrange(SERVICE_SPREAD_MINUTES))
            is_no_show = rng.random() < NO_SHOW_PROBABILITY

            tickets.append(Ticket(
                id=f"synth-{sequence}",
                display_id=format_display_id(category.prefix, sequence),
                category_id=category.id,
                status=NO_SHOW if is_no_show else COMPLETED,
                created_at=created_at,
                called_at=called_at,
                started_at=called_at,
                completed_at=None if is_no_show else completed_at,
                counter_id=1 + rng.randrange(SYNTHETIC_COUNTERS),
            ))
            sequence += 1
        day += timedelta(days=1)

    logger.info(f"Historial sintético generado: {len(tickets)} tickets desde {subtract_months(end, months):%d/%m/%Y}.")
    return tickets
