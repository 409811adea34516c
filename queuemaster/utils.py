# queuemaster/utils.py

import math
from datetime import datetime


def truncate_to_millis(value):
    """BSON guarda las fechas con precisión de milisegundos."""
    if value is None:
        return None
    return value.replace(microsecond=value.microsecond - value.microsecond % 1000)


def now():
    """Hora local actual, sin zona horaria y truncada a milisegundos."""
    return truncate_to_millis(datetime.now())


def round_half_up(value):
    return int(math.floor(value + 0.5))


def minutes_between(start, end):
    return (end - start).total_seconds() / 60.0


def get_state_repository():
    """Repositorio de la instantánea de estado ligado a la app actual."""
    from flask import current_app
    from queuemaster import mongo
    from queuemaster.repositories import MongoStateRepository

    return MongoStateRepository(mongo.db, current_app.config["QUEUE_STATE_COLLECTION"])


def apply_queue_operation(operation, *args):
    """
    Carga el estado, ejecuta una operación del QueueEngine y guarda el estado
    solo si la operación tuvo éxito. Los errores de BD se propagan como
    DatabaseQueryError.
    """
    from queuemaster.queue_engine import QueueEngine

    repository = get_state_repository()
    state = repository.load()
    result = getattr(QueueEngine(state), operation)(*args)
    if result.ok:
        repository.save(state)
    return result
