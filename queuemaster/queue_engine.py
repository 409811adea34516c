# queuemaster/queue_engine.py
#
# Máquina de estados del ticket y política de despacho:
#
#   waiting --call_next--> calling --start_serving--> serving --complete(completed)--> completed
#   calling --complete(completed | no-show)--> completed | no-show
#
# POLÍTICA DE DESPACHO: hay exactamente dos niveles. Los tickets cuya
# categoría tiene el prefijo "P" (preferencial) se llaman SIEMPRE antes que
# cualquier otro, sin importar cuánto lleve esperando el resto. Dentro de cada
# nivel se atiende por orden de llegada y, a igual hora, por orden de emisión.
# No es un esquema de N prioridades; ampliarlo requiere revisar esta política.

import logging
import uuid
from functools import wraps

from queuemaster.exceptions import InvalidTransitionError, NotFoundError, QueueOperationError
from queuemaster.models import (
    ACTIVE_STATUSES,
    CALLING,
    COMPLETED,
    COUNTER_AWAY,
    COUNTER_BUSY,
    COUNTER_IDLE,
    NO_SHOW,
    SERVING,
    WAITING,
    Category,
    Ticket,
)
from queuemaster.utils import now

logger = logging.getLogger(__name__)

DISPLAY_NUMBER_WIDTH = 3
COMPLETION_OUTCOMES = (COMPLETED, NO_SHOW)


class OperationResult:
    """Resultado etiquetado de una operación: éxito con valor o fallo con error."""
    def __init__(self, ok, value=None, error=None):
        self.ok = ok
        self.value = value
        self.error = error

    @classmethod
    def success(cls, value=None):
        return cls(True, value=value)

    @classmethod
    def failure(cls, error):
        return cls(False, error=error)

    @property
    def message(self):
        return self.error.message if self.error else None

    def __bool__(self):
        return self.ok

    def __repr__(self):
        if self.ok:
            return f"<OperationResult ok value={self.value!r}>"
        return f"<OperationResult error={self.error.code}: {self.error.message}>"


def format_display_id(prefix, number):
    return f"{prefix}{number % 1000:0{DISPLAY_NUMBER_WIDTH}d}"


def _operation(func):
    """Convierte los errores de la cola en un OperationResult fallido."""
    @wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return OperationResult.success(func(self, *args, **kwargs))
        except QueueOperationError as e:
            logger.info(f"{func.__name__}{args}: sin cambios ({e.code}: {e.message})")
            return OperationResult.failure(e)
    return wrapper


class QueueEngine:
    """
    Único propietario de tickets, ventanillas y secuencias de numeración.
    Las operaciones nunca lanzan excepciones al llamador: si una precondición
    falla devuelven un OperationResult fallido y el estado queda intacto.
    """

    def __init__(self, state, clock=now):
        self.state = state
        self._clock = clock

    # -------------------- consultas --------------------

    def _require_category(self, category_id):
        category = self.state.find_category(category_id)
        if category is None:
            raise NotFoundError(f"No existe la categoría '{category_id}'.")
        return category

    def _require_counter(self, counter_id):
        counter = self.state.find_counter(counter_id)
        if counter is None:
            raise NotFoundError(f"No existe la ventanilla '{counter_id}'.")
        return counter

    def _require_current_ticket(self, counter):
        if not counter.current_ticket_id:
            raise InvalidTransitionError(f"{counter.name} no tiene ningún ticket asignado.")
        ticket = self.state.find_ticket(counter.current_ticket_id)
        if ticket is None:
            raise NotFoundError(f"El ticket asignado a {counter.name} no existe.")
        return ticket

    def is_priority(self, ticket):
        category = self.state.find_category(ticket.category_id)
        return category is not None and category.is_priority

    def waiting_tickets(self):
        """Tickets en espera en el orden en que serán llamados."""
        waiting = [t for t in self.state.tickets if t.status == WAITING]
        # sorted() es estable: a igual created_at se respeta el orden de emisión
        return sorted(waiting, key=lambda t: (not self.is_priority(t), t.created_at))

    def current_ticket(self, counter_id):
        counter = self.state.find_counter(counter_id)
        if counter is None:
            return None
        return self.state.find_ticket(counter.current_ticket_id)

    def recent_calls(self, limit=6):
        """Tickets llamados o en atención, del más reciente al más antiguo."""
        active = [t for t in self.state.tickets if t.status in ACTIVE_STATUSES]
        active.sort(key=lambda t: t.called_at, reverse=True)
        return active[:limit]

    # -------------------- ciclo de vida del ticket --------------------

    @_operation
    def issue_ticket(self, category_id):
        """Emite un ticket nuevo en espera para la categoría indicada."""
        category = self._require_category(category_id)
        number = self.state.next_ticket_number.get(category.id, 1)
        ticket = Ticket(
            id=str(uuid.uuid4()),
            display_id=format_display_id(category.prefix, number),
            category_id=category.id,
            status=WAITING,
            created_at=self._clock(),
        )
        self.state.tickets.append(ticket)
        self.state.next_ticket_number[category.id] = number + 1
        logger.info(f"Ticket {ticket.display_id} emitido para '{category.name}'.")
        return ticket

    @_operation
    def call_next(self, counter_id):
        """Llama al siguiente ticket en espera desde la ventanilla indicada."""
        counter = self._require_counter(counter_id)
        if counter.status == COUNTER_AWAY:
            raise InvalidTransitionError(f"{counter.name} está ausente.")
        if counter.current_ticket_id:
            raise InvalidTransitionError(f"{counter.name} ya está atendiendo un ticket.")

        waiting = self.waiting_tickets()
        if not waiting:
            return None

        ticket = waiting[0]
        ticket.status = CALLING
        ticket.called_at = self._clock()
        ticket.counter_id = counter.id
        counter.status = COUNTER_BUSY
        counter.current_ticket_id = ticket.id
        logger.info(f"{counter.name} llama al ticket {ticket.display_id}.")
        return ticket

    @_operation
    def start_serving(self, counter_id):
        counter = self._require_counter(counter_id)
        ticket = self._require_current_ticket(counter)
        if ticket.status != CALLING:
            raise InvalidTransitionError(
                f"El ticket {ticket.display_id} no está siendo llamado (estado: {ticket.status})."
            )
        ticket.status = SERVING
        ticket.started_at = self._clock()
        logger.info(f"{counter.name} comienza a atender el ticket {ticket.display_id}.")
        return ticket

    @_operation
    def complete_ticket(self, counter_id, outcome):
        """
        Cierra el ticket actual de la ventanilla.

        'completed' se acepta desde calling o serving; 'no-show' solo desde
        calling, de modo que un ausente nunca tiene hora de inicio de atención.
        """
        if outcome not in COMPLETION_OUTCOMES:
            raise InvalidTransitionError(f"Resultado de cierre desconocido: '{outcome}'.")
        counter = self._require_counter(counter_id)
        ticket = self._require_current_ticket(counter)
        allowed = (CALLING, SERVING) if outcome == COMPLETED else (CALLING,)
        if ticket.status not in allowed:
            raise InvalidTransitionError(
                f"El ticket {ticket.display_id} no puede pasar de '{ticket.status}' a '{outcome}'."
            )
        ticket.status = outcome
        ticket.completed_at = self._clock()
        counter.status = COUNTER_IDLE
        counter.current_ticket_id = None
        logger.info(f"{counter.name} cierra el ticket {ticket.display_id} como '{outcome}'.")
        return ticket

    # -------------------- administración --------------------

    @_operation
    def toggle_counter_away(self, counter_id):
        """Alterna una ventanilla libre entre disponible y ausente."""
        counter = self._require_counter(counter_id)
        if counter.status == COUNTER_BUSY:
            raise InvalidTransitionError(f"{counter.name} está atendiendo y no puede ausentarse.")
        counter.status = COUNTER_IDLE if counter.status == COUNTER_AWAY else COUNTER_AWAY
        return counter

    @_operation
    def add_category(self, category_id, name, prefix, color):
        if self.state.find_category(category_id) is not None:
            raise InvalidTransitionError(f"Ya existe una categoría con el identificador '{category_id}'.")
        category = Category(id=category_id, name=name, prefix=prefix.upper(), color=color)
        self.state.categories.append(category)
        self.state.next_ticket_number[category.id] = 1
        logger.info(f"Categoría '{name}' ({category.prefix}) creada.")
        return category

    @_operation
    def remove_category(self, category_id):
        """Elimina la categoría. Los tickets que la referencian se conservan."""
        category = self._require_category(category_id)
        self.state.categories.remove(category)
        logger.info(f"Categoría '{category.name}' eliminada.")
        return category

    @_operation
    def append_history(self, tickets):
        tickets = list(tickets)
        self.state.tickets.extend(tickets)
        return len(tickets)

    @_operation
    def clear_history(self):
        """Borra todos los tickets y libera las ventanillas que los tenían."""
        removed = len(self.state.tickets)
        self.state.tickets = []
        for counter in self.state.counters:
            if counter.current_ticket_id:
                counter.current_ticket_id = None
                counter.status = COUNTER_IDLE
        return removed
