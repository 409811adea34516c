# queuemaster/models.py
#
# Con PyMongo no se usan modelos de ORM: el estado se guarda como un único
# documento. Estas clases dan estructura a los diccionarios de ese documento.

from queuemaster.utils import truncate_to_millis

# --- Estados del ticket ---
WAITING = "waiting"
CALLING = "calling"
SERVING = "serving"
COMPLETED = "completed"
NO_SHOW = "no-show"

ACTIVE_STATUSES = (CALLING, SERVING)

STATUS_NAMES = {
    WAITING: "En espera",
    CALLING: "Llamando",
    SERVING: "En atención",
    COMPLETED: "Atendido",
    NO_SHOW: "No se presentó",
}

# --- Estados de la ventanilla ---
COUNTER_IDLE = "idle"
COUNTER_BUSY = "busy"
COUNTER_AWAY = "away"

# Prefijo de la única categoría con prioridad (personas mayores, movilidad reducida)
PRIORITY_PREFIX = "P"

DEFAULT_COLOR = "#3b82f6"


class Category:
    """Un tipo de trámite. El color es solo de presentación."""
    def __init__(self, id, name, prefix, color=DEFAULT_COLOR):
        self.id = str(id)
        self.name = name
        self.prefix = prefix
        self.color = color

    @property
    def is_priority(self):
        return self.prefix == PRIORITY_PREFIX

    def to_dict(self):
        return {"id": self.id, "name": self.name, "prefix": self.prefix, "color": self.color}

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data["id"],
            name=data["name"],
            prefix=data["prefix"],
            color=data.get("color", DEFAULT_COLOR),
        )

    def __repr__(self):
        return f"<Category '{self.name}' ({self.prefix})>"


class Counter:
    """Una ventanilla de atención."""
    def __init__(self, id, name, status=COUNTER_IDLE, current_ticket_id=None):
        self.id = int(id)
        self.name = name
        self.status = status
        self.current_ticket_id = current_ticket_id

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status,
            "current_ticket_id": self.current_ticket_id,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data["id"],
            name=data["name"],
            status=data.get("status", COUNTER_IDLE),
            current_ticket_id=data.get("current_ticket_id"),
        )

    def __repr__(self):
        return f"<Counter {self.id} '{self.name}' ({self.status})>"


class Ticket:
    """
    Un turno. `id` es único; `display_id` es la etiqueta que ve el público
    y puede repetirse.
    """
    def __init__(self, id, display_id, category_id, created_at, status=WAITING,
                 called_at=None, started_at=None, completed_at=None, counter_id=None):
        self.id = id
        self.display_id = display_id
        self.category_id = str(category_id)
        self.status = status
        self.created_at = truncate_to_millis(created_at)
        self.called_at = truncate_to_millis(called_at)
        self.started_at = truncate_to_millis(started_at)
        self.completed_at = truncate_to_millis(completed_at)
        self.counter_id = counter_id

    @property
    def status_name(self):
        return STATUS_NAMES.get(self.status, self.status)

    def to_dict(self):
        return {
            "id": self.id,
            "display_id": self.display_id,
            "category_id": self.category_id,
            "status": self.status,
            "created_at": self.created_at,
            "called_at": self.called_at,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "counter_id": self.counter_id,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data["id"],
            display_id=data["display_id"],
            category_id=data["category_id"],
            status=data.get("status", WAITING),
            created_at=data["created_at"],
            called_at=data.get("called_at"),
            started_at=data.get("started_at"),
            completed_at=data.get("completed_at"),
            counter_id=data.get("counter_id"),
        )

    def __repr__(self):
        return f"<Ticket {self.display_id} ({self.status})>"


DEFAULT_CATEGORIES = [
    {"id": "1", "name": "General", "prefix": "G", "color": "#3b82f6"},
    {"id": "2", "name": "Preferencial", "prefix": "P", "color": "#ef4444"},
    {"id": "3", "name": "Caja", "prefix": "C", "color": "#10b981"},
]

DEFAULT_COUNTERS = [
    {"id": 1, "name": "Ventanilla 1", "status": COUNTER_IDLE},
    {"id": 2, "name": "Ventanilla 2", "status": COUNTER_IDLE},
    {"id": 3, "name": "Ventanilla 3", "status": COUNTER_IDLE},
]


class QueueState:
    """
    Instantánea completa del sistema: categorías, ventanillas, tickets y
    el siguiente número de cada categoría. Se guarda y se carga entera.
    """
    def __init__(self, categories=None, counters=None, tickets=None, next_ticket_number=None):
        self.categories = list(categories or [])
        self.counters = list(counters or [])
        self.tickets = list(tickets or [])
        self.next_ticket_number = dict(next_ticket_number or {})

    @classmethod
    def default(cls):
        categories = [Category.from_dict(c) for c in DEFAULT_CATEGORIES]
        return cls(
            categories=categories,
            counters=[Counter.from_dict(c) for c in DEFAULT_COUNTERS],
            tickets=[],
            next_ticket_number={c.id: 1 for c in categories},
        )

    def find_category(self, category_id):
        category_id = str(category_id)
        return next((c for c in self.categories if c.id == category_id), None)

    def find_counter(self, counter_id):
        try:
            counter_id = int(counter_id)
        except (TypeError, ValueError):
            return None
        return next((c for c in self.counters if c.id == counter_id), None)

    def find_ticket(self, ticket_id):
        if ticket_id is None:
            return None
        return next((t for t in self.tickets if t.id == ticket_id), None)

    def to_dict(self):
        return {
            "categories": [c.to_dict() for c in self.categories],
            "counters": [c.to_dict() for c in self.counters],
            "tickets": [t.to_dict() for t in self.tickets],
            "next_ticket_number": dict(self.next_ticket_number),
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            categories=[Category.from_dict(c) for c in data.get("categories", [])],
            counters=[Counter.from_dict(c) for c in data.get("counters", [])],
            tickets=[Ticket.from_dict(t) for t in data.get("tickets", [])],
            next_ticket_number={str(k): int(v) for k, v in data.get("next_ticket_number", {}).items()},
        )
