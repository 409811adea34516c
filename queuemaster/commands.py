# queuemaster/commands.py

from flask import current_app
from flask.cli import with_appcontext
from queuemaster.exceptions import DatabaseQueryError
from queuemaster.models import QueueState
from queuemaster.queue_engine import QueueEngine
from queuemaster.synthetic_history import generate_synthetic_history
from queuemaster.utils import get_state_repository
import click
import random

@click.command("init-queue-data")
@click.option("--reset", is_flag=True, help="Sustituye el estado guardado por el estado por defecto.")
@with_appcontext
def init_queue_data_command(reset):
    """Inicializa el estado de la cola (categorías, ventanillas y numeración por defecto)."""
    print("Iniciando carga del estado inicial de la cola...")

    try:
        repository = get_state_repository()
        if repository.exists() and not reset:
            print("El estado de la cola ya existe. Use --reset para reiniciarlo.")
            return

        state = QueueState.default()
        repository.save(state)
        print(f"Estado cargado: {len(state.categories)} categorías y {len(state.counters)} ventanillas.")

    except DatabaseQueryError as e:
        print(f"\nERROR: Ocurrió un error de base de datos durante la inicialización: {e}")

@click.command("generate-history")
@click.option("--seed", type=int, default=None, help="Semilla para obtener siempre el mismo historial.")
@click.option("--months", type=int, default=None, help="Meses de historial (por defecto, SYNTHETIC_HISTORY_MONTHS).")
@with_appcontext
def generate_history_command(seed, months):
    """Añade historial sintético de tickets para la analítica."""
    try:
        repository = get_state_repository()
        state = repository.load()
        tickets = generate_synthetic_history(
            state.categories,
            rng=random.Random(seed),
            months=months or current_app.config["SYNTHETIC_HISTORY_MONTHS"],
        )
        result = QueueEngine(state).append_history(tickets)
        repository.save(state)
        print(f"Se añadieron {result.value} tickets sintéticos al historial.")

    except DatabaseQueryError as e:
        print(f"\nERROR: Ocurrió un error de base de datos al generar el historial: {e}")

@click.command("clear-history")
@click.confirmation_option(prompt="¿Estás seguro de borrar todo el historial?")
@with_appcontext
def clear_history_command():
    """Borra todos los tickets del historial."""
    try:
        repository = get_state_repository()
        state = repository.load()
        result = QueueEngine(state).clear_history()
        repository.save(state)
        print(f"Historial borrado: {result.value} tickets eliminados.")

    except DatabaseQueryError as e:
        print(f"\nERROR: Ocurrió un error de base de datos al borrar el historial: {e}")
