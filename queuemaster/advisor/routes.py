from flask import render_template, flash, redirect, url_for, abort
from queuemaster.advisor import advisor_bp
from queuemaster.admin.forms import EmptyForm
from queuemaster.exceptions import DatabaseQueryError
from queuemaster.models import COUNTER_AWAY
from queuemaster.queue_engine import QueueEngine, COMPLETION_OUTCOMES
from queuemaster.utils import apply_queue_operation, get_state_repository
import logging

logger = logging.getLogger(__name__)

UPCOMING_TICKETS = 5

@advisor_bp.route('/')
def list_counters():
    try:
        counters = get_state_repository().load().counters
    except DatabaseQueryError as e:
        logger.error(f"Error al cargar las ventanillas: {e}")
        flash("Error al cargar las ventanillas.", "danger")
        counters = []
    return render_template('advisor/list_counters.html', title='Asesor', counters=counters)

@advisor_bp.route('/<int:counter_id>')
def counter_panel(counter_id):
    try:
        state = get_state_repository().load()
    except DatabaseQueryError as e:
        logger.error(f"Error al cargar el panel de la ventanilla {counter_id}: {e}")
        flash("Error al cargar la ventanilla.", "danger")
        return redirect(url_for('advisor_bp.list_counters'))

    counter = state.find_counter(counter_id)
    if counter is None:
        abort(404)

    engine = QueueEngine(state)
    waiting = engine.waiting_tickets()
    category_map = {c.id: c for c in state.categories}

    return render_template('advisor/counter_panel.html',
                           title=counter.name,
                           counter=counter,
                           ticket=engine.current_ticket(counter.id),
                           upcoming=waiting[:UPCOMING_TICKETS],
                           waiting_count=len(waiting),
                           category_map=category_map,
                           form=EmptyForm())

def _run_counter_action(operation, counter_id, *args):
    try:
        result = apply_queue_operation(operation, counter_id, *args)
    except DatabaseQueryError as e:
        logger.error(f"Error en '{operation}' para la ventanilla {counter_id}: {e}", exc_info=True)
        flash('Ocurrió un error al actualizar la ventanilla.', 'danger')
        return None
    if not result:
        flash(result.message, 'warning')
    return result

@advisor_bp.route('/<int:counter_id>/call', methods=['POST'])
def call_next(counter_id):
    result = _run_counter_action('call_next', counter_id)
    if result:
        if result.value is None:
            flash('No hay turnos pendientes.', 'info')
        else:
            flash(f'Llamando al turno {result.value.display_id}.', 'success')
    return redirect(url_for('advisor_bp.counter_panel', counter_id=counter_id))

@advisor_bp.route('/<int:counter_id>/start', methods=['POST'])
def start_serving(counter_id):
    result = _run_counter_action('start_serving', counter_id)
    if result:
        flash(f'Atendiendo el turno {result.value.display_id}.', 'success')
    return redirect(url_for('advisor_bp.counter_panel', counter_id=counter_id))

@advisor_bp.route('/<int:counter_id>/complete/<string:outcome>', methods=['POST'])
def complete_ticket(counter_id, outcome):
    if outcome not in COMPLETION_OUTCOMES:
        abort(404)
    result = _run_counter_action('complete_ticket', counter_id, outcome)
    if result:
        flash(f'Turno {result.value.display_id} finalizado ({result.value.status_name}).', 'success')
    return redirect(url_for('advisor_bp.counter_panel', counter_id=counter_id))

@advisor_bp.route('/<int:counter_id>/away', methods=['POST'])
def toggle_away(counter_id):
    result = _run_counter_action('toggle_counter_away', counter_id)
    if result:
        status = 'ausente' if result.value.status == COUNTER_AWAY else 'disponible'
        flash(f'{result.value.name} marcada como {status}.', 'info')
    return redirect(url_for('advisor_bp.counter_panel', counter_id=counter_id))
