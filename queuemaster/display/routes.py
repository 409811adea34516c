from flask import render_template, jsonify, current_app
from queuemaster.display import display_bp
from queuemaster.exceptions import DatabaseQueryError
from queuemaster.queue_engine import QueueEngine
from queuemaster.utils import get_state_repository
import logging

logger = logging.getLogger(__name__)

def _recent_calls():
    state = get_state_repository().load()
    calls = QueueEngine(state).recent_calls(limit=current_app.config["DISPLAY_RECENT_CALLS"])
    counter_names = {c.id: c.name for c in state.counters}
    return calls, counter_names

@display_bp.route('/')
def public_display():
    try:
        calls, counter_names = _recent_calls()
    except DatabaseQueryError as e:
        logger.error(f"Error al cargar la pantalla pública: {e}")
        calls, counter_names = [], {}

    last_called = calls[0] if calls else None
    return render_template('display/display.html',
                           title='Pantalla',
                           last_called=last_called,
                           previous_calls=calls[1:],
                           counter_names=counter_names)

@display_bp.route('/data')
def display_data():
    """Mismos datos que la pantalla, en JSON, para pantallas que refrescan solas."""
    try:
        calls, counter_names = _recent_calls()
    except DatabaseQueryError as e:
        logger.error(f"Error al cargar los datos de la pantalla pública: {e}")
        return jsonify({"error": "No se pudieron cargar las llamadas."}), 503

    return jsonify({
        "calls": [
            {
                "display_id": t.display_id,
                "status": t.status,
                "counter_id": t.counter_id,
                "counter_name": counter_names.get(t.counter_id, f"Ventanilla {t.counter_id}"),
                "called_at": t.called_at.isoformat() if t.called_at else None,
            }
            for t in calls
        ]
    })
