from flask import render_template, flash, jsonify
from queuemaster.dashboard import dashboard_bp
from queuemaster.analytics import compute_analytics
from queuemaster.exceptions import DatabaseQueryError
from queuemaster.utils import get_state_repository
import logging

logger = logging.getLogger(__name__)

@dashboard_bp.route('/')
def analytics():
    try:
        state = get_state_repository().load()
        stats = compute_analytics(state.tickets, state.categories)
    except DatabaseQueryError as e:
        logger.error(f"Error al calcular la analítica: {e}")
        flash("Error al cargar los datos de analítica.", "danger")
        stats = compute_analytics([], [])

    max_daily = max((d["count"] for d in stats["daily_volume"]), default=0)
    return render_template('dashboard/analytics.html', title='Analítica', stats=stats, max_daily=max_daily)

@dashboard_bp.route('/data')
def analytics_data():
    try:
        state = get_state_repository().load()
    except DatabaseQueryError as e:
        logger.error(f"Error al calcular la analítica: {e}")
        return jsonify({"error": "No se pudieron cargar los datos de analítica."}), 503
    return jsonify(compute_analytics(state.tickets, state.categories))
