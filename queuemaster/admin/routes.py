from flask import render_template, flash, redirect, url_for, Response, current_app
from queuemaster.admin import admin_bp
from queuemaster.exceptions import DatabaseQueryError
from queuemaster.queue_engine import QueueEngine
from queuemaster.synthetic_history import generate_synthetic_history
from queuemaster.utils import apply_queue_operation, get_state_repository
from .forms import CategoryForm, EmptyForm
import logging
import uuid
from datetime import datetime
from io import BytesIO
from openpyxl import Workbook

logger = logging.getLogger(__name__)

def _render_admin(category_form):
    try:
        state = get_state_repository().load()
        categories, counters, ticket_count = state.categories, state.counters, len(state.tickets)
    except DatabaseQueryError as e:
        logger.error(f"Error al cargar el panel de administración: {e}")
        flash("Error al cargar el estado de la cola.", "danger")
        categories, counters, ticket_count = [], [], 0

    return render_template('admin/admin.html',
                           title='Administración',
                           categories=categories,
                           counters=counters,
                           ticket_count=ticket_count,
                           category_form=category_form,
                           form=EmptyForm())

@admin_bp.route('/')
def admin_panel():
    return _render_admin(CategoryForm())

@admin_bp.route('/category/new', methods=['POST'])
def create_category():
    form = CategoryForm()
    if not form.validate_on_submit():
        return _render_admin(form), 400

    # Identificador opaco: el nombre puede repetirse o no contener letras
    category_id = str(uuid.uuid4())
    try:
        result = apply_queue_operation('add_category', category_id, form.name.data, form.prefix.data, form.color.data)
    except DatabaseQueryError as e:
        logger.error(f"Error al crear categoría: {e}", exc_info=True)
        flash('Ocurrió un error al crear el trámite.', 'danger')
        return redirect(url_for('admin_bp.admin_panel'))

    if result:
        flash(f'Trámite "{form.name.data}" creado exitosamente.', 'success')
    else:
        flash(result.message, 'warning')
    return redirect(url_for('admin_bp.admin_panel'))

@admin_bp.route('/category/<string:category_id>/delete', methods=['POST'])
def delete_category(category_id):
    try:
        result = apply_queue_operation('remove_category', category_id)
        if result:
            flash(f'Trámite "{result.value.name}" borrado. Sus tickets se conservan en el historial.', 'success')
        else:
            flash(result.message, 'warning')
    except DatabaseQueryError as e:
        logger.error(f"Error al borrar categoría: {e}", exc_info=True)
        flash('Ocurrió un error al borrar el trámite.', 'danger')

    return redirect(url_for('admin_bp.admin_panel'))

@admin_bp.route('/generate', methods=['POST'])
def generate_history():
    try:
        repository = get_state_repository()
        state = repository.load()
        tickets = generate_synthetic_history(state.categories, months=current_app.config["SYNTHETIC_HISTORY_MONTHS"])
        result = QueueEngine(state).append_history(tickets)
        repository.save(state)
        flash(f'Se generaron {result.value} tickets de historial sintético.', 'success')
    except DatabaseQueryError as e:
        logger.error(f"Error al generar historial sintético: {e}", exc_info=True)
        flash('Ocurrió un error al generar el historial.', 'danger')

    return redirect(url_for('admin_bp.admin_panel'))

@admin_bp.route('/clear', methods=['POST'])
def clear_history():
    try:
        result = apply_queue_operation('clear_history')
        flash(f'Historial borrado: {result.value} tickets eliminados.', 'success')
    except DatabaseQueryError as e:
        logger.error(f"Error al borrar el historial: {e}", exc_info=True)
        flash('Ocurrió un error al borrar el historial.', 'danger')

    return redirect(url_for('admin_bp.admin_panel'))

@admin_bp.route('/export_tickets_to_xlsx', methods=['GET'])
def export_tickets_to_xlsx():
    try:
        state = get_state_repository().load()
    except DatabaseQueryError as e:
        logger.error(f"Error al exportar tickets: {e}")
        flash("Error al generar el reporte de tickets.", "danger")
        return redirect(url_for('admin_bp.admin_panel'))

    category_map = {c.id: c.name for c in state.categories}
    counter_map = {c.id: c.name for c in state.counters}

    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = "Tickets"

    headers = ['ID', 'Turno', 'Trámite', 'Estado', 'Ventanilla', 'Emitido', 'Llamado', 'Inicio Atención', 'Fin']
    worksheet.append(headers)

    def fmt(value):
        return value.strftime('%d/%m/%Y %H:%M') if value else ''

    for ticket in state.tickets:
        counter_name = counter_map.get(ticket.counter_id, f"Ventanilla {ticket.counter_id}") if ticket.counter_id else ''
        worksheet.append([
            ticket.id,
            ticket.display_id,
            category_map.get(ticket.category_id, ticket.category_id),
            ticket.status_name,
            counter_name,
            fmt(ticket.created_at),
            fmt(ticket.called_at),
            fmt(ticket.started_at),
            fmt(ticket.completed_at),
        ])

    output = BytesIO()
    workbook.save(output)
    output.seek(0)

    logger.info(f'Se ha generado un reporte ".xlsx" con {len(state.tickets)} tickets.')

    return Response(
        output.read(),
        mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment;filename=tickets_{datetime.now().strftime('%Y%m%d_%H%M%S')}.xlsx"}
    )
