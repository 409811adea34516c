from flask import render_template, flash, redirect, url_for
from queuemaster.kiosk import kiosk_bp
from queuemaster.admin.forms import EmptyForm
from queuemaster.exceptions import DatabaseQueryError
from queuemaster.utils import apply_queue_operation, get_state_repository
import logging

logger = logging.getLogger(__name__)

@kiosk_bp.route('/')
def kiosk():
    form = EmptyForm()
    try:
        categories = get_state_repository().load().categories
    except DatabaseQueryError as e:
        logger.error(f"Error al cargar las categorías del kiosco: {e}")
        flash("No se pudieron cargar los trámites. Inténtelo de nuevo.", "danger")
        categories = []
    return render_template('kiosk/kiosk.html', title='Kiosco', categories=categories, form=form)

@kiosk_bp.route('/issue/<string:category_id>', methods=['POST'])
def issue_ticket(category_id):
    try:
        result = apply_queue_operation('issue_ticket', category_id)
        if result:
            # La plantilla muestra en grande los mensajes de la categoría 'ticket'
            flash(result.value.display_id, 'ticket')
        else:
            flash(result.message, 'warning')
    except DatabaseQueryError as e:
        logger.error(f"Error al emitir ticket para la categoría {category_id}: {e}", exc_info=True)
        flash('Ocurrió un error al emitir el turno.', 'danger')

    return redirect(url_for('kiosk_bp.kiosk'))
