from io import BytesIO
from unittest.mock import patch

import mongomock
from openpyxl import load_workbook
from pymongo.errors import DocumentTooLarge

from queuemaster.models import COMPLETED, NO_SHOW, COUNTER_BUSY, COUNTER_IDLE


def test_admin_panel(client, seeded_state):
    response = client.get('/admin/')
    html = response.get_data(as_text=True)

    assert response.status_code == 200
    for category in seeded_state.categories:
        assert category.name in html


def create(client, name, prefix='E', color='#123abc'):
    return client.post('/admin/category/new', data={'name': name, 'prefix': prefix, 'color': color})


def test_create_category(client, repository, seeded_state, read_flashes):
    """
    GIVEN the admin panel
    WHEN a valid category is submitted
    THEN it is stored with a generated id, an upper-case prefix and a fresh sequence
    """
    response = create(client, 'Atención Empresas', prefix='e')

    assert response.status_code == 302
    assert read_flashes()[-1][0] == 'success'
    state = repository.load()
    category = state.categories[-1]
    assert category.name == 'Atención Empresas'
    assert category.id not in ('1', '2', '3')
    assert category.prefix == 'E'
    assert category.color == '#123abc'
    assert state.next_ticket_number[category.id] == 1

    client.post(f'/kiosk/issue/{category.id}')
    assert repository.load().tickets[0].display_id == 'E001'


def test_create_category_invalid_form(client, repository, seeded_state):
    response = client.post('/admin/category/new', data={
        'name': 'X', 'prefix': '123', 'color': 'rojo',
    })

    assert response.status_code == 400
    assert 'El prefijo debe tener entre 1 y 3 letras' in response.get_data(as_text=True)
    assert len(repository.load().categories) == 3


def test_category_named_only_with_punctuation_can_be_used_and_deleted(client, repository, seeded_state):
    """
    GIVEN a category whose name has no letters or digits
    WHEN a ticket is issued for it and it is then deleted
    THEN both requests reach the category through its id
    """
    create(client, '¡¡', prefix='X')
    category = repository.load().categories[-1]
    assert category.id

    assert client.post(f'/kiosk/issue/{category.id}').status_code == 302
    assert repository.load().tickets[0].display_id == 'X001'

    assert client.post(f'/admin/category/{category.id}/delete').status_code == 302
    assert repository.load().find_category(category.id) is None


def test_categories_with_similar_names_get_distinct_ids(client, repository, seeded_state, read_flashes):
    create(client, 'Caja Rápida', prefix='R')
    create(client, 'caja-rapida', prefix='K')

    assert read_flashes()[-1][0] == 'success'
    categories = repository.load().categories
    assert [c.name for c in categories[3:]] == ['Caja Rápida', 'caja-rapida']
    assert categories[3].id != categories[4].id


def test_delete_category_keeps_its_tickets(client, repository, seeded_state):
    """
    GIVEN a category with an issued ticket
    WHEN the category is deleted
    THEN the ticket stays in the history with its orphaned category id
    """
    client.post('/kiosk/issue/3')

    client.post('/admin/category/3/delete')

    state = repository.load()
    assert state.find_category('3') is None
    assert state.tickets[0].category_id == '3'
    assert client.get('/analytics/data').get_json()['total_tickets'] == 1


def test_delete_unknown_category(client, seeded_state, read_flashes):
    client.post('/admin/category/nada/delete')

    assert read_flashes()[-1][0] == 'warning'


def test_generate_history(app, client, repository, seeded_state):
    app.config['SYNTHETIC_HISTORY_MONTHS'] = 1
    client.post('/kiosk/issue/1')

    response = client.post('/admin/generate')

    assert response.status_code == 302
    state = repository.load()
    synthetic = [t for t in state.tickets if t.id.startswith('synth-')]
    assert len(synthetic) > 500
    assert {t.status for t in synthetic} == {COMPLETED, NO_SHOW}
    assert len(state.tickets) == len(synthetic) + 1


def test_generate_history_that_does_not_fit_is_reported(app, client, repository, seeded_state, read_flashes):
    """
    GIVEN a history too large for the snapshot document
    WHEN synthetic history is generated
    THEN an error is flashed and the stored state is unchanged
    """
    app.config['SYNTHETIC_HISTORY_MONTHS'] = 1
    too_large = DocumentTooLarge("documento demasiado grande")

    with patch.object(mongomock.Collection, 'replace_one', side_effect=too_large):
        response = client.post('/admin/generate')

    assert response.status_code == 302
    assert read_flashes()[-1] == ('danger', 'Ocurrió un error al generar el historial.')
    assert repository.load().tickets == []


def test_clear_history_frees_counters(client, repository, seeded_state, read_flashes):
    """
    GIVEN a ticket being called at a counter
    WHEN the history is cleared
    THEN no tickets remain and the counter is idle
    """
    client.post('/kiosk/issue/1')
    client.post('/kiosk/issue/2')
    client.post('/advisor/1/call')
    assert repository.load().find_counter(1).status == COUNTER_BUSY

    client.post('/admin/clear')

    state = repository.load()
    assert state.tickets == []
    assert state.find_counter(1).status == COUNTER_IDLE
    assert read_flashes()[-1] == ('success', 'Historial borrado: 2 tickets eliminados.')
    assert state.next_ticket_number['1'] == 2


def test_export_tickets_to_xlsx(client, repository, seeded_state):
    client.post('/kiosk/issue/1')
    client.post('/advisor/2/call')

    response = client.get('/admin/export_tickets_to_xlsx')

    assert response.status_code == 200
    assert response.mimetype == 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    assert 'attachment;filename=tickets_' in response.headers['Content-Disposition']

    worksheet = load_workbook(BytesIO(response.data))['Tickets']
    rows = list(worksheet.iter_rows(values_only=True))
    assert rows[0][:4] == ('ID', 'Turno', 'Trámite', 'Estado')
    assert len(rows) == 2
    assert rows[1][1:5] == ('G001', 'General', 'Llamando', 'Ventanilla 2')
    # sin hora de inicio ni de fin
    assert not rows[1][7] and not rows[1][8]
