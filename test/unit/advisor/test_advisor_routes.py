from queuemaster.models import (
    CALLING,
    COMPLETED,
    COUNTER_AWAY,
    COUNTER_BUSY,
    COUNTER_IDLE,
    NO_SHOW,
    SERVING,
)


def issue(client, *category_ids):
    for category_id in category_ids:
        client.post(f'/kiosk/issue/{category_id}')


def test_list_counters(client, seeded_state):
    response = client.get('/advisor/')
    html = response.get_data(as_text=True)

    assert response.status_code == 200
    for counter in seeded_state.counters:
        assert counter.name in html


def test_counter_panel_shows_upcoming_in_dispatch_order(client, seeded_state):
    """
    GIVEN a general ticket issued before a preferential one
    WHEN the counter panel is opened
    THEN the preferential ticket is listed first
    """
    issue(client, "1", "2")

    html = client.get('/advisor/1').get_data(as_text=True)
    upcoming = html.split("Próximos turnos", 1)[1]

    assert upcoming.index("P001") < upcoming.index("G001")
    assert "Llamar siguiente" in html


def test_counter_panel_unknown_counter(client, seeded_state):
    assert client.get('/advisor/99').status_code == 404


def test_full_ticket_lifecycle(client, repository, seeded_state, read_flashes):
    """
    GIVEN one waiting ticket
    WHEN the advisor calls, starts and completes it
    THEN the ticket ends completed and the counter is idle again
    """
    issue(client, "3")

    response = client.post('/advisor/1/call')
    assert response.status_code == 302
    assert response.location.endswith('/advisor/1')
    assert read_flashes()[-1] == ('success', 'Llamando al turno C001.')
    state = repository.load()
    assert state.tickets[0].status == CALLING
    assert state.find_counter(1).status == COUNTER_BUSY

    client.post('/advisor/1/start')
    assert repository.load().tickets[0].status == SERVING

    client.post('/advisor/1/complete/completed')
    state = repository.load()
    ticket = state.tickets[0]
    assert ticket.status == COMPLETED
    assert ticket.called_at <= ticket.started_at <= ticket.completed_at
    assert state.find_counter(1).status == COUNTER_IDLE
    assert state.find_counter(1).current_ticket_id is None


def test_no_show_from_calling(client, repository, seeded_state):
    issue(client, "1")
    client.post('/advisor/2/call')

    client.post('/advisor/2/complete/no-show')

    ticket = repository.load().tickets[0]
    assert ticket.status == NO_SHOW
    assert ticket.started_at is None
    assert ticket.counter_id == 2


def test_call_next_with_empty_queue(client, repository, seeded_state, read_flashes):
    """
    GIVEN no waiting tickets
    WHEN the advisor calls the next one
    THEN the counter stays idle and an informative message is flashed
    """
    client.post('/advisor/1/call')

    assert read_flashes()[-1] == ('info', 'No hay turnos pendientes.')
    assert repository.load().find_counter(1).status == COUNTER_IDLE


def test_call_next_on_busy_counter_is_rejected(client, repository, seeded_state, read_flashes):
    issue(client, "1", "1")
    client.post('/advisor/1/call')

    client.post('/advisor/1/call')

    assert read_flashes()[-1][0] == 'warning'
    state = repository.load()
    assert [t.status for t in state.tickets].count(CALLING) == 1


def test_start_serving_without_ticket_is_rejected(client, repository, seeded_state, read_flashes):
    before = repository.load().to_dict()

    client.post('/advisor/1/start')

    assert read_flashes()[-1][0] == 'warning'
    assert repository.load().to_dict() == before


def test_unknown_outcome_is_not_found(client, seeded_state):
    issue(client, "1")
    client.post('/advisor/1/call')

    assert client.post('/advisor/1/complete/cancelado').status_code == 404


def test_toggle_away(client, repository, seeded_state):
    client.post('/advisor/3/away')
    assert repository.load().find_counter(3).status == COUNTER_AWAY

    issue(client, "1")
    client.post('/advisor/3/call')
    assert repository.load().tickets[0].counter_id is None

    client.post('/advisor/3/away')
    assert repository.load().find_counter(3).status == COUNTER_IDLE


def test_action_on_unknown_counter(client, repository, seeded_state, read_flashes):
    client.post('/advisor/42/call')

    assert read_flashes()[-1][0] == 'warning'
