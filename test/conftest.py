import pytest
from queuemaster import create_app, mongo
from queuemaster.models import QueueState
from queuemaster.repositories import MongoStateRepository
from unittest.mock import patch
from datetime import datetime, timedelta
import logging
import mongomock

# Desactivar la propagación de logs para evitar duplicados en la consola de pytest
logging.getLogger("werkzeug").setLevel(logging.ERROR)


def mongomock_client(*args, **kwargs):
    return mongomock.MongoClient()


@pytest.fixture(scope="function")
def app():
    """Crea y configura una instancia de la aplicación Flask para cada test."""
    with patch('flask_pymongo.MongoClient', mongomock_client):
        app = create_app('testing')
        yield app


@pytest.fixture(scope="function")
def client(app):
    """Cliente de prueba simple para la aplicación Flask."""
    return app.test_client()


@pytest.fixture(scope="function")
def db(app):
    """Fixture que proporciona acceso a la BD y la limpia antes de cada test."""
    with app.app_context():
        mongo.db.client.drop_database(mongo.db.name)
        yield mongo


@pytest.fixture(scope="function")
def repository(app, db):
    """Repositorio de estado sobre la BD de prueba."""
    return MongoStateRepository(db.db, app.config["QUEUE_STATE_COLLECTION"])


@pytest.fixture(scope="function")
def seeded_state(repository):
    """Guarda el estado por defecto (categorías G, P, C y tres ventanillas)."""
    state = QueueState.default()
    repository.save(state)
    return state


class FakeClock:
    """Reloj que avanza un minuto en cada llamada."""
    def __init__(self, start=None, step=timedelta(minutes=1)):
        self.current = start or datetime(2026, 10, 19, 9, 0)
        self.step = step

    def __call__(self):
        value = self.current
        self.current = self.current + self.step
        return value


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def read_flashes(client):
    """Devuelve una función que lee los mensajes flash pendientes de la sesión."""
    def _read():
        with client.session_transaction() as sess:
            return sess.get('_flashes', [])
    return _read
