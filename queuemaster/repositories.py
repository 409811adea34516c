import logging

import pymongo
from bson.errors import InvalidDocument

from queuemaster.exceptions import DatabaseQueryError
from queuemaster.models import QueueState
from queuemaster.utils import now

logger = logging.getLogger(__name__)

SNAPSHOT_ID = "current"

# -----------------------------------------------
# INTERFAZ DE REPOSITORIO
# -----------------------------------------------

class StateRepository:
    """
    Define el contrato para guardar y recuperar la instantánea de estado.
    El estado se escribe entero en cada cambio (gana la última escritura).
    """
    def load(self):
        raise NotImplementedError

    def save(self, state):
        raise NotImplementedError

    def exists(self):
        raise NotImplementedError

# -----------------------------------------------
# IMPLEMENTACIÓN MONGODB
# -----------------------------------------------

class MongoStateRepository(StateRepository):
    """Guarda la instantánea como un único documento de MongoDB."""
    def __init__(self, db, collection_name="queue_state"):
        self.collection = db[collection_name]

    def exists(self):
        try:
            return self.collection.count_documents({"_id": SNAPSHOT_ID}, limit=1) > 0
        except pymongo.errors.PyMongoError as e:
            raise DatabaseQueryError("Error al consultar el estado de la cola.", original_exception=e)

    def load(self):
        """Devuelve la última instantánea guardada o el estado por defecto si no hay ninguna."""
        try:
            document = self.collection.find_one({"_id": SNAPSHOT_ID})
        except pymongo.errors.PyMongoError as e:
            logger.error(f"Error al cargar el estado de la cola: {e}")
            raise DatabaseQueryError("Error al cargar el estado de la cola.", original_exception=e)

        if not document:
            logger.info("No hay estado guardado: se inicializa con los valores por defecto.")
            return QueueState.default()
        return QueueState.from_dict(document)

    def save(self, state):
        document = state.to_dict()
        document["saved_at"] = now()
        # DocumentTooLarge (límite de 16 MB de BSON) no hereda de PyMongoError
        try:
            self.collection.replace_one({"_id": SNAPSHOT_ID}, document, upsert=True)
        except (pymongo.errors.PyMongoError, InvalidDocument) as e:
            logger.error(f"Error al guardar el estado de la cola: {e}")
            raise DatabaseQueryError("Error al guardar el estado de la cola.", original_exception=e)
        logger.debug(f"Estado guardado: {len(state.tickets)} tickets, {len(state.counters)} ventanillas.")
