# config.py

import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    """
    Clase de configuración base.
    SECRET_KEY no tiene valor por defecto para forzar su definición en los entornos.
    """
    SECRET_KEY = os.environ.get("SECRET_KEY")

    # Configuración de MongoDB
    # Flask-PyMongo espera la URI en la variable 'MONGO_URI'
    MONGO_URI = os.environ.get("MONGO_URI")

    # Colección donde se guarda la instantánea completa del estado de la cola
    QUEUE_STATE_COLLECTION = os.environ.get("QUEUE_STATE_COLLECTION", "queue_state")

    # Meses de historial que genera el generador de datos sintéticos
    SYNTHETIC_HISTORY_MONTHS = int(os.environ.get("SYNTHETIC_HISTORY_MONTHS") or 6)

    # Número de llamadas recientes que muestra la pantalla pública
    DISPLAY_RECENT_CALLS = int(os.environ.get("DISPLAY_RECENT_CALLS") or 6)

    LOG_FILE = os.environ.get("LOG_FILE", "logs/queuemaster.log")


class DevelopmentConfig(Config):
    """Configuración para el entorno de desarrollo."""
    DEBUG = True
    SECRET_KEY = os.environ.get("SECRET_KEY") or "dev-secret-key"
    # En desarrollo, si MONGO_URI no está definida, usamos una por defecto
    # que apunta al contenedor de Docker.
    MONGO_URI = (
        os.environ.get("MONGO_URI") or "mongodb://mongo:27017/queuemaster_db"
    )


class ProductionConfig(Config):
    """Configuración para el entorno de producción."""
    DEBUG = False
    # En producción, MONGO_URI y SECRET_KEY DEBEN definirse como variables de entorno.


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret-key"
    WTF_CSRF_ENABLED = False
    MONGO_URI = (
        os.environ.get("TEST_MONGO_URI")
        or "mongodb://localhost:27017/queuemaster_test"
    )
