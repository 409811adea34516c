# queuemaster/__init__.py

from flask import Flask, render_template, current_app, request, jsonify
from flask_pymongo import PyMongo
from flask_wtf.csrf import CSRFProtect
from pymongo.errors import ConnectionFailure, ConfigurationError
import logging
from logging.handlers import RotatingFileHandler
from config import DevelopmentConfig, ProductionConfig, TestingConfig
import os
import sys

# --- Extensiones ---
mongo = PyMongo()
csrf = CSRFProtect()

CONFIG_BY_NAME = {
    'testing': TestingConfig,
    'production': ProductionConfig,
    'development': DevelopmentConfig,
}

# Endpoints consultados por las pantallas; sus errores se responden en JSON
JSON_ENDPOINTS = ('display_bp.display_data', 'dashboard_bp.analytics_data')


def init_app_extensions(app):
    """
    Activa CSRF y conecta con MongoDB, que guarda la instantánea de la cola.
    Sin base de datos la aplicación no arranca.
    """
    csrf.init_app(app)

    if not app.config.get("MONGO_URI"):
        raise RuntimeError("FATAL: La variable de entorno MONGO_URI no está configurada.")

    app.logger.info("Conectando con la base de datos de la cola...")

    try:
        mongo.init_app(app)
        mongo.cx.server_info() # Fuerza la conexión para verificarla
    except (ConnectionFailure, ConfigurationError) as e:
        app.logger.error(f"No se pudo conectar con MongoDB: {e}")
        raise RuntimeError(f"No se pudo conectar a la base de datos: {e}")

    app.logger.info(f"Estado de la cola en la colección '{app.config['QUEUE_STATE_COLLECTION']}'.")

def register_app_blueprints(app):
    """Una vista por puesto: kiosco, asesor, pantalla, analítica y administración."""
    from queuemaster.main import main_bp
    from queuemaster.kiosk import kiosk_bp
    from queuemaster.advisor import advisor_bp
    from queuemaster.display import display_bp
    from queuemaster.dashboard import dashboard_bp
    from queuemaster.admin import admin_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(kiosk_bp, url_prefix='/kiosk')
    app.register_blueprint(advisor_bp, url_prefix='/advisor')
    app.register_blueprint(display_bp, url_prefix='/display')
    app.register_blueprint(dashboard_bp, url_prefix='/analytics')
    app.register_blueprint(admin_bp, url_prefix='/admin')

def configure_app_logging(app):
    """
    Envía los logs de la aplicación y de los módulos del paquete a un fichero
    rotativo y a la salida estándar.
    """
    log_file = app.config["LOG_FILE"]
    log_dir = os.path.dirname(log_file)
    if log_dir and not os.path.exists(log_dir):
        os.makedirs(log_dir)

    file_handler = RotatingFileHandler(log_file, maxBytes=10240, backupCount=10)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s %(levelname)s %(name)s: %(message)s [in %(pathname)s:%(lineno)d]'))

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(logging.Formatter('%(levelname)s %(name)s: %(message)s'))

    level = logging.DEBUG if app.debug or app.testing else logging.INFO

    # Los módulos del paquete usan logging.getLogger(__name__)
    package_logger = logging.getLogger("queuemaster")
    for logger in (app.logger, package_logger):
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        logger.setLevel(level)
        logger.addHandler(file_handler)
        logger.addHandler(stream_handler)
    package_logger.propagate = False

    app.logger.info(f"Logging inicializado en {log_file}")

def _error_response(status, message):
    if request.endpoint in JSON_ENDPOINTS:
        return jsonify({"error": message}), status
    return render_template(f"errors/{status}.html"), status

def register_app_error_handlers(app):
    @app.errorhandler(400)
    def bad_request_error(error):
        return _error_response(400, "Petición no válida.")

    @app.errorhandler(404)
    def page_not_found_error(error):
        return _error_response(404, "Recurso no encontrado.")

    @app.errorhandler(500)
    def internal_server_error(error):
        current_app.logger.error(f"Error interno en {request.path}: {error}", exc_info=True)
        return _error_response(500, "Error interno del servidor.")

def create_app(config_class="development"):
    """
    Crea la aplicación de gestión de turnos.

    `config_class` es el nombre del entorno ('development', 'production' o
    'testing'); un nombre desconocido usa la configuración de desarrollo.
    """
    app = Flask(__name__)
    app.config.from_object(CONFIG_BY_NAME.get(config_class, DevelopmentConfig))

    configure_app_logging(app)
    init_app_extensions(app)
    register_app_blueprints(app)
    register_app_error_handlers(app)

    from queuemaster import commands
    app.cli.add_command(commands.init_queue_data_command)
    app.cli.add_command(commands.generate_history_command)
    app.cli.add_command(commands.clear_history_command)

    return app
