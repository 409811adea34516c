from flask import Blueprint

kiosk_bp = Blueprint('kiosk_bp', __name__)

from . import routes
