from flask import Blueprint

display_bp = Blueprint('display_bp', __name__)

from . import routes
