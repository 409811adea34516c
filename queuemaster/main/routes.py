# queuemaster/main/routes.py
from flask import render_template
from queuemaster.main import main_bp

@main_bp.route('/')
@main_bp.route('/index')
def home():
    return render_template('welcome.html', title='Inicio')
