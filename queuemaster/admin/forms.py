from flask_wtf import FlaskForm
from wtforms import SubmitField, StringField
from wtforms.validators import DataRequired, Length, Regexp

class EmptyForm(FlaskForm):
    submit = SubmitField('Enviar')

class CategoryForm(FlaskForm):
    name = StringField('Nombre del trámite', validators=[DataRequired(message="Este campo es obligatorio"), Length(min=2, max=30, message='El trámite debe tener entre 2 y 30 caracteres')])
    prefix = StringField('Prefijo', validators=[DataRequired(message="Este campo es obligatorio"), Regexp(r'^[A-Za-z]{1,3}$', message='El prefijo debe tener entre 1 y 3 letras')])
    color = StringField('Color', default='#3b82f6', validators=[DataRequired(message="Este campo es obligatorio"), Regexp(r'^#[0-9a-fA-F]{6}$', message='El color debe tener el formato #rrggbb')])
    submit = SubmitField('Añadir', render_kw={"class": "btn btn-primary"})
