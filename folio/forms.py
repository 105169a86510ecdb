# Third-party imports
from flask_wtf import FlaskForm
from wtforms import PasswordField, StringField
from wtforms.validators import DataRequired

MISSING_CREDENTIALS = 'Missing username or password'


class LoginForm(FlaskForm):
    class Meta:
        csrf = False

    username = StringField('Username', validators=[DataRequired(message=MISSING_CREDENTIALS)])
    password = PasswordField('Password', validators=[DataRequired(message=MISSING_CREDENTIALS)])


def first_error(form):
    """The first validation message, in field declaration order."""
    for field in form:
        if field.errors:
            return field.errors[0]
    return 'Invalid request'
