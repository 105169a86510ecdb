# Third-party imports
from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField
from wtforms.validators import AnyOf, DataRequired, Length, Optional

# Local application imports
from folio.models import STATUSES

MISSING_FIELDS = 'Missing title or html'
INVALID_STATUS = 'Invalid status'


class PostForm(FlaskForm):
    """Create/update payload sent by the editor."""

    class Meta:
        csrf = False

    title = StringField('Title', validators=[DataRequired(message=MISSING_FIELDS), Length(max=255)])
    html = TextAreaField('Content', validators=[DataRequired(message=MISSING_FIELDS)])
    slug = StringField('URL Slug', validators=[Optional(), Length(max=255)])
    status = StringField('Status', validators=[Optional(), AnyOf(STATUSES, message=INVALID_STATUS)])


class StatusForm(FlaskForm):
    class Meta:
        csrf = False

    status = StringField('Status', validators=[
        DataRequired(message=INVALID_STATUS),
        AnyOf(STATUSES, message=INVALID_STATUS),
    ])
