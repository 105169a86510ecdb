# Third-party imports
from flask import current_app
from flask_wtf import FlaskForm
from flask_wtf.file import FileField, FileRequired
from wtforms.validators import ValidationError


class UploadForm(FlaskForm):
    class Meta:
        csrf = False

    file = FileField('Image', validators=[FileRequired(message='Missing file')])

    def validate_file(self, field):
        """Only the configured image content types are accepted"""
        allowed = current_app.config.get('UPLOAD_ALLOWED_TYPES', [])
        mimetype = (field.data.mimetype or '').lower()
        if mimetype not in allowed:
            raise ValidationError('Unsupported file type')
