# Image asset uploads for the editor
import os
import time

from flask import current_app, jsonify, send_from_directory
from flask_login import login_required

from folio import get_store
from folio.audit import audit_log_file_operation
from folio.errors import error_response
from folio.forms import first_error
from folio.storage import FilesystemStore, StorageError
from folio.uploads import bp
from folio.uploads.forms import UploadForm
from folio.utils import safe_upload_name


@bp.route('/upload', methods=['POST'])
@login_required
def upload():
    """
    Store an image in the active backend and return its public URL
    """
    form = UploadForm()
    if not form.validate():
        return error_response(400, first_error(form))

    image = form.file.data
    prefix = current_app.config.get('UPLOADS_PREFIX', 'uploads/')
    key = f'{prefix}{int(time.time() * 1000)}-{safe_upload_name(image.filename)}'
    data = image.read()

    try:
        url = get_store().put_asset(key, data, image.mimetype)
    except StorageError as e:
        current_app.logger.error(f'Upload of {key} failed: {str(e)}')
        return error_response(502, 'Upload failed')

    audit_log_file_operation('UPLOAD', key, f'{len(data)} bytes, {image.mimetype}')
    return jsonify({'ok': True, 'url': url}), 201


@bp.route('/uploads/<path:filename>')
def uploaded_file(filename):
    """
    Serve assets stored by the filesystem backend
    """
    store = get_store()
    if not isinstance(store, FilesystemStore):
        return error_response(404)
    directory = os.path.join(store.root, current_app.config.get('UPLOADS_PREFIX', 'uploads/').strip('/'))
    return send_from_directory(directory, filename)
