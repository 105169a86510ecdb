from flask import current_app, jsonify
from werkzeug.exceptions import HTTPException

from folio.storage import StorageError

ERROR_MESSAGES = {
    400: 'Bad request',
    401: 'Unauthorized',
    403: 'Forbidden',
    404: 'Not found',
    405: 'Method not allowed',
    413: 'File too large',
    500: 'Internal server error',
}


def error_response(status, message=None):
    return jsonify({'error': message or ERROR_MESSAGES.get(status, 'Error')}), status


def register_error_handlers(app):
    """Register JSON error handlers with the Flask application"""

    @app.errorhandler(HTTPException)
    def http_error(error):
        # abort(404, 'Post not found') carries its own description
        message = ERROR_MESSAGES.get(error.code)
        if error.description and error.description != type(error).description:
            message = error.description
        return error_response(error.code, message)

    @app.errorhandler(StorageError)
    def storage_error(error):
        current_app.logger.error(f"Storage backend failure: {str(error)}")
        return error_response(502, 'Storage backend failure')

    @app.errorhandler(500)
    def internal_error(error):
        current_app.logger.error(f"Unhandled error: {str(getattr(error, 'original_exception', error))}")
        return error_response(500)
