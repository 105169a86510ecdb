# Authentication routes for the single site administrator
import hmac

from flask import current_app, jsonify
from flask_login import current_user, login_user, logout_user

from folio.audit import audit_log_authentication, audit_log_security_event
from folio.auth import bp
from folio.forms import LoginForm, first_error
from folio.errors import error_response
from folio.models import Admin
from folio.utils import json_formdata, json_object_body


def _matches(submitted, expected):
    return hmac.compare_digest(str(submitted).encode('utf-8'), expected.encode('utf-8'))


@bp.route('/login', methods=['POST'])
def login():
    """
    Exchange the admin credentials for a session cookie
    """
    expected_user = current_app.config.get('ADMIN_USERNAME')
    expected_pass = current_app.config.get('ADMIN_PASSWORD')
    if not expected_user or not expected_pass:
        current_app.logger.error('Login attempted but ADMIN_USERNAME or ADMIN_PASSWORD is not configured')
        audit_log_security_event('MISCONFIGURED', 'Admin credentials are not configured')
        return error_response(500, 'Server is missing ADMIN_USERNAME or ADMIN_PASSWORD')

    body = json_object_body()
    if body is None:
        return error_response(400, 'Invalid JSON body')

    form = LoginForm(formdata=json_formdata(body))
    if not form.validate():
        return error_response(400, first_error(form))

    username = str(form.username.data)
    if _matches(username, expected_user) and _matches(form.password.data, expected_pass):
        login_user(Admin(username))
        audit_log_authentication('LOGIN', username, True)
        current_app.logger.info(f'Admin {username} logged in')
        return jsonify({'ok': True})

    audit_log_authentication('LOGIN', username, False)
    return error_response(401, 'Invalid credentials')


@bp.route('/logout', methods=['POST'])
def logout():
    """
    Clear the session cookie
    """
    if current_user.is_authenticated:
        audit_log_authentication('LOGOUT', current_user.username, True)
    logout_user()
    return jsonify({'ok': True})


@bp.route('/session')
def session_info():
    if current_user.is_authenticated:
        return jsonify({'user': {'username': current_user.username}})
    return jsonify({'user': None})


@bp.route('/admin/check')
def admin_check():
    if current_user.is_authenticated:
        return jsonify({'isAdmin': True})
    return jsonify({'isAdmin': False}), 401
