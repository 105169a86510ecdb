from flask import Blueprint

bp = Blueprint('auth', __name__)

from folio.auth import routes
