from flask import Blueprint

bp = Blueprint('main', __name__)

from folio.main import routes
