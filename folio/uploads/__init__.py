from flask import Blueprint

bp = Blueprint('uploads', __name__)

from folio.uploads import routes
