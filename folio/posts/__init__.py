from flask import Blueprint

bp = Blueprint('posts', __name__)

from folio.posts import routes
