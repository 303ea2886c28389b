# File: flashy_app/modules/decks/__init__.py
from flask import Blueprint

blueprint = Blueprint('decks', __name__)

from . import routes  # noqa: E402,F401
