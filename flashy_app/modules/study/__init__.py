# File: flashy_app/modules/study/__init__.py
from flask import Blueprint

blueprint = Blueprint('study', __name__)

from . import routes  # noqa: E402,F401
