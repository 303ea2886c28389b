# File: flashy_app/modules/community/__init__.py
from flask import Blueprint

blueprint = Blueprint('community', __name__)

from . import routes  # noqa: E402,F401
