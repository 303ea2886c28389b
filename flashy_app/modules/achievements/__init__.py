# File: flashy_app/modules/achievements/__init__.py
from flask import Blueprint

blueprint = Blueprint('achievements', __name__)

from . import events, routes  # noqa: E402,F401
