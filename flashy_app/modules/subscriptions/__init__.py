# File: flashy_app/modules/subscriptions/__init__.py
from flask import Blueprint

blueprint = Blueprint('subscriptions', __name__)

from . import routes  # noqa: E402,F401
