# File: flashy_app/modules/auth/routes/api.py
from flask import current_app, jsonify
from flask_login import current_user, login_required, login_user, logout_user

from flashy_app.core.error_handlers import AuthorizationError, ValidationError, success_response

from .. import blueprint
from ..forms import LoginForm, RegistrationForm
from ..services.auth_service import AuthService


def _form_errors(form) -> dict:
    return {name: errors[0] for name, errors in form.errors.items() if errors}


@blueprint.route('/register', methods=['POST'])
def register():
    # JSON clients post without a CSRF token; the blueprint is CSRF-exempt
    form = RegistrationForm(meta={'csrf': False})
    if not form.validate():
        raise ValidationError('Registration failed', errors=_form_errors(form))

    user = AuthService.register_user(form.username.data, form.email.data, form.password.data)
    login_user(user)
    return jsonify(success_response(user.to_dict(), 'Account created')), 201


@blueprint.route('/login', methods=['POST'])
def login():
    form = LoginForm(meta={'csrf': False})
    if not form.validate():
        raise ValidationError('Login failed', errors=_form_errors(form))

    user = AuthService.authenticate_user(form.username.data, form.password.data)
    if user is None:
        current_app.logger.info("Failed login for %s", form.username.data)
        raise AuthorizationError('Invalid username or password')

    login_user(user, remember=form.remember_me.data)
    return jsonify(success_response(user.to_dict(), 'Logged in'))


@blueprint.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify(success_response(message='Logged out'))


@blueprint.route('/me', methods=['GET'])
@login_required
def me():
    return jsonify(success_response(current_user.to_dict()))
