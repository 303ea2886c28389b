# File: flashy_app/modules/auth/forms.py
"""
Login and registration forms. The JSON endpoints feed request bodies
through these, so validation messages are the same for every client.
"""

from flask_wtf import FlaskForm
from wtforms import BooleanField, PasswordField, StringField
from wtforms.validators import DataRequired, EqualTo, Length, Regexp, ValidationError

from flashy_app.models import User


class LoginForm(FlaskForm):
    username = StringField('Username or email', validators=[DataRequired(message="Enter your username or email.")])
    password = PasswordField('Password', validators=[DataRequired(message="Enter your password.")])
    remember_me = BooleanField('Remember me')


class RegistrationForm(FlaskForm):
    username = StringField('Username', validators=[
        DataRequired(message="Choose a username."),
        Length(min=3, max=80),
    ])
    email = StringField('Email', validators=[
        DataRequired(message="Enter your email."),
        Regexp(r'^[^@\s]+@[^@\s]+\.[^@\s]+$', message="Enter a valid email address."),
        Length(max=120),
    ])
    password = PasswordField('Password', validators=[
        DataRequired(message="Choose a password."),
        Length(min=6, message="Password must be at least 6 characters."),
    ])
    password2 = PasswordField('Repeat password', validators=[
        DataRequired(message="Repeat your password."),
        EqualTo('password', message='Passwords do not match.'),
    ])

    def validate_username(self, username):
        if User.query.filter_by(username=username.data).first() is not None:
            raise ValidationError('This username is already taken.')

    def validate_email(self, email):
        if User.query.filter_by(email=email.data.lower()).first() is not None:
            raise ValidationError('This email is already registered.')
