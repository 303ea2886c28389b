"""
Auth Service - registration and credential checks.
Keeps database work out of the routes.
"""
from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from flashy_app.models import User, db


class AuthService:

    @staticmethod
    def register_user(username, email, password):
        """
        Create a free-tier user.

        Returns:
            The new User.
        """
        user = User(username=username, email=email.lower(), subscription_tier=User.TIER_FREE)
        user.set_password(password)
        try:
            db.session.add(user)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.error("Error registering user %s", username, exc_info=True)
            raise

        current_app.logger.info(f"User registered: {username} ({user.user_id})")
        return user

    @staticmethod
    def authenticate_user(username_or_email, password):
        """
        Verify credentials.

        Returns:
            User object if valid, None otherwise.
        """
        user = User.query.filter(
            or_(User.username == username_or_email, User.email == username_or_email.lower())
        ).first()

        if user and user.check_password(password):
            return user

        return None
