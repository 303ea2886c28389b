# File: flashy_app/config.py

import os
from dotenv import load_dotenv

load_dotenv()

# flashy_app/config.py lives one level below the project root
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))

DATABASE_PATH = os.path.join(BASE_DIR, "database", "flashy.db")


class Config:
    """Flashy application configuration."""

    SECRET_KEY = os.environ.get('SECRET_KEY')
    if not SECRET_KEY:
        # Development fallback, set SECRET_KEY in production
        SECRET_KEY = 'dev-secret-key-replace-in-production'

    SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI') or f'sqlite:///{DATABASE_PATH}'
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'connect_args': {'timeout': 30},
    }
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_DIR = os.environ.get('LOG_DIR') or os.path.join(BASE_DIR, 'logs')
    LOG_JSON = os.environ.get('LOG_JSON', '').lower() in ('1', 'true', 'yes')

    # Study sessions
    STUDY_TIMER_SECONDS = int(os.environ.get('STUDY_TIMER_SECONDS', 30))
    STUDY_HISTORY_PAGE_SIZE = int(os.environ.get('STUDY_HISTORY_PAGE_SIZE', 100))

    # Card media
    UPLOAD_FOLDER = os.path.join(BASE_DIR, 'uploads')
    MEDIA_CACHE_DIR = os.environ.get('MEDIA_CACHE_DIR') or os.path.join(UPLOAD_FOLDER, 'cards', 'images')
    MEDIA_URL_PREFIX = '/uploads/cards/images'
    MEDIA_MAX_BYTES = int(os.environ.get('MEDIA_MAX_BYTES', 5 * 1024 * 1024))
    MEDIA_FETCH_TIMEOUT = int(os.environ.get('MEDIA_FETCH_TIMEOUT', 20))
    MEDIA_FETCH_WORKERS = int(os.environ.get('MEDIA_FETCH_WORKERS', 4))

    @classmethod
    def init_app(cls, app):
        """Check settings and create the directories the app writes to."""
        if app.config.get('STUDY_TIMER_SECONDS', 30) < 1:
            raise ValueError('STUDY_TIMER_SECONDS must be at least 1')
        if app.config['SQLALCHEMY_DATABASE_URI'].startswith(f'sqlite:///{BASE_DIR}'):
            os.makedirs(os.path.dirname(DATABASE_PATH), exist_ok=True)
        os.makedirs(app.config['MEDIA_CACHE_DIR'], exist_ok=True)
        os.makedirs(app.config['LOG_DIR'], exist_ok=True)
