# Application Configuration
import os
from pathlib import Path

basedir = Path(__file__).parent.parent

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Handle both PostgreSQL (Render) and SQLite (local)
    database_url = os.environ.get('DATABASE_URL')
    if database_url:
        # Render provides postgres:// but SQLAlchemy needs postgresql://
        if database_url.startswith('postgres://'):
            database_url = database_url.replace('postgres://', 'postgresql://', 1)
        SQLALCHEMY_DATABASE_URI = database_url
    else:
        SQLALCHEMY_DATABASE_URI = f'sqlite:///{basedir / "instance" / "land_rental.db"}'

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Upload settings
    UPLOAD_FOLDER = basedir / 'landrental' / 'static' / 'uploads'
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 16MB max file size

    # Generated rental agreements
    AGREEMENTS_FOLDER = UPLOAD_FOLDER / 'agreements'

    # Bearer tokens (seconds)
    AUTH_TOKEN_MAX_AGE = int(os.environ.get('AUTH_TOKEN_MAX_AGE') or 7 * 24 * 3600)

    # Chatbot completion API (OpenAI compatible)
    OPENAI_API_KEY = os.environ.get('OPENAI_API_KEY') or None
    OPENAI_API_URL = os.environ.get('OPENAI_API_URL') or 'https://api.openai.com/v1/chat/completions'
    OPENAI_MODEL = os.environ.get('OPENAI_MODEL') or 'gpt-3.5-turbo'
    CHATBOT_TIMEOUT = float(os.environ.get('CHATBOT_TIMEOUT') or 15)

    LOG_LEVEL = os.environ.get('LOG_LEVEL') or 'INFO'

    # Create demo landowner/farmer accounts on startup
    SEED_DEMO_USERS = os.environ.get('SEED_DEMO_USERS', '1') not in ('0', 'false', 'False')


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'testing-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    OPENAI_API_KEY = None
    SEED_DEMO_USERS = False
    LOG_LEVEL = 'WARNING'
