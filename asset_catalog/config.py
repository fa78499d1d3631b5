import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-key-change-this'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        f'sqlite:///{BASE_DIR}/data/catalog.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    MAX_CONTENT_LENGTH = int(os.environ.get('IMPORT_MAX_BYTES') or 5 * 1024 * 1024)
    LOG_DIR = os.environ.get('LOG_DIR') or str(BASE_DIR / 'data' / 'logs')
    LOG_FILE = os.environ.get('LOG_FILE') or 'app.log'
    LOG_LEVEL = os.environ.get('LOG_LEVEL') or 'INFO'
    SEED_ADMIN_USERNAME = os.environ.get('SEED_ADMIN_USERNAME') or 'admin'
    SEED_ADMIN_PASSWORD = os.environ.get('SEED_ADMIN_PASSWORD') or 'admin123'
    SEED_ADMIN_EMAIL = os.environ.get('SEED_ADMIN_EMAIL') or 'admin@example.com'

class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-key'
    BCRYPT_LOG_ROUNDS = 4
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    LOG_DIR = None
