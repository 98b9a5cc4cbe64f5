import os
from datetime import timedelta


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dinesmart-secret-key-2024'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///dinesmart.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Токены доступа
    JWT_SECRET = os.environ.get('JWT_SECRET') or 'dinesmart-jwt-secret-change-me'
    JWT_ALGORITHM = 'HS256'
    JWT_EXPIRES = timedelta(hours=8)

    # Сброс пароля
    RESET_TOKEN_TTL = timedelta(minutes=15)
    EXPOSE_RESET_TOKEN = os.environ.get('EXPOSE_RESET_TOKEN', '0') == '1'

    # Загрузка изображений
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER') or os.path.join(os.getcwd(), 'uploads')
    MAX_CONTENT_LENGTH = 5 * 1024 * 1024

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Администратор по умолчанию
    ADMIN_NAME = 'System Admin'
    ADMIN_EMAIL = os.environ.get('ADMIN_EMAIL', 'admin@dinesmart.com')
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD', 'Admin@123')


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'testing-secret'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    JWT_SECRET = 'testing-jwt-secret'
    EXPOSE_RESET_TOKEN = True
    LOG_LEVEL = 'DEBUG'
