import os


class BaseConfig:
    SECRET_KEY = os.getenv('SECRET_KEY', 'change-me')
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///poolservice.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_SECURE = False
    LOG_LEVEL = os.getenv('LOG_LEVEL')

    # Display time zone for calendar math and timestamps
    DEFAULT_TIMEZONE = os.getenv('DEFAULT_TIMEZONE', 'America/New_York')
    DEFAULT_TAX_RATE = float(os.getenv('DEFAULT_TAX_RATE', '0'))
    ESTIMATE_VALID_DAYS = int(os.getenv('ESTIMATE_VALID_DAYS', '30'))


class DevConfig(BaseConfig):
    DEBUG = True
    ENV = 'development'


class ProdConfig(BaseConfig):
    DEBUG = False
    ENV = 'production'
    SESSION_COOKIE_SECURE = True


class TestConfig(BaseConfig):
    TESTING = True
    ENV = 'testing'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
