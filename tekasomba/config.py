"""Configuration classes, selected by name in create_app()."""

import os


class Config:
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///marketplace.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'dev-secret')
    # Seconds; default is 30 days
    JWT_ACCESS_TOKEN_EXPIRES = int(os.getenv('JWT_ACCESS_TOKEN_EXPIRES', 2592000))
    SUPABASE_URL = os.getenv('SUPABASE_URL')
    SUPABASE_SERVICE_KEY = os.getenv('SUPABASE_SERVICE_KEY')
    PRODUCT_PHOTOS_BUCKET = os.getenv('PRODUCT_PHOTOS_BUCKET', 'product-photos')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = os.getenv('RATELIMIT_STORAGE_URI', 'memory://')
    TESTING = False


class DevelopmentConfig(Config):
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'DEBUG')


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SUPABASE_URL = None
    SUPABASE_SERVICE_KEY = None
    JWT_SECRET_KEY = 'test-secret-key-for-testing'
    RATELIMIT_ENABLED = False
    LOG_LEVEL = 'WARNING'


class ProductionConfig(Config):
    pass


CONFIGS = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
}


def get_config(name):
    """Return the config class for name, falling back to development."""
    return CONFIGS.get(name or 'development', DevelopmentConfig)
