# config.py
import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    # Currency settings
    BASE_CURRENCY = 'USD'  # all stored amounts are USD
    RATE_TARGET_CURRENCY = os.environ.get('RATE_TARGET_CURRENCY') or 'VND'

    # Exchange rate cache
    RATE_CACHE_TTL_SECONDS = float(os.environ.get('RATE_CACHE_TTL_SECONDS') or 600)  # 10 minutes
    RATE_FETCH_TIMEOUT_SECONDS = float(os.environ.get('RATE_FETCH_TIMEOUT_SECONDS') or 10)
    FALLBACK_RATE = os.environ.get('FALLBACK_RATE') or '25000'  # 1 USD = 25,000 VND

    # Decimal precision
    INTERMEDIATE_PLACES = 4
    DISPLAY_PLACES = 2

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL') or 'INFO'
    JSON_LOGS = (os.environ.get('JSON_LOGS') or 'true').lower() == 'true'

class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL') or 'DEBUG'
    JSON_LOGS = False

class ProductionConfig(Config):
    DEBUG = False

class TestingConfig(Config):
    TESTING = True
    RATE_FETCH_TIMEOUT_SECONDS = 1.0
    JSON_LOGS = False

config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}

def get_config(name=None):
    """Returns the config class selected by name or the TAX_ENGINE_ENV variable."""
    name = name or os.environ.get('TAX_ENGINE_ENV') or 'default'
    return config.get(name, config['default'])
