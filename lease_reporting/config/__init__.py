"""
Configuration Management
Configuration from environment variables
"""

import os
from pathlib import Path

# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent


class Config:
    """Base configuration"""
    LEASE_DATA_PATH = Path(os.environ.get('LEASE_DATA_PATH', BASE_DIR / 'data' / 'leases.json'))
    LOG_DIR = Path(os.environ.get('LOG_DIR', BASE_DIR / 'logs'))
    LOG_TO_FILE = True

    # Flask settings
    FLASK_ENV = os.environ.get('FLASK_ENV', 'development')
    DEBUG = FLASK_ENV == 'development'
    TESTING = False

    # API settings
    API_HOST = os.environ.get('API_HOST', 'localhost')
    API_PORT = int(os.environ.get('API_PORT', 5001))

    # CORS settings
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*').split(',')

    # Logging
    LOG_MAX_BYTES = int(os.environ.get('LOG_MAX_BYTES', 10 * 1024 * 1024))  # 10MB
    LOG_BACKUP_COUNT = int(os.environ.get('LOG_BACKUP_COUNT', 5))

    # Reporting
    DEFAULT_PAYMENT_TIMING = os.environ.get('DEFAULT_PAYMENT_TIMING', 'Beginning')


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False


class TestingConfig(Config):
    """Test configuration - callers point LEASE_DATA_PATH at a temporary file"""
    TESTING = True
    DEBUG = False
    LOG_TO_FILE = False


# Get configuration based on environment
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
