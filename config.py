"""
Configuration module for the ITURHFProp prediction service.
Centralizes all configuration settings and environment variables.
"""

import os
from dotenv import load_dotenv
from typing import Optional

# Load environment variables
load_dotenv()


class Config:
    """Application configuration class."""

    # Flask Configuration
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('FLASK_ENV') == 'development'
    PORT = int(os.getenv('PORT', 3000))

    # Logging Configuration
    LOG_LEVEL = os.getenv('LOG_LEVEL')
    LOG_FILE = os.getenv('LOG_FILE')

    # ITURHFProp engine locations
    ITURHFPROP_PATH = os.getenv('ITURHFPROP_PATH', '/opt/iturhfprop/ITURHFProp')
    ITURHFPROP_DATA = os.getenv('ITURHFPROP_DATA', '/opt/iturhfprop')
    ITURHFPROP_LIB_DIR = os.getenv('ITURHFPROP_LIB_DIR') or os.path.dirname(ITURHFPROP_PATH)
    ITURHFPROP_TEMP_DIR = os.getenv('ITURHFPROP_TEMP_DIR', '/tmp/iturhfprop')
    ITURHFPROP_REPORT_DIR = os.getenv('ITURHFPROP_REPORT_DIR', '/tmp/')

    # Engine execution limits
    ENGINE_TIMEOUT = float(os.getenv('ENGINE_TIMEOUT', 30))  # seconds per engine run
    HOURLY_MAX_WORKERS = int(os.getenv('HOURLY_MAX_WORKERS', 4))
    HOURLY_TIMEOUT = float(os.getenv('HOURLY_TIMEOUT', 300))  # seconds for a whole 24h batch

    # Flask-Caching Configuration
    CACHE_TYPE = 'SimpleCache'
    CACHE_DEFAULT_TIMEOUT = int(os.getenv('CACHE_DEFAULT_TIMEOUT', 600))  # 10 minutes
    CACHE_KEY_PREFIX = 'iturhfprop_'

    @classmethod
    def validate(cls) -> list[str]:
        """Validate engine-related configuration values."""
        errors = []

        if not os.path.isfile(cls.ITURHFPROP_PATH):
            errors.append(f"ITURHFPROP_PATH does not exist: {cls.ITURHFPROP_PATH}")

        if not os.path.isdir(os.path.join(cls.ITURHFPROP_DATA, 'Data')):
            errors.append(f"ITURHFPROP_DATA has no Data/ directory: {cls.ITURHFPROP_DATA}")

        if cls.ENGINE_TIMEOUT <= 0:
            errors.append("ENGINE_TIMEOUT must be positive")

        if cls.HOURLY_MAX_WORKERS < 1:
            errors.append("HOURLY_MAX_WORKERS must be at least 1")

        return errors

    @classmethod
    def is_production(cls) -> bool:
        """Check if running in production mode."""
        return not cls.DEBUG


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    PORT = 5001  # Development port
    CACHE_DEFAULT_TIMEOUT = 60


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False

    @classmethod
    def validate(cls) -> list[str]:
        """Additional validation for production."""
        errors = super().validate()

        # Only warn about SECRET_KEY in production, don't fail
        if cls.SECRET_KEY == 'dev-secret-key-change-in-production':
            errors.append("SECRET_KEY is using default value - consider setting a secure key in production")

        return errors


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    CACHE_TYPE = 'NullCache'
    ENGINE_TIMEOUT = 5
    HOURLY_MAX_WORKERS = 2
    HOURLY_TIMEOUT = 30


# Configuration mapping
config_map = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': ProductionConfig  # Default to production
}


def get_config(config_name: Optional[str] = None) -> Config:
    """Get configuration based on environment."""
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'default')

    return config_map.get(config_name, config_map['default'])
