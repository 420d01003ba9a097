"""
Configuration for the Reading Club backend

Settings are read from the environment (or a .env file) through
python-decouple. Validation is lazy: get_config(name, validate=True) is
called by wsgi.py, so development and tests never need production
secrets.
"""
import secrets
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from decouple import config

from reading_club.error_handlers.exceptions import ConfigurationException


def _optional_int(value) -> Optional[int]:
    """Cast helper for settings where blank means 'not set'"""
    if value is None or str(value).strip() == '':
        return None
    return int(value)


class Config:
    """Settings shared by every environment"""
    # Random per process unless SECRET_KEY is set; fine outside production
    SECRET_KEY = config('SECRET_KEY', default=secrets.token_hex(32))
    SQLALCHEMY_DATABASE_URI = config('DATABASE_URL', default='sqlite:///instance/reading_club.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = config('LOG_LEVEL', default='INFO')
    LOG_FILE = config('LOG_FILE', default='logs/reading_club.log')

    # "Today" for deadlines and permission windows is taken in this zone
    APP_TIMEZONE = config('APP_TIMEZONE', default='Asia/Shanghai')

    # Blank means unbounded; an event's own max_leadership_count wins when set
    DEFAULT_MAX_LEADERSHIP_COUNT = config('DEFAULT_MAX_LEADERSHIP_COUNT', default='', cast=_optional_int)
    # Seed for the random allocation policy (blank = system entropy)
    LEADER_ALLOCATION_SEED = config('LEADER_ALLOCATION_SEED', default='', cast=_optional_int)
    # Limit backup scans to slots dated within N days from today (blank = all)
    BACKUP_LOOKAHEAD_DAYS = config('BACKUP_LOOKAHEAD_DAYS', default='', cast=_optional_int)

    RATELIMIT_ENABLED = config('RATELIMIT_ENABLED', default=True, cast=bool)
    RATELIMIT_DEFAULT = config('RATELIMIT_DEFAULT', default='200 per hour')
    RATELIMIT_STORAGE_URI = config('RATELIMIT_STORAGE_URI', default='memory://')

    @classmethod
    def settings_problems(cls) -> list:
        """Leader assignment settings that would misbehave at runtime"""
        problems = []
        try:
            ZoneInfo(cls.APP_TIMEZONE)
        except (ZoneInfoNotFoundError, ValueError):
            problems.append(f"APP_TIMEZONE '{cls.APP_TIMEZONE}' is not a known timezone")
        if cls.DEFAULT_MAX_LEADERSHIP_COUNT is not None and cls.DEFAULT_MAX_LEADERSHIP_COUNT < 1:
            problems.append('DEFAULT_MAX_LEADERSHIP_COUNT must be at least 1 or blank')
        if cls.BACKUP_LOOKAHEAD_DAYS is not None and cls.BACKUP_LOOKAHEAD_DAYS < 0:
            problems.append('BACKUP_LOOKAHEAD_DAYS must be 0 or more, or blank')
        return problems

    @classmethod
    def validate(cls) -> None:
        """
        Raises:
            ConfigurationException: listing every invalid setting
        """
        problems = cls.settings_problems()
        if problems:
            raise ConfigurationException('; '.join(problems))


class DevelopmentConfig(Config):
    DEBUG = True
    TESTING = False


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    RATELIMIT_ENABLED = False
    LOG_LEVEL = 'DEBUG'
    DEFAULT_MAX_LEADERSHIP_COUNT = None
    LEADER_ALLOCATION_SEED = 1234
    BACKUP_LOOKAHEAD_DAYS = None


class ProductionConfig(Config):
    """Production: pooled connections, quieter logs, a real secret"""
    DEBUG = False
    TESTING = False

    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': config('DB_POOL_SIZE', default=10, cast=int),
        'pool_recycle': config('DB_POOL_RECYCLE', default=3600, cast=int),
        'pool_pre_ping': True,
        'max_overflow': config('DB_MAX_OVERFLOW', default=20, cast=int),
    }

    LOG_LEVEL = config('LOG_LEVEL', default='WARNING')

    @classmethod
    def validate(cls) -> None:
        """
        Production also needs an explicit SECRET_KEY of 32+ characters

        Raises:
            ConfigurationException: listing every invalid setting
        """
        problems = cls.settings_problems()
        secret_key = config('SECRET_KEY', default='')
        if not secret_key:
            problems.append('SECRET_KEY must be set in production')
        elif len(secret_key) < 32:
            problems.append(f'SECRET_KEY must be at least 32 characters (current: {len(secret_key)})')
        if problems:
            raise ConfigurationException('; '.join(problems))


config_mapping = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}


def get_config(config_name: Optional[str] = None, validate: bool = False) -> type:
    """
    Config class for an environment name (FLASK_ENV when omitted)

    Unknown names fall back to development. With validate=True the
    class's validate() runs before it is returned.

    Example:
        >>> get_config('production', validate=True)
    """
    if config_name is None:
        config_name = config('FLASK_ENV', default='development')

    config_class = config_mapping.get(config_name, DevelopmentConfig)
    if validate:
        config_class.validate()
    return config_class
