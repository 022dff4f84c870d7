import os


def _env_flag(name, default):
    return os.environ.get(name, default).lower() in ('true', '1', 'yes')


class BaseConfig:
    """Base configuration shared across all environments."""

    # Flask core
    SECRET_KEY = os.environ.get('SECRET_KEY', 'fallback-secret-key-change-me')

    # Journey data (JSON file store)
    JOURNEY_DATA_DIR = os.environ.get(
        'JOURNEY_DATA_DIR',
        os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'data'),
    )

    # Platform endpoints
    CSES_BASE_URL = os.environ.get('CSES_BASE_URL', 'https://cses.fi')
    CODEFORCES_API_URL = os.environ.get('CODEFORCES_API_URL', 'https://codeforces.com/api')
    VJUDGE_BASE_URL = os.environ.get('VJUDGE_BASE_URL', 'https://vjudge.net/user')

    # Sync settings
    SYNC_USER_AGENT = os.environ.get(
        'SYNC_USER_AGENT',
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36',
    )
    SYNC_PROFILE_TIMEOUT = float(os.environ.get('SYNC_PROFILE_TIMEOUT', '10'))
    SYNC_BULK_TIMEOUT = float(os.environ.get('SYNC_BULK_TIMEOUT', '15'))
    SYNC_CATALOG_TIMEOUT = float(os.environ.get('SYNC_CATALOG_TIMEOUT', '20'))
    # Hours from UTC for daily-activity date keys; unset means server local time
    SYNC_TIMEZONE_OFFSET = os.environ.get('SYNC_TIMEZONE_OFFSET') or None

    # Scheduler
    SCHEDULER_ENABLED = _env_flag('SCHEDULER_ENABLED', 'false')
    AUTO_SYNC_HOUR = int(os.environ.get('AUTO_SYNC_HOUR', '6'))

    # Logging
    LOG_FILE_MAX_BYTES = int(os.environ.get('LOG_FILE_MAX_BYTES', '0'))
    LOG_FILE_BACKUP_COUNT = int(os.environ.get('LOG_FILE_BACKUP_COUNT', '3'))
    LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'


class DevelopmentConfig(BaseConfig):
    """Development environment configuration."""

    DEBUG = True
    SCHEDULER_ENABLED = False


class ProductionConfig(BaseConfig):
    """Production environment configuration."""

    DEBUG = False
    SCHEDULER_ENABLED = _env_flag('SCHEDULER_ENABLED', 'true')
    LOG_FILE_MAX_BYTES = int(os.environ.get('LOG_FILE_MAX_BYTES', str(5 * 1024 * 1024)))


class TestingConfig(BaseConfig):
    """Testing environment configuration."""

    TESTING = True
    DEBUG = True
    SECRET_KEY = 'test-secret-key'
    SCHEDULER_ENABLED = False
    SERVER_NAME = 'localhost'
    SYNC_TIMEZONE_OFFSET = 0


config_map = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
}
