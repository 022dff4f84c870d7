import logging
import os

from logging.handlers import RotatingFileHandler

from dotenv import load_dotenv
from flask import Flask, jsonify

from app.config import config_map

__version__ = '1.0.0'


def create_app(config_name=None, config_overrides=None):
    """Application factory for creating the Flask app instance.

    Args:
        config_name: Configuration name ('development', 'production' or
                     'testing').  Defaults to FLASK_ENV or 'development'.
        config_overrides: Optional mapping applied after the config class,
                          e.g. a temporary ``JOURNEY_DATA_DIR`` in tests.

    Returns:
        Configured Flask application instance.
    """
    # Load environment variables from the appropriate .env file
    env = config_name or os.environ.get('FLASK_ENV', 'development')
    root_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    env_file = os.path.join(root_dir, f'.env.{env}')
    if os.path.exists(env_file):
        load_dotenv(env_file)

    # Also load a local .env if it exists (overrides the environment-specific one)
    dotenv_path = os.path.join(root_dir, '.env')
    if os.path.exists(dotenv_path):
        load_dotenv(dotenv_path, override=True)

    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    app = Flask(__name__)

    config_class = config_map.get(config_name, config_map['development'])
    app.config.from_object(config_class)
    if config_overrides:
        app.config.update(config_overrides)

    _configure_logging(app)

    _init_journey_store(app)
    _register_blueprints(app)

    @app.route('/api/health')
    def health():
        from app.scrapers.common import utc_now_iso
        return jsonify({
            'success': True,
            'message': 'CP Journey sync server is running',
            'timestamp': utc_now_iso(),
            'version': __version__,
        })

    if app.config.get('SCHEDULER_ENABLED'):
        _init_scheduler(app)

    return app


def _configure_logging(app):
    """Set up RotatingFileHandler on the root logger."""
    max_bytes = app.config.get('LOG_FILE_MAX_BYTES', 0)
    if not max_bytes:
        return

    log_dir = os.path.join(app.instance_path, 'logs')
    os.makedirs(log_dir, exist_ok=True)

    log_file = os.path.join(log_dir, 'app.log')
    handler = RotatingFileHandler(
        log_file,
        maxBytes=max_bytes,
        backupCount=app.config.get('LOG_FILE_BACKUP_COUNT', 3),
    )
    handler.setFormatter(logging.Formatter(
        app.config.get('LOG_FORMAT', '%(asctime)s [%(levelname)s] %(name)s: %(message)s')
    ))
    handler.setLevel(logging.DEBUG)

    root = logging.getLogger()
    root.addHandler(handler)
    if root.level == logging.WARNING:
        root.setLevel(logging.INFO)


def _init_journey_store(app):
    """Attach the JSON journey store, creating the data file on first run."""
    from app.services.journey_store import JourneyStore
    from app.services.sync_service import SyncContext

    tz = SyncContext.from_config(app.config).tz
    store = JourneyStore(app.config['JOURNEY_DATA_DIR'], tz=tz)
    try:
        store.initialize()
    except (OSError, ValueError) as e:
        app.logger.error(f'Journey data initialization failed: {e}')
    app.extensions['journey_store'] = store


def _register_blueprints(app):
    """Register all application blueprints."""
    from app.views.sync import sync_bp

    app.register_blueprint(sync_bp)


def _init_scheduler(app):
    """Initialize and start APScheduler for the daily auto-sync."""
    from app.tasks.scheduler import init_scheduler
    init_scheduler(app)
