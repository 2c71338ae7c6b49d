import logging
import os
from logging.handlers import RotatingFileHandler

from dotenv import load_dotenv
from flask import Flask, render_template, request
from flask_compress import Compress
from flask_cors import CORS
from sqlalchemy import event
from werkzeug.middleware.proxy_fix import ProxyFix

# Load environment variables from .env file
load_dotenv()

# Import configuration after loading .env
from .config import config, Config
from .extensions import db, migrate, ma
from .commands import ensure_schema, seed_command, setup_command
from .routes import register_blueprints
from .utils.logging_utils import get_logger, init_logger


def configure_logging(app):
    log_file = app.config.get('LOG_FILE')
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    # app.logger is shared by every app instance of this package; attach the file once.
    if not any(isinstance(h, RotatingFileHandler) for h in app.logger.handlers):
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=app.config.get('LOG_MAX_BYTES', 10485760),  # 10MB default
            backupCount=app.config.get('LOG_BACKUP_COUNT', 5)
        )
        formatter = logging.Formatter(
            "[%(asctime)s] %(levelname)s in %(module)s: %(message)s"
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(getattr(logging, app.config.get('LOG_LEVEL', 'INFO')))
        app.logger.addHandler(file_handler)

    log_level = getattr(logging, app.config.get('LOG_LEVEL', 'INFO'))
    app.logger.setLevel(log_level)
    app.logger.info("Logging configured with level: %s", app.config.get('LOG_LEVEL', 'INFO'))

    # Configure categorized loggers using the same application config.
    init_logger(app)


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def register_sqlite_functions(app):
    """Make lower() Unicode-aware on SQLite, whose builtin folds ASCII only."""
    with app.app_context():
        engine = db.engine
    if engine.dialect.name != 'sqlite':
        return

    @event.listens_for(engine, 'connect')
    def _on_connect(dbapi_conn, _record):
        dbapi_conn.create_function('lower', 1, _unicode_lower, deterministic=True)


def create_app(config_name=None):
    # Determine configuration based on environment variable or parameter
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'default')

    config_class = config.get(config_name, Config)

    app = Flask(__name__, static_url_path='/static')
    app.config.from_object(config_class)

    # Initialize configuration-specific setup
    config_class.init_app(app)

    configure_logging(app)
    app.logger.info("Using config: %s", config_class.__name__)
    get_logger("app").info("Application startup with config %s", config_class.__name__)

    # Optional proxy fix: enable when running behind a trusted proxy by setting PROXY_FIX_NUM
    num_proxies = app.config.get('PROXY_FIX_NUM', 0)
    if num_proxies > 0:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=num_proxies, x_proto=num_proxies, x_host=num_proxies, x_port=num_proxies, x_prefix=num_proxies)
        app.logger.info("ProxyFix enabled for %d proxies", num_proxies)

    db.init_app(app)
    register_sqlite_functions(app)
    migrate.init_app(app, db)
    ma.init_app(app)
    app.cli.add_command(setup_command)
    app.cli.add_command(seed_command)

    register_blueprints(app)

    # ------------------------------------------------------------------
    # Access log & security headers
    # ------------------------------------------------------------------
    @app.before_request
    def _log_request():
        if request.path.startswith('/static'):
            return
        get_logger("route").info(
            "request method=%s path=%s ip=%s args=%s",
            request.method, request.path, request.remote_addr, dict(request.args),
        )

    @app.after_request
    def _security_headers(resp):
        resp.headers.setdefault('X-Content-Type-Options', 'nosniff')
        resp.headers.setdefault('X-Frame-Options', 'DENY')
        resp.headers.setdefault('Referrer-Policy', 'same-origin')
        resp.headers.setdefault(
            'Content-Security-Policy',
            "default-src 'self'; style-src 'self' 'unsafe-inline'; object-src 'none'; base-uri 'self'",
        )
        return resp

    # ------------------------------------------------------------------
    # Error Handlers (generic safe pages)
    # ------------------------------------------------------------------
    @app.errorhandler(400)
    def _bad_request(e):
        return render_template('errors/400.html', description=getattr(e, 'description', None)), 400

    @app.errorhandler(404)
    def _not_found(e):
        return render_template('errors/404.html'), 404

    @app.errorhandler(500)
    def _server_error(e):
        get_logger("error").error("Unhandled server error: %s", getattr(e, 'original_exception', e))
        return render_template('errors/500.html'), 500

    Compress(app)
    CORS(app, origins=app.config.get('CORS_ORIGINS', '*'))
    app.logger.info("Middleware loaded: Compress, CORS")

    # ------------------------------------------------------------------
    # Optional schema bootstrap (development / CI convenience)
    # Controlled via AUTO_MIGRATE_ON_STARTUP.
    # ------------------------------------------------------------------
    if app.config.get('AUTO_MIGRATE_ON_STARTUP'):
        with app.app_context():
            try:
                strategy = ensure_schema()
                app.logger.info("Auto schema setup complete (%s)", strategy)
            except Exception:
                app.logger.exception("Auto schema setup failed")
                raise

    return app
