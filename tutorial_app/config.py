import os
import secrets
import tempfile
from dotenv import load_dotenv

load_dotenv()

_TMP = tempfile.gettempdir()


def generate_secret_key():
    """Throwaway session key; sessions do not survive a restart without SECRET_KEY."""
    return secrets.token_urlsafe(32)


def get_database_uri(default_uri):
    """DATABASE_URI from the environment, with Heroku-style postgres:// normalised."""
    database_url = os.getenv("DATABASE_URI", default_uri)
    if database_url.startswith("postgres://"):
        database_url = "postgresql://" + database_url[len("postgres://"):]
    return database_url


def get_int_env(var_name, default_value):
    raw = os.getenv(var_name)
    if raw is None:
        return default_value
    try:
        return int(raw)
    except ValueError:
        return default_value


def get_bool_env(var_name, default_value):
    raw = os.getenv(var_name)
    if raw is None:
        return bool(default_value)
    return raw.strip().lower() in ('true', '1', 'yes', 'on')


class Config:
    """Settings shared by every environment; each can be overridden from the environment."""

    MY_ENVIRONMENT = os.getenv("MY_ENVIRONMENT", "PRODUCTION")
    DEBUG = get_bool_env("DEBUG", False)
    TESTING = False
    SECRET_KEY = os.getenv("SECRET_KEY") or generate_secret_key()

    # Tutorial store
    SQLALCHEMY_DATABASE_URI = get_database_uri("sqlite:///tutorials.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': 300,
    }
    AUTO_MIGRATE_ON_STARTUP = get_bool_env("AUTO_MIGRATE_ON_STARTUP", False)

    # python -m tutorial_app
    SERVER_HOST = os.getenv("SERVER_HOST", "0.0.0.0")
    SERVER_PORT = get_int_env("SERVER_PORT", 8080)

    # app.logger file
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE = os.getenv("LOG_FILE", os.path.join(_TMP, "tutorial_portal_app.log"))
    LOG_MAX_BYTES = get_int_env("LOG_MAX_BYTES", 10 * 1024 * 1024)
    LOG_BACKUP_COUNT = get_int_env("LOG_BACKUP_COUNT", 5)

    # app / route / storage / error category files
    LOGGING_BASE_DIR = os.getenv("LOGGING_BASE_DIR", os.path.join(_TMP, "tutorial_portal_logs"))
    LOGGING_DEFAULT_LEVEL = os.getenv("LOGGING_DEFAULT_LEVEL", "INFO")
    LOGGING_CONSOLE_ENABLED = get_bool_env("LOGGING_CONSOLE_ENABLED", True)
    LOGGING_JSON_FORMAT = get_bool_env("LOGGING_JSON_FORMAT", False)
    LOGGING_ROTATION_BACKUP_COUNT = get_int_env("LOGGING_ROTATION_BACKUP_COUNT", 7)

    APP_NAME = os.getenv("APP_NAME", "Tutorial Portal")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")
    # Number of trusted proxy hops; 0 leaves ProxyFix off.
    PROXY_FIX_NUM = get_int_env("PROXY_FIX_NUM", 0)

    @staticmethod
    def init_app(app):
        os.makedirs(app.config["LOGGING_BASE_DIR"], exist_ok=True)


class DevelopmentConfig(Config):
    DEBUG = True
    MY_ENVIRONMENT = "DEVELOPMENT"
    SQLALCHEMY_DATABASE_URI = get_database_uri(
        os.getenv("DEVELOPMENT_DATABASE_URI", "sqlite:///dev.db")
    )
    LOG_LEVEL = os.getenv("DEV_LOG_LEVEL", "DEBUG")
    AUTO_MIGRATE_ON_STARTUP = get_bool_env("DEV_AUTO_MIGRATE_ON_STARTUP", True)


class TestingConfig(Config):
    TESTING = True
    MY_ENVIRONMENT = "TESTING"
    SECRET_KEY = "test-secret-key"
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URI", "sqlite://")
    # pool_pre_ping/pool_recycle do not apply to the in-memory pool.
    SQLALCHEMY_ENGINE_OPTIONS = {}
    LOGGING_CONSOLE_ENABLED = False


class ProductionConfig(Config):
    MY_ENVIRONMENT = "PRODUCTION"
    LOG_LEVEL = os.getenv("PROD_LOG_LEVEL", "WARNING")
    AUTO_MIGRATE_ON_STARTUP = get_bool_env("PROD_AUTO_MIGRATE_ON_STARTUP", False)


config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': ProductionConfig,
}
