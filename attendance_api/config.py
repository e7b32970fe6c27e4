"""
config.py
-----------------
Application settings read from the process environment (and a local .env
file when present). The resulting Config object is loaded into Flask with
app.config.from_object(config).
"""

import logging
import os
import sys

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_PORT = 5000
DEFAULT_FRONTEND_URL = "http://localhost:3000"
DEFAULT_DBNAME = "attendance"

# Always allowed in addition to FRONTEND_URL
EXTRA_ORIGINS = [
    "http://localhost:5000",
    "https://ea-w4if.onrender.com",
]

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class ConfigError(Exception):
    """Raised when a required setting is missing or malformed."""


def _int(environ, key, default):
    raw = environ.get(key)
    if raw is None or not str(raw).strip():
        return default
    try:
        return int(str(raw).strip())
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}")


def _bool(environ, key, default):
    raw = environ.get(key)
    if raw is None or not str(raw).strip():
        return default
    value = str(raw).strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"{key} must be a boolean, got {raw!r}")


class Config:

    def __init__(self, mongo_uri, port=DEFAULT_PORT, frontend_url=DEFAULT_FRONTEND_URL,
                 env_name="development", mongo_dbname=DEFAULT_DBNAME, mongo_timeout_ms=10000,
                 max_body_mb=50, static_root=None, log_level="INFO", log_file=None,
                 one_checkin_per_day=True):
        self.MONGO_URI = mongo_uri
        self.MONGO_DBNAME = mongo_dbname
        self.MONGO_TIMEOUT_MS = mongo_timeout_ms
        self.PORT = port
        self.FRONTEND_URL = frontend_url
        self.CORS_ORIGINS = [frontend_url] + [o for o in EXTRA_ORIGINS if o != frontend_url]
        self.ENV_NAME = env_name
        self.MAX_CONTENT_LENGTH = max_body_mb * 1024 * 1024
        # Werkzeug caps url-encoded form fields separately
        self.MAX_FORM_MEMORY_SIZE = self.MAX_CONTENT_LENGTH
        self.STATIC_ROOT = os.path.abspath(static_root or os.getcwd())
        self.LOG_LEVEL = log_level.upper()
        self.LOG_FILE = log_file
        self.ONE_CHECKIN_PER_DAY = one_checkin_per_day

    @classmethod
    def from_env(cls, environ=None):
        """
        Build a Config from an environment mapping (defaults to os.environ).
        Raises ConfigError when MONGODB_URI is absent.
        """
        environ = os.environ if environ is None else environ

        mongo_uri = (environ.get("MONGODB_URI") or "").strip()
        if not mongo_uri:
            raise ConfigError("MONGODB_URI is not defined in environment variables!")

        return cls(
            mongo_uri=mongo_uri,
            port=_int(environ, "PORT", DEFAULT_PORT),
            frontend_url=(environ.get("FRONTEND_URL") or DEFAULT_FRONTEND_URL).strip(),
            env_name=environ.get("APP_ENV") or environ.get("NODE_ENV") or "development",
            mongo_dbname=environ.get("MONGODB_DBNAME") or DEFAULT_DBNAME,
            mongo_timeout_ms=_int(environ, "MONGODB_TIMEOUT_MS", 10000),
            max_body_mb=_int(environ, "MAX_BODY_MB", 50),
            static_root=environ.get("STATIC_ROOT"),
            log_level=environ.get("LOG_LEVEL") or "INFO",
            log_file=environ.get("LOG_FILE"),
            one_checkin_per_day=_bool(environ, "ONE_CHECKIN_PER_DAY", True),
        )

    @property
    def database_label(self):
        """Local vs. hosted database, for the startup banner only."""
        if "localhost" in self.MONGO_URI or "127.0.0.1" in self.MONGO_URI:
            return "Local MongoDB"
        return "MongoDB Atlas"


def load_config(environ=None):
    """
    Load settings or terminate the process.

    A missing database URI is a fatal startup error: it is logged and the
    process exits with status 1 before anything binds a socket.
    """
    if environ is None:
        load_dotenv()
    try:
        return Config.from_env(environ)
    except ConfigError as e:
        logger.critical("%s", e)
        sys.exit(1)
