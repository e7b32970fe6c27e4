"""
utils/db.py
-----------------
This module owns the MongoDB connection for the Flask application.

The connection is an explicit Database object stored on the app (no
module-level client). It is opened in the background at startup so the HTTP
server can bind immediately; views that need storage are wrapped in
db_required, which answers "starting up" until the first ping completes.
"""

import logging
import threading
from functools import wraps

from flask import current_app
from flask_pymongo import PyMongo
from pymongo import ASCENDING
from pymongo.errors import PyMongoError

from ..models.errors import ServiceStartingError, StorageError

logger = logging.getLogger(__name__)

EXTENSION_KEY = "attendance_db"

CONNECTING = "connecting"
READY = "ready"
FAILED = "failed"

REMEDIATION_HINTS = (
    "1. Check your MONGODB_URI in the .env file",
    "2. Verify IP access rules on the MongoDB server / Atlas cluster",
    "3. Restart the server after updating settings",
)


def ensure_indexes(db):
    """Unique studentId on students; (studentId, date) lookup index on attendances."""
    db["students"].create_index([("studentId", ASCENDING)], unique=True, name="studentId_unique")
    db["attendances"].create_index(
        [("studentId", ASCENDING), ("date", ASCENDING)], name="studentId_date"
    )


class Database:

    def __init__(self, client, name):
        self.client = client
        self.name = name
        self.state = CONNECTING if client is not None else FAILED
        self.error = None
        self.indexes_ready = False
        self._indexes_lock = threading.Lock()
        self._thread = None

    @property
    def db(self):
        """
        The pymongo database. Indexes are created on first use and retried on
        every access until they exist, so a server that was unreachable at
        startup still gets the unique studentId index before any write.
        """
        if self.client is None:
            raise StorageError("Database client is not configured")
        db = self.client[self.name]
        if not self.indexes_ready:
            self._prepare_indexes(db)
        return db

    def _prepare_indexes(self, db):
        with self._indexes_lock:
            if self.indexes_ready:
                return
            try:
                ensure_indexes(db)
            except PyMongoError as e:
                raise StorageError(f"Could not prepare indexes: {e}")
            self.indexes_ready = True
            logger.info("MongoDB indexes ready (database=%s)", self.name)

    def ping(self):
        self.client.admin.command("ping")

    def connect(self):
        """
        Ping the server and create indexes. Failures are logged with
        remediation hints; the process keeps running and index creation is
        retried lazily by the next storage call.
        """
        if self.client is None:
            return False
        try:
            self.ping()
            self._prepare_indexes(self.client[self.name])
        except (PyMongoError, StorageError) as e:
            self.state = FAILED
            self.error = str(e)
            logger.error("MongoDB connection error: %s", e)
            logger.info("Quick fix:\n    %s", "\n    ".join(REMEDIATION_HINTS))
            return False

        self.state = READY
        self.error = None
        logger.info("MongoDB connected successfully (database=%s)", self.name)
        return True

    def connect_async(self):
        self._thread = threading.Thread(target=self.connect, name="mongo-connect", daemon=True)
        self._thread.start()
        return self._thread


def init_db_connection(app, config):
    """
    Create the MongoDB client with Flask-PyMongo, attach a Database to the app
    and start connecting in the background.
    """
    try:
        mongo = PyMongo(app, uri=config.MONGO_URI, serverSelectionTimeoutMS=config.MONGO_TIMEOUT_MS)
    except (PyMongoError, ValueError) as e:
        # Malformed URI: keep serving, storage calls will fail individually
        logger.error("MongoDB connection error: %s", e)
        logger.info("Quick fix:\n    %s", "\n    ".join(REMEDIATION_HINTS))
        database = Database(None, config.MONGO_DBNAME)
        database.error = str(e)
        return attach_database(app, database)

    name = mongo.db.name if mongo.db is not None else config.MONGO_DBNAME
    database = attach_database(app, Database(mongo.cx, name))
    database.connect_async()
    return database


def attach_database(app, database):
    app.extensions[EXTENSION_KEY] = database
    return database


def get_database():
    return current_app.extensions[EXTENSION_KEY]


def db_required(view_function):
    """Refuse storage-backed views until the startup connection attempt has finished."""
    @wraps(view_function)
    def decorated_function(*args, **kwargs):
        if get_database().state == CONNECTING:
            raise ServiceStartingError("Service is starting up, please retry shortly")
        return view_function(*args, **kwargs)
    return decorated_function
