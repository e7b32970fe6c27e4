import mongomock
import pytest
from pymongo.errors import ServerSelectionTimeoutError

from attendance_api.app import create_app
from attendance_api.config import Config
from attendance_api.utils.db import Database, ensure_indexes

FACE = [0.12, -0.03, 0.27, 0.5]


class UnreachableCollection:
    """Every operation fails the way PyMongo does when the server is down."""

    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise ServerSelectionTimeoutError("localhost:27017: [Errno 111] Connection refused")
        return fail


class UnreachableDatabase(UnreachableCollection):

    def __getitem__(self, name):
        return UnreachableCollection()


class UnreachableClient:

    def __getattr__(self, name):
        return UnreachableDatabase()

    def __getitem__(self, name):
        return UnreachableDatabase()


@pytest.fixture
def mongo_db():
    db = mongomock.MongoClient()["attendance_test"]
    ensure_indexes(db)
    return db


@pytest.fixture
def database():
    database = Database(mongomock.MongoClient(), "attendance_test")
    database.ping = lambda: None
    assert database.connect()
    return database


@pytest.fixture
def config(tmp_path):
    return Config(
        mongo_uri="mongodb://localhost:27017/attendance_test",
        static_root=str(tmp_path),
    )


@pytest.fixture
def app(config, database):
    app = create_app(config, database=database)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def student_payload():
    return {
        "studentId": "  cs2024-01 ",
        "name": "  Ada Lovelace ",
        "course": " Computer Science ",
        "faceDescriptor": FACE,
    }
