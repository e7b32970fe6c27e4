import logging
import os

import pytest

from attendance_api.app import create_app
from attendance_api.config import Config

EVIL_ORIGIN = "http://evil.example"


# -------------------------------------------------------------
# CORS
# -------------------------------------------------------------
def test_unknown_origin_is_rejected_before_routing(client, database, student_payload):
    response = client.post("/api/students", json=student_payload, headers={"Origin": EVIL_ORIGIN})

    assert response.status_code == 403
    assert response.get_json()["error"]["code"] == "CORS_REJECTED"
    assert "Access-Control-Allow-Origin" not in response.headers
    assert database.db["students"].count_documents({}) == 0


@pytest.mark.parametrize("origin", [
    "http://localhost:3000",
    "http://localhost:5000",
    "https://ea-w4if.onrender.com",
])
def test_allowed_origins_get_credentialed_cors_headers(client, origin):
    response = client.get("/api/health", headers={"Origin": origin})

    assert response.status_code == 200
    assert response.headers["Access-Control-Allow-Origin"] == origin
    assert response.headers["Access-Control-Allow-Credentials"] == "true"


def test_preflight_returns_200(client):
    response = client.options("/api/students", headers={
        "Origin": "http://localhost:3000",
        "Access-Control-Request-Method": "POST",
        "Access-Control-Request-Headers": "Content-Type",
    })

    assert response.status_code == 200
    assert response.headers["Access-Control-Allow-Origin"] == "http://localhost:3000"


def test_frontend_url_is_configurable(database, tmp_path):
    config = Config(mongo_uri="mongodb://localhost/x", frontend_url="https://app.example.edu",
                    static_root=str(tmp_path))
    client = create_app(config, database=database).test_client()

    assert client.get("/api/health", headers={"Origin": "https://app.example.edu"}).status_code == 200
    assert client.get("/api/health", headers={"Origin": "http://localhost:3000"}).status_code == 403


def test_requests_without_origin_pass(client):
    assert client.get("/api/health").status_code == 200


# -------------------------------------------------------------
# BODY SIZE CEILING
# -------------------------------------------------------------
def test_default_body_ceiling_is_50mb(app):
    assert app.config["MAX_CONTENT_LENGTH"] == 50 * 1024 * 1024


def test_oversized_declared_body_is_rejected(client, database):
    response = client.post(
        "/api/students",
        data=b"{}",
        content_type="application/json",
        environ_overrides={"CONTENT_LENGTH": str(60 * 1024 * 1024)},
    )

    assert response.status_code == 413
    assert response.get_json()["error"]["code"] == "PAYLOAD_TOO_LARGE"
    assert database.db["students"].count_documents({}) == 0


def test_oversized_body_rejected_with_small_ceiling(database, tmp_path):
    config = Config(mongo_uri="mongodb://localhost/x", max_body_mb=1, static_root=str(tmp_path))
    client = create_app(config, database=database).test_client()

    body = b"x" * (1024 * 1024 + 1)
    response = client.post("/api/students", data=body, content_type="application/x-www-form-urlencoded")

    assert response.status_code == 413


def test_large_descriptor_payload_is_accepted(client):
    payload = {"studentId": "big1", "name": "Big", "course": "CS", "faceDescriptor": [0.001] * 50000}

    response = client.post("/api/students", json=payload)

    assert response.status_code == 201


# -------------------------------------------------------------
# STATIC FILES
# -------------------------------------------------------------
@pytest.fixture
def static_root(config):
    root = config.STATIC_ROOT
    with open(os.path.join(root, "index.html"), "w") as f:
        f.write("<h1>Attendance</h1>")
    with open(os.path.join(root, "app.js"), "w") as f:
        f.write("console.log('ok');")
    with open(os.path.join(root, ".env"), "w") as f:
        f.write("MONGODB_URI=secret")
    return root


def test_static_files_are_served(client, static_root):
    response = client.get("/app.js")
    assert response.status_code == 200
    assert b"console.log" in response.data

    index = client.get("/")
    assert index.status_code == 200
    assert b"Attendance" in index.data


def test_dotfiles_and_missing_files_are_not_served(client, static_root):
    assert client.get("/.env").status_code == 404
    assert client.get("/missing.css").status_code == 404
    assert client.get("/../etc/passwd").status_code == 404


def test_root_without_index(client):
    assert client.get("/").get_json()["api"] == "/api"


def test_file_on_disk_wins_over_api_route(client, config):
    os.makedirs(os.path.join(config.STATIC_ROOT, "api"))
    with open(os.path.join(config.STATIC_ROOT, "api", "health"), "w") as f:
        f.write("STATIC")

    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.data == b"STATIC"


def test_static_files_only_answer_get_and_head(client, static_root):
    assert client.head("/app.js").status_code == 200
    assert client.post("/app.js").status_code == 404


def test_unmatched_path_is_404_for_any_method(client):
    for method in ("get", "post", "patch", "delete"):
        response = getattr(client, method)("/nowhere/at/all")
        assert response.status_code == 404
        assert response.get_json()["error"]["code"] == "NOT_FOUND"


# -------------------------------------------------------------
# REQUEST LOG
# -------------------------------------------------------------
def test_every_request_is_logged(client, caplog):
    caplog.set_level(logging.INFO, logger="attendance_api.utils.middleware")

    response = client.get("/api/health?verbose=1")

    assert response.status_code == 200
    assert "GET /api/health" in caplog.text


def test_static_file_requests_are_logged(client, static_root, caplog):
    caplog.set_level(logging.INFO, logger="attendance_api.utils.middleware")

    assert client.get("/app.js").status_code == 200
    assert "GET /app.js" in caplog.text


# -------------------------------------------------------------
# ERROR ENVELOPE
# -------------------------------------------------------------
def test_unknown_route_uses_error_envelope(client):
    body = client.get("/api/nothing-here").get_json()

    assert body["error"]["code"] == "NOT_FOUND"
    assert "generated_at" in body


def test_unhandled_error_returns_500(app, client):
    @app.route("/api/boom")
    def boom():
        raise RuntimeError("kaput")

    response = client.get("/api/boom")

    assert response.status_code == 500
    assert response.get_json()["error"] == {"code": "INTERNAL_ERROR", "message": "kaput"}
