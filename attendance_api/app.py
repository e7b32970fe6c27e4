import logging
import os

from flask import Flask, jsonify, request, send_from_directory
from werkzeug.security import safe_join
from werkzeug.serving import make_server

from .config import load_config
from .utils.db import attach_database, init_db_connection
from .utils.logger import configure_logging
from .utils.middleware import add_error_handlers, init_middleware

# Import controllers
from .controllers.health_controller import health_bp
from .controllers.students_controller import students_bp
from .controllers.attendance_controller import attendance_bp

logger = logging.getLogger(__name__)

APP_TITLE = "Biometric Attendance System API"


def create_app(config, database=None):
    """
    Build the Flask app. When no Database is passed, one is created from
    config.MONGO_URI and starts connecting in the background.
    """
    # Static files are served by our own hook, ahead of the API blueprints
    app = Flask(__name__, static_folder=None)
    app.config.from_object(config)          # Load configuration from Config object

    init_middleware(app)
    add_error_handlers(app)

    if database is None:
        init_db_connection(app, config)     # Initialize MongoDB connection
    else:
        attach_database(app, database)

    # Register Blueprint
    app.register_blueprint(health_bp)
    app.register_blueprint(students_bp)
    app.register_blueprint(attendance_bp)

    register_static_routes(app)
    return app


def register_static_routes(app):
    """
    Files under STATIC_ROOT are served from a before_request hook, so a path
    that matches a file on disk is answered before any API rule is looked at.
    Anything else falls through to normal routing.
    """
    root = app.config["STATIC_ROOT"]

    def serve_static_file():
        if request.method not in ("GET", "HEAD"):
            return None
        filename = request.path.lstrip("/") or "index.html"
        # Never expose dotfiles such as .env
        if any(part.startswith(".") for part in filename.split("/")):
            return None
        path = safe_join(root, filename)
        if path is None or not os.path.isfile(path):
            return None
        return send_from_directory(root, filename)

    app.before_request(serve_static_file)

    @app.route("/")
    def home():
        return jsonify({"message": APP_TITLE, "api": "/api"})


def startup_banner(config):
    return [
        "========================================",
        f"   {APP_TITLE}",
        "   ========================================",
        f"   Server: http://localhost:{config.PORT}",
        f"   API: http://localhost:{config.PORT}/api",
        f"   Environment: {config.ENV_NAME}",
        f"   Database: {config.database_label}",
        "   ========================================",
    ]


def main():
    configure_logging()
    config = load_config()                  # exits with status 1 without MONGODB_URI
    configure_logging(config.LOG_LEVEL, config.LOG_FILE)

    app = create_app(config)
    server = make_server("0.0.0.0", config.PORT, app, threaded=True)

    for line in startup_banner(config):
        logger.info(line)

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        server.server_close()


# Run the app
if __name__ == "__main__":
    main()
