from flask import Blueprint, jsonify

from ..utils.db import get_database

health_bp = Blueprint("health", __name__, url_prefix="/api")


# Liveness: never touches the database
@health_bp.route("/health")
def health_check():
    database = get_database()
    return jsonify({"status": "ok", "database": database.state})
