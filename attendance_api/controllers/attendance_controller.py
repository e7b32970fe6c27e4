from flask import Blueprint, current_app, jsonify, request

from ..models.attendance import today_key
from ..storage import AttendanceStore, StudentStore
from ..utils.db import db_required, get_database
from ..utils.payload import read_payload

attendance_bp = Blueprint("attendance", __name__, url_prefix="/api/attendance")


# -------------------------------------------------------------
# CHECK-IN
# -------------------------------------------------------------
@attendance_bp.route("", methods=["POST"])
@db_required
def check_in():
    """
    Body: {"studentId", "confidence", "date"?}. The face match itself happens
    on the client; this records the result against the enrolled student.
    """
    data = read_payload()
    db = get_database().db

    student = StudentStore(db).get(data.get("studentId"))
    record = AttendanceStore(db).check_in(
        student,
        confidence=data.get("confidence"),
        date=data.get("date"),
        one_per_day=current_app.config["ONE_CHECKIN_PER_DAY"],
    )
    return jsonify(record.to_json()), 201


# -------------------------------------------------------------
# LIST CHECK-INS (?studentId=...&date=YYYY-MM-DD)
# -------------------------------------------------------------
@attendance_bp.route("", methods=["GET"])
@db_required
def list_attendance():
    records = AttendanceStore(get_database().db).find(
        student_id=request.args.get("studentId"),
        date=request.args.get("date"),
    )
    return jsonify([r.to_json() for r in records])


@attendance_bp.route("/today", methods=["GET"])
@db_required
def today_attendance():
    records = AttendanceStore(get_database().db).find(date=today_key())
    return jsonify([r.to_json() for r in records])


@attendance_bp.route("/<record_id>", methods=["GET"])
@db_required
def get_attendance(record_id):
    return jsonify(AttendanceStore(get_database().db).get(record_id).to_json())
