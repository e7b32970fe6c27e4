from flask import Blueprint, jsonify, request

from ..storage import StudentStore
from ..utils.db import db_required, get_database
from ..utils.payload import parse_flag, read_payload

students_bp = Blueprint("students", __name__, url_prefix="/api/students")


def student_store():
    return StudentStore(get_database().db)


# -------------------------------------------------------------
# REGISTER STUDENT
# -------------------------------------------------------------
@students_bp.route("", methods=["POST"])
@db_required
def register_student():
    student = student_store().create(read_payload())
    return jsonify(student.to_json()), 201


# -------------------------------------------------------------
# LIST STUDENTS (?course=...&active=true|false)
# -------------------------------------------------------------
@students_bp.route("", methods=["GET"])
@db_required
def list_students():
    students = student_store().find(
        course=request.args.get("course"),
        active=parse_flag(request.args.get("active")),
    )
    return jsonify([s.to_json(include_descriptor=False) for s in students])


# -------------------------------------------------------------
# DESCRIPTORS FOR THE FACE MATCHER
# -------------------------------------------------------------
@students_bp.route("/descriptors", methods=["GET"])
@db_required
def list_descriptors():
    return jsonify(student_store().descriptors())


@students_bp.route("/<student_id>", methods=["GET"])
@db_required
def get_student(student_id):
    return jsonify(student_store().get(student_id).to_json())


# -------------------------------------------------------------
# UPDATE STUDENT (name, course, faceDescriptor, isActive)
# -------------------------------------------------------------
@students_bp.route("/<student_id>", methods=["PATCH"])
@db_required
def update_student(student_id):
    student = student_store().update(student_id, read_payload())
    return jsonify(student.to_json())
