import math
from datetime import datetime, timezone

from .errors import StorageError, ValidationError

UPDATABLE_FIELDS = ("name", "course", "faceDescriptor", "isActive")


def utcnow():
    return datetime.now(timezone.utc)


def clean_string(field, value):
    """Required string, surrounding whitespace trimmed."""
    if value is None:
        raise ValidationError(field, "is required")
    if not isinstance(value, str):
        raise ValidationError(field, "must be a string")
    value = value.strip()
    if not value:
        raise ValidationError(field, "is required")
    return value


def normalize_student_id(value):
    return clean_string("studentId", value).upper()


def clean_descriptor(value):
    if value is None:
        raise ValidationError("faceDescriptor", "is required")
    if isinstance(value, (str, bytes, dict)) or not hasattr(value, "__iter__"):
        raise ValidationError("faceDescriptor", "must be an array of numbers")

    descriptor = []
    for i, item in enumerate(value):
        if isinstance(item, bool):
            raise ValidationError("faceDescriptor", f"item {i} is not a number")
        try:
            number = float(item)
        except (TypeError, ValueError):
            raise ValidationError("faceDescriptor", f"item {i} is not a number")
        if math.isnan(number) or math.isinf(number):
            raise ValidationError("faceDescriptor", f"item {i} is not a finite number")
        descriptor.append(number)

    if not descriptor:
        raise ValidationError("faceDescriptor", "is required")
    return descriptor


def clean_flag(field, value):
    if not isinstance(value, bool):
        raise ValidationError(field, "must be a boolean")
    return value


class Student:
    """
    One enrolled individual.

    Field invariants are checked on construction so that a Student instance
    is always valid; the unique studentId constraint is left to the
    database index (see storage.students).
    """

    def __init__(self, student_id, name, course, face_descriptor, registered_at=None,
                 is_active=True, created_at=None, updated_at=None, id=None):
        now = utcnow()
        self.id = id
        self.student_id = normalize_student_id(student_id)
        self.name = clean_string("name", name)
        self.course = clean_string("course", course)
        self.face_descriptor = clean_descriptor(face_descriptor)
        self.registered_at = registered_at or now
        self.is_active = clean_flag("isActive", is_active)
        self.created_at = created_at or now
        self.updated_at = updated_at or now

    @classmethod
    def from_payload(cls, data):
        """Build from a camelCase request payload."""
        return cls(
            student_id=data.get("studentId"),
            name=data.get("name"),
            course=data.get("course"),
            face_descriptor=data.get("faceDescriptor"),
            is_active=data.get("isActive", True),
        )

    @classmethod
    def from_document(cls, doc):
        """A stored document that fails validation is a storage fault, not a bad request."""
        try:
            return cls(
                id=str(doc["_id"]) if doc.get("_id") is not None else None,
                student_id=doc.get("studentId"),
                name=doc.get("name"),
                course=doc.get("course"),
                face_descriptor=doc.get("faceDescriptor"),
                registered_at=doc.get("registeredAt"),
                is_active=doc.get("isActive", True),
                created_at=doc.get("createdAt"),
                updated_at=doc.get("updatedAt"),
            )
        except ValidationError as e:
            raise StorageError(f"Stored student {doc.get('_id')} is malformed ({e.message})")

    # Convert to dictionary for MongoDB
    def to_dict(self):
        return {
            "studentId": self.student_id,
            "name": self.name,
            "course": self.course,
            "faceDescriptor": self.face_descriptor,
            "registeredAt": self.registered_at,
            "isActive": self.is_active,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    def to_json(self, include_descriptor=True):
        data = {
            "id": self.id,
            "studentId": self.student_id,
            "name": self.name,
            "course": self.course,
            "registeredAt": to_iso(self.registered_at),
            "isActive": self.is_active,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }
        if include_descriptor:
            data["faceDescriptor"] = self.face_descriptor
        return data

    def __repr__(self):
        return f"<Student(studentId={self.student_id}, name={self.name})>"


def clean_student_changes(changes):
    """
    Validate a partial update. Only name, course, faceDescriptor and isActive
    may change; the studentId is immutable once registered.
    """
    if not changes:
        raise ValidationError("body", "no fields to update")

    cleaned = {}
    for key, value in changes.items():
        if key == "studentId":
            raise ValidationError("studentId", "cannot be changed")
        if key not in UPDATABLE_FIELDS:
            raise ValidationError(key, "is not an updatable field")
        if key == "faceDescriptor":
            cleaned[key] = clean_descriptor(value)
        elif key == "isActive":
            cleaned[key] = clean_flag(key, value)
        else:
            cleaned[key] = clean_string(key, value)
    return cleaned


def to_iso(value):
    return value.isoformat() if isinstance(value, datetime) else value
