import math

from .errors import StorageError, ValidationError
from .student import clean_string, normalize_student_id, to_iso, utcnow

CONFIDENCE_MIN = 0
CONFIDENCE_MAX = 100

UPDATABLE_FIELDS = ("confidence", "date")


def today_key(moment=None):
    """Calendar-day key (YYYY-MM-DD) used to group check-ins per day."""
    return (moment or utcnow()).strftime("%Y-%m-%d")


def clean_confidence(value):
    """Optional match score, inclusive range [0, 100]."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError("confidence", "must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError("confidence", "must be a number")
    if math.isnan(number):
        raise ValidationError("confidence", "must be a number")
    if number < CONFIDENCE_MIN or number > CONFIDENCE_MAX:
        raise ValidationError(
            "confidence", f"must be between {CONFIDENCE_MIN} and {CONFIDENCE_MAX}, got {value}"
        )
    return number


class Attendance:
    """
    One check-in event. name and course are copied from the student at
    check-in time so the record stays correct if the student changes later.
    """

    def __init__(self, student_id, name, course, date, confidence=None, check_in_time=None,
                 created_at=None, updated_at=None, id=None):
        now = utcnow()
        self.id = id
        self.student_id = normalize_student_id(student_id)
        self.name = clean_string("name", name)
        self.course = clean_string("course", course)
        self.date = clean_string("date", date)
        self.confidence = clean_confidence(confidence)
        self.check_in_time = check_in_time or now
        self.created_at = created_at or now
        self.updated_at = updated_at or now

    @classmethod
    def from_document(cls, doc):
        try:
            return cls(
                id=str(doc["_id"]) if doc.get("_id") is not None else None,
                student_id=doc.get("studentId"),
                name=doc.get("name"),
                course=doc.get("course"),
                date=doc.get("date"),
                confidence=doc.get("confidence"),
                check_in_time=doc.get("checkInTime"),
                created_at=doc.get("createdAt"),
                updated_at=doc.get("updatedAt"),
            )
        except ValidationError as e:
            raise StorageError(f"Stored attendance record {doc.get('_id')} is malformed ({e.message})")

    def to_dict(self):
        return {
            "studentId": self.student_id,
            "name": self.name,
            "course": self.course,
            "checkInTime": self.check_in_time,
            "date": self.date,
            "confidence": self.confidence,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    def to_json(self):
        data = self.to_dict()
        data["id"] = self.id
        for key in ("checkInTime", "createdAt", "updatedAt"):
            data[key] = to_iso(data[key])
        return data

    def __repr__(self):
        return f"<Attendance(studentId={self.student_id}, date={self.date}, confidence={self.confidence})>"


def clean_attendance_changes(changes):
    if not changes:
        raise ValidationError("body", "no fields to update")

    cleaned = {}
    for key, value in changes.items():
        if key not in UPDATABLE_FIELDS:
            raise ValidationError(key, "is not an updatable field")
        if key == "confidence":
            cleaned[key] = clean_confidence(value)
        else:
            cleaned[key] = clean_string(key, value)
    return cleaned
