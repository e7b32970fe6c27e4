import logging

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import PyMongoError

from ..models.attendance import Attendance, clean_attendance_changes, today_key
from ..models.errors import AlreadyCheckedInError, NotFoundError, StorageError, ValidationError
from ..models.student import normalize_student_id, utcnow

logger = logging.getLogger(__name__)


def _object_id(record_id):
    try:
        return ObjectId(record_id)
    except (InvalidId, TypeError):
        raise NotFoundError(f"Attendance record {record_id} not found")


class AttendanceStore:
    """
    Append-only check-in log in the "attendances" collection.

    The (studentId, date) index is a lookup index, not a unique one; the
    one-check-in-per-day rule lives in check_in().
    """

    def __init__(self, db):
        self.collection = db["attendances"]

    def create(self, data):
        record = data if isinstance(data, Attendance) else Attendance(
            student_id=data.get("studentId"),
            name=data.get("name"),
            course=data.get("course"),
            date=data.get("date"),
            confidence=data.get("confidence"),
        )
        try:
            result = self.collection.insert_one(record.to_dict())
        except PyMongoError as e:
            logger.error("Failed to record attendance for %s: %s", record.student_id, e)
            raise StorageError(str(e))
        record.id = str(result.inserted_id)
        return record

    def get(self, record_id):
        try:
            doc = self.collection.find_one({"_id": _object_id(record_id)})
        except PyMongoError as e:
            raise StorageError(str(e))
        if not doc:
            raise NotFoundError(f"Attendance record {record_id} not found")
        return Attendance.from_document(doc)

    def find(self, student_id=None, date=None, limit=0):
        query = {}
        if student_id:
            query["studentId"] = normalize_student_id(student_id)
        if date:
            query["date"] = date
        try:
            docs = list(self.collection.find(query).sort("checkInTime", DESCENDING).limit(limit))
        except PyMongoError as e:
            raise StorageError(str(e))
        return [Attendance.from_document(doc) for doc in docs]

    def find_for_day(self, student_id, date):
        return self.find(student_id=student_id, date=date)

    def has_checked_in(self, student_id, date):
        query = {"studentId": normalize_student_id(student_id), "date": date}
        try:
            return self.collection.count_documents(query, limit=1) > 0
        except PyMongoError as e:
            raise StorageError(str(e))

    def update(self, record_id, changes):
        fields = clean_attendance_changes(changes)
        fields["updatedAt"] = utcnow()
        try:
            doc = self.collection.find_one_and_update(
                {"_id": _object_id(record_id)},
                {"$set": fields},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise StorageError(str(e))
        if not doc:
            raise NotFoundError(f"Attendance record {record_id} not found")
        return Attendance.from_document(doc)

    def check_in(self, student, confidence=None, date=None, one_per_day=True):
        """
        Record a check-in for an enrolled student after a successful external
        face match. name and course are copied from the student record.
        """
        if not student.is_active:
            raise ValidationError("studentId", f"Student {student.student_id} is inactive")

        now = utcnow()
        date = date or today_key(now)
        if one_per_day and self.has_checked_in(student.student_id, date):
            raise AlreadyCheckedInError(f"{student.name} has already checked in on {date}")

        record = self.create(Attendance(
            student_id=student.student_id,
            name=student.name,
            course=student.course,
            date=date,
            confidence=confidence,
            check_in_time=now,
        ))
        logger.info("Check-in %s | %s | confidence=%s", student.student_id, date, record.confidence)
        return record
