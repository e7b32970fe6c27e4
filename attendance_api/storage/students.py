import logging

from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError as MongoDuplicateKeyError
from pymongo.errors import PyMongoError

from ..models.errors import DuplicateKeyError, NotFoundError, StorageError
from ..models.student import Student, clean_student_changes, normalize_student_id, utcnow

logger = logging.getLogger(__name__)


class StudentStore:
    """Student records in the "students" collection."""

    def __init__(self, db):
        self.collection = db["students"]

    def create(self, data):
        student = data if isinstance(data, Student) else Student.from_payload(data)
        try:
            result = self.collection.insert_one(student.to_dict())
        except MongoDuplicateKeyError:
            raise DuplicateKeyError(f"Student {student.student_id} is already registered")
        except PyMongoError as e:
            logger.error("Failed to register student %s: %s", student.student_id, e)
            raise StorageError(str(e))

        student.id = str(result.inserted_id)
        logger.info("Registered student %s (%s)", student.student_id, student.name)
        return student

    def get(self, student_id):
        student_id = normalize_student_id(student_id)
        try:
            doc = self.collection.find_one({"studentId": student_id})
        except PyMongoError as e:
            raise StorageError(str(e))
        if not doc:
            raise NotFoundError(f"Student {student_id} not found")
        return Student.from_document(doc)

    def find(self, course=None, active=None, limit=0):
        query = {}
        if course:
            query["course"] = course.strip()
        if active is not None:
            query["isActive"] = active
        try:
            docs = list(self.collection.find(query).sort("studentId", ASCENDING).limit(limit))
        except PyMongoError as e:
            raise StorageError(str(e))
        return [Student.from_document(doc) for doc in docs]

    def update(self, student_id, changes):
        student_id = normalize_student_id(student_id)
        fields = clean_student_changes(changes)
        fields["updatedAt"] = utcnow()
        try:
            doc = self.collection.find_one_and_update(
                {"studentId": student_id},
                {"$set": fields},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise StorageError(str(e))
        if not doc:
            raise NotFoundError(f"Student {student_id} not found")
        logger.info("Updated student %s: %s", student_id, ", ".join(sorted(changes)))
        return Student.from_document(doc)

    def descriptors(self):
        """Active enrolment set handed to the face matcher."""
        projection = {"_id": 0, "studentId": 1, "name": 1, "course": 1, "faceDescriptor": 1}
        try:
            return list(
                self.collection.find({"isActive": True}, projection).sort("studentId", ASCENDING)
            )
        except PyMongoError as e:
            raise StorageError(str(e))
