"""Typed failures raised by the model and storage layers."""


class ModelError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {"code": self.code, "message": self.message}


class ValidationError(ModelError):
    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, field, message):
        super().__init__(f"{field}: {message}")
        self.field = field

    def to_dict(self):
        data = super().to_dict()
        data["field"] = self.field
        return data


class DuplicateKeyError(ModelError):
    status_code = 409
    code = "DUPLICATE_KEY"


class AlreadyCheckedInError(DuplicateKeyError):
    code = "ALREADY_CHECKED_IN"


class NotFoundError(ModelError):
    status_code = 404
    code = "NOT_FOUND"


class StorageError(ModelError):
    status_code = 503
    code = "STORAGE_ERROR"


class ServiceStartingError(ModelError):
    status_code = 503
    code = "SERVICE_STARTING"
