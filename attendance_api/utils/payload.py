import json

from flask import request

from ..models.errors import ValidationError

# Form fields that carry JSON values when a body is url-encoded
JSON_FORM_FIELDS = ("faceDescriptor", "isActive", "confidence")


def read_payload():
    """
    Return the request body as a dict, whether it was sent as JSON or as a
    url-encoded form.
    """
    if request.is_json:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("body", "must be a JSON object")
        return data

    data = request.form.to_dict()
    for key in JSON_FORM_FIELDS:
        if key in data:
            try:
                data[key] = json.loads(data[key])
            except ValueError:
                raise ValidationError(key, "is not valid JSON")
    return data


def parse_flag(value):
    """Query-string boolean: true/false/1/0, or None when absent."""
    if value is None or value == "":
        return None
    value = value.strip().lower()
    if value in ("1", "true", "yes"):
        return True
    if value in ("0", "false", "no"):
        return False
    raise ValidationError("active", "must be true or false")
