"""
Service-layer exceptions.

Each carries the HTTP status the API layer responds with, so route handlers
stay free of status-code bookkeeping.
"""


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Missing or malformed input"""
    status_code = 400


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    """State transition already applied (double accept, double completion)"""
    status_code = 409


def require_fields(data, fields):
    """
    Raise ValidationError unless every field is present and non-empty.

    Returns the subset of data for the requested fields.
    """
    if not isinstance(data, dict):
        raise ValidationError("Request body is required")

    missing = [field for field in fields if data.get(field) in (None, '')]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    return {field: data[field] for field in fields}


def require_text(data, fields):
    """Raise ValidationError if any of the given fields holds a non-string value"""
    wrong = [field for field in fields if data.get(field) is not None and not isinstance(data[field], str)]
    if wrong:
        raise ValidationError(f"Fields must be text: {', '.join(wrong)}")
    return data
