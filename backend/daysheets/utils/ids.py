import uuid

from .errors import ValidationError


def ensure_uuid(value, field: str) -> str:
    """Return ``value`` as a canonical UUID string or raise ValidationError."""
    if not value or not isinstance(value, str):
        raise ValidationError(f"Invalid {field}", {field: "required"})
    try:
        return str(uuid.UUID(value))
    except ValueError:
        raise ValidationError(f"Invalid {field}", {field: "must be a UUID"})
