"""Input normalization shared by the identity and store services."""

from typing import Optional

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from storerate.exceptions import ValidationError

_email_adapter = TypeAdapter(EmailStr)


def normalize_email(value: str, field: str = "email") -> str:
    """Validate the address format and return it stripped and lower-cased."""
    candidate = (value or "").strip()
    try:
        _email_adapter.validate_python(candidate)
    except PydanticValidationError as e:
        raise ValidationError(
            message=f"'{candidate}' is not a valid email address",
            field=field,
        ) from e
    return candidate.lower()


def normalize_optional_email(value: Optional[str], field: str = "email") -> Optional[str]:
    if value is None or not value.strip():
        return None
    return normalize_email(value, field=field)


def require_text(value: Optional[str], field: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(message=f"{field.capitalize()} is required", field=field)
    return text


def optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    text = value.strip()
    return text or None
