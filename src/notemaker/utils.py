from datetime import UTC, datetime

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

EMAIL_ADAPTER: TypeAdapter[str] = TypeAdapter(EmailStr)


def is_email(value: str) -> bool:
    """Whether ``value`` is a syntactically valid address (no DNS lookup)."""
    try:
        EMAIL_ADAPTER.validate_python(value)
    except PydanticValidationError:
        return False
    return True


def normalize_email(value: str) -> str:
    return value.strip().lower()


def now() -> datetime:
    return datetime.now(UTC)
