from notemaker.errors import ValidationError
from notemaker.utils import is_email

MIN_PASSWORD_LENGTH = 8
MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 50


def validate_email(email: str) -> None:
    """Raise ValidationError unless email looks like an address."""
    if not is_email(email):
        raise ValidationError(
            "Please enter a valid email address",
            [{"field": "email", "message": "Please enter a valid email address"}],
        )


def validate_password(password: str, field: str = "password") -> None:
    """Validate password meets requirements.

    Requirements:
    - Minimum length of 8 characters

    Raises:
        ValidationError: If password doesn't meet requirements
    """
    if len(password) < MIN_PASSWORD_LENGTH:
        message = f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        raise ValidationError(message, [{"field": field, "message": message}])


def validate_name(name: str, field: str) -> None:
    """Raise ValidationError unless the trimmed name is 2 to 50 characters."""
    if not MIN_NAME_LENGTH <= len(name.strip()) <= MAX_NAME_LENGTH:
        message = f"Name must be between {MIN_NAME_LENGTH} and {MAX_NAME_LENGTH} characters"
        raise ValidationError(message, [{"field": field, "message": message}])
