"""
Input validation for authentication requests.

Each function raises ``ValidationError`` naming the first offending field
and is called before any store access.
"""
from email_validator import EmailNotValidError, validate_email

from seniko.errors import ValidationError

MIN_PASSWORD_LENGTH = 5
# bcrypt only accepts the first 72 bytes of input
MAX_PASSWORD_BYTES = 72


def validate_email_address(email: str, field: str = "email") -> None:
    if not email:
        raise ValidationError(field, "Email is required")
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValidationError(field, f"Invalid email address: {e}")


def validate_registration(request) -> None:
    """Validate a registration request: email, then username, then password."""
    validate_email_address(request.email)

    if not request.username or not request.username.strip():
        raise ValidationError("username", "Username is required")

    if len(request.password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            "password", f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )
    if len(request.password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(
            "password", f"Password must be at most {MAX_PASSWORD_BYTES} bytes"
        )


def validate_login(request) -> None:
    validate_email_address(request.email)
    if not request.password:
        raise ValidationError("password", "Password is required")
