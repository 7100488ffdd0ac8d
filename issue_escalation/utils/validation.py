"""Input validation utilities."""

from email_validator import validate_email as email_validate, EmailNotValidError


def validate_email(email: str) -> bool:
    """Validate email address format without DNS lookups."""
    if not email:
        return False
    try:
        email_validate(email, check_deliverability=False)
        return True
    except EmailNotValidError:
        return False
