"""
Input Validators - Sanitization and validation utilities.

Request bodies are already shape-checked by pydantic; these helpers hold
the domain rules so services enforce them even when called without HTTP:
- Rating range and vintage year
- Free-text sanitization (null bytes, blank values, length limits)
- Email format for the development login path
"""
import re
from typing import Optional, Tuple

from winereview.core.exceptions import ValidationError
from winereview.core.logging_config import get_logger

logger = get_logger(__name__)

MIN_RATING = 1
MAX_RATING = 5
MAX_NOTES_LENGTH = 1000
MAX_COMMENT_LENGTH = 500
MIN_VINTAGE = 1900
MAX_VINTAGE = 2100

# Pragmatic check, not RFC 5322: one @, no whitespace, a dot in the domain
_EMAIL_REGEX = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def sanitize_text(value: Optional[str]) -> Optional[str]:
    """
    Strip null bytes and surrounding whitespace.

    Returns None for None and for values that are blank after cleaning,
    so optional fields are stored as NULL rather than as empty strings.
    """
    if value is None:
        return None

    cleaned = value.replace("\x00", "").strip()
    return cleaned or None


def validate_rating(rating: Optional[int]) -> Tuple[bool, Optional[str]]:
    """
    Validate a review rating.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if rating is None:
        return False, "rating is required"

    # bool is an int subclass; True must not pass as 1
    if isinstance(rating, bool) or not isinstance(rating, int):
        return False, f"rating must be an integer between {MIN_RATING} and {MAX_RATING}"

    if not MIN_RATING <= rating <= MAX_RATING:
        return False, f"Invalid rating: {rating}. Allowed: {MIN_RATING}-{MAX_RATING}"

    return True, None


def validate_email(email: Optional[str]) -> Tuple[bool, Optional[str]]:
    """
    Validate an email address format.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not email or not email.strip():
        return False, "email is required"

    if not _EMAIL_REGEX.match(email.strip()):
        return False, f"Invalid email format: {email}"

    return True, None


def require_rating(rating: Optional[int]) -> int:
    """Return the rating or raise ValidationError naming the allowed range."""
    is_valid, error = validate_rating(rating)
    if not is_valid:
        raise ValidationError(error, field="rating")
    return rating


def require_text(value: Optional[str], field: str, max_length: int) -> str:
    """
    Return sanitized, non-blank text or raise ValidationError.

    Used for comment text, which may never be blank.
    """
    cleaned = sanitize_text(value)
    if cleaned is None:
        raise ValidationError(f"{field} must not be blank", field=field)

    if len(cleaned) > max_length:
        raise ValidationError(
            f"{field} must be at most {max_length} characters (got {len(cleaned)})",
            field=field
        )
    return cleaned


def optional_text(value: Optional[str], field: str, max_length: int) -> Optional[str]:
    """Sanitize an optional text field, enforcing its length limit."""
    cleaned = sanitize_text(value)
    if cleaned is not None and len(cleaned) > max_length:
        raise ValidationError(
            f"{field} must be at most {max_length} characters (got {len(cleaned)})",
            field=field
        )
    return cleaned


def require_email(email: Optional[str]) -> str:
    """Return the normalized email or raise ValidationError."""
    is_valid, error = validate_email(email)
    if not is_valid:
        logger.warning(f"Rejected email login input: {error}")
        raise ValidationError(error, field="email")
    return email.strip().lower()


def require_vintage(year: Optional[int]) -> Optional[int]:
    """Vintage is optional (non-vintage wines); when given it must be plausible."""
    if year is None:
        return None
    if isinstance(year, bool) or not isinstance(year, int) or not MIN_VINTAGE <= year <= MAX_VINTAGE:
        raise ValidationError(f"year must be between {MIN_VINTAGE} and {MAX_VINTAGE} (got {year})", field="year")
    return year
