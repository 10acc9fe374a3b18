import logging
import re
import secrets
import string
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..models import Link
from .exceptions import CodeAllocationError, InvalidSlug, SlugTaken

logger = logging.getLogger(__name__)

# URL-safe alphabet: 64 symbols, 64^7 ~ 4.4e12 seven-character codes
CHARSET = string.ascii_letters + string.digits + "_-"

SLUG_MIN_LENGTH = 3
SLUG_MAX_LENGTH = 50
SLUG_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

# Paths served by the app itself; routing is case-sensitive, so only exact matches clash
RESERVED_SLUGS = {"api", "health", "docs", "redoc", "openapi.json"}


def generate_short_code(length: int = 7) -> str:
    """Generate a random short code from the URL-safe alphabet."""
    return "".join(secrets.choice(CHARSET) for _ in range(length))


def validate_custom_slug(slug: str) -> tuple[bool, str]:
    """
    Validate a caller-chosen slug.

    Args:
        slug: The custom slug to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not slug:
        return False, "Custom slug cannot be empty"

    if len(slug) < SLUG_MIN_LENGTH or len(slug) > SLUG_MAX_LENGTH:
        return False, f"Custom slug must be between {SLUG_MIN_LENGTH} and {SLUG_MAX_LENGTH} characters"

    if not SLUG_PATTERN.match(slug):
        return False, "Custom slug can only contain letters, numbers, hyphens, and underscores"

    if slug in RESERVED_SLUGS:
        return False, f"'{slug}' is a reserved word and cannot be used"

    return True, ""


def ensure_valid_slug(slug: str) -> None:
    is_valid, error_msg = validate_custom_slug(slug)
    if not is_valid:
        raise InvalidSlug(error_msg)


def is_valid_code_shape(code: str) -> bool:
    return SLUG_MIN_LENGTH <= len(code) <= SLUG_MAX_LENGTH and SLUG_PATTERN.match(code) is not None


def is_code_available(db: Session, code: str) -> bool:
    """
    Check whether no link uses ``code`` as short code or custom slug.

    This is only a pre-check; the unique index on ``links.short_code``
    decides at insert time.
    """
    existing = db.query(Link.id).filter(
        or_(Link.short_code == code, Link.custom_slug == code)
    ).first()

    return existing is None


def allocate_short_code(db: Session, length: int = 7, max_attempts: int = 10) -> str:
    """
    Generate a short code not currently present in the store.

    Raises:
        CodeAllocationError: if every attempt hit an existing code
    """
    for attempt in range(1, max_attempts + 1):
        code = generate_short_code(length)
        if is_code_available(db, code):
            return code
        logger.warning("Short code collision on attempt %d/%d", attempt, max_attempts)

    raise CodeAllocationError()


def reserve_custom_slug(db: Session, slug: str) -> str:
    """
    Validate a custom slug and check it is free.

    Raises:
        InvalidSlug: if the slug is malformed
        SlugTaken: if a link already uses it
    """
    ensure_valid_slug(slug)

    if not is_code_available(db, slug):
        raise SlugTaken(f"Custom slug '{slug}' is already taken")

    return slug
