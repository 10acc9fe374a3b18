import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..config import settings
from ..core.exceptions import (
    CodeAllocationError,
    DuplicateCode,
    InvalidInput,
    LinkExpired,
    LinkNotFound,
    SlugTaken,
    StorageUnavailable,
)
from ..core.link_rules import is_expired, utcnow
from ..core.shortener import allocate_short_code, is_valid_code_shape, reserve_custom_slug
from ..models import Link
from ..utils.validators import is_valid_url
from . import link_store
from .link_store import ClickData

logger = logging.getLogger(__name__)


def short_url_base() -> str:
    if settings.SHORT_DOMAIN:
        return settings.SHORT_DOMAIN.rstrip("/")

    if settings.ENVIRONMENT == "production":
        return settings.PUBLIC_BASE_URL.rstrip("/")

    return f"http://localhost:{settings.PORT}"


def format_short_url(code: str) -> str:
    return f"{short_url_base()}/{code}"


def shorten_url(
    db: Session,
    original_url: str,
    custom_slug: Optional[str] = None,
    owner_id: Optional[int] = None,
) -> Link:
    """
    Create a link for ``original_url``.

    A custom slug is validated and stored as both short code and slug.
    Without one, a random code is allocated; if the insert loses a race on
    the unique index a fresh code is drawn, within the same attempt bound
    as the allocator itself.

    Raises:
        InvalidInput: malformed URL or slug
        SlugTaken: the custom slug is in use
        CodeAllocationError: no free random code was found
    """
    is_valid, error_msg = is_valid_url(original_url)
    if not is_valid:
        raise InvalidInput(error_msg)

    if custom_slug:
        slug = reserve_custom_slug(db, custom_slug)
        try:
            link = link_store.create_link(
                db, original_url, short_code=slug, custom_slug=slug, owner_id=owner_id
            )
        except DuplicateCode as e:
            logger.warning("Custom slug %r claimed concurrently", slug)
            raise SlugTaken(f"Custom slug '{slug}' is already taken") from e
        logger.info("Created link %s (custom) for owner %s", link.short_code, owner_id)
        return link

    for _ in range(settings.SHORT_CODE_MAX_ATTEMPTS):
        code = allocate_short_code(
            db,
            length=settings.SHORT_CODE_LENGTH,
            max_attempts=settings.SHORT_CODE_MAX_ATTEMPTS,
        )
        try:
            link = link_store.create_link(db, original_url, short_code=code, owner_id=owner_id)
        except DuplicateCode:
            logger.warning("Generated code %s collided on insert, retrying", code)
            continue
        logger.info("Created link %s for owner %s", link.short_code, owner_id)
        return link

    raise CodeAllocationError()


def resolve_link(db: Session, code: str, now: Optional[datetime] = None) -> Link:
    """
    Look a code up for redirection.

    Raises:
        LinkNotFound: unknown code
        LinkExpired: the link lapsed
    """
    if not is_valid_code_shape(code):
        raise LinkNotFound()

    link = link_store.find_by_code(db, code)

    if is_expired(link.expires_at, now or utcnow()):
        raise LinkExpired()

    return link


def resolve_and_track(db: Session, code: str, click: ClickData, now: Optional[datetime] = None) -> str:
    """
    Resolve ``code`` and record the visit, returning the redirect target.

    The click is written before returning, but a failed write is only
    logged: the caller is redirected either way.
    """
    link = resolve_link(db, code, now)
    target = link.original_url
    link_id = link.id

    try:
        link_store.append_click(db, link_id, click)
    except StorageUnavailable:
        logger.exception("Failed to record click for link %s", link_id)

    return target
