"""
Persistence operations for links and their click logs.

Every mutation here is a single transaction; counters are bumped with an
``UPDATE ... SET clicks_count = clicks_count + 1`` in the same transaction
as the click insert, so the count and the log can never drift apart.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import delete, insert, or_, update, func, desc
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..config import settings
from ..core.exceptions import DuplicateCode, LinkNotFound, StorageUnavailable
from ..core.link_rules import utcnow, default_expiry
from ..models import Click, Link


@dataclass(frozen=True)
class ClickData:
    ip_address: str = "unknown"
    user_agent: str = "unknown"
    referrer: str = ""
    clicked_at: datetime = field(default_factory=utcnow)


def create_link(
    db: Session,
    original_url: str,
    short_code: str,
    custom_slug: Optional[str] = None,
    owner_id: Optional[int] = None,
    expires_at: Optional[datetime] = None,
) -> Link:
    """
    Insert a new link.

    Raises:
        DuplicateCode: if the short code or slug is already stored
    """
    now = utcnow()
    link = Link(
        short_code=short_code,
        custom_slug=custom_slug,
        original_url=original_url,
        owner_id=owner_id,
        clicks_count=0,
        created_at=now,
        updated_at=now,
        expires_at=expires_at or default_expiry(now, settings.LINK_TTL_DAYS),
    )

    db.add(link)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateCode(f"Short code '{short_code}' already exists") from e
    db.refresh(link)

    return link


def find_by_code(db: Session, code: str) -> Link:
    link = db.query(Link).filter(
        or_(Link.short_code == code, Link.custom_slug == code)
    ).first()

    if link is None:
        raise LinkNotFound()

    return link


def find_by_id(db: Session, link_id: int, owner_id: int) -> Link:
    """Ownership-scoped lookup; a link owned by someone else is reported as missing."""
    link = db.query(Link).filter(
        Link.id == link_id,
        Link.owner_id == owner_id
    ).first()

    if link is None:
        raise LinkNotFound()

    return link


def list_by_owner(db: Session, owner_id: int, page: int = 1, limit: int = 10) -> Tuple[List[Link], int]:
    total = db.query(func.count(Link.id)).filter(Link.owner_id == owner_id).scalar() or 0

    links = db.query(Link).filter(
        Link.owner_id == owner_id
    ).order_by(
        desc(Link.created_at), desc(Link.id)
    ).offset((page - 1) * limit).limit(limit).all()

    return links, total


def load_owner_links_with_clicks(db: Session, owner_id: int) -> List[Link]:
    return db.query(Link).options(
        selectinload(Link.clicks)
    ).filter(
        Link.owner_id == owner_id
    ).order_by(Link.id).all()


def append_click(db: Session, link_id: int, click: ClickData) -> None:
    """
    Record one click: insert the event and bump the counter atomically.

    Raises:
        StorageUnavailable: if the transaction failed; nothing was written
    """
    try:
        db.execute(
            insert(Click).values(
                link_id=link_id,
                clicked_at=click.clicked_at,
                ip_address=click.ip_address,
                user_agent=click.user_agent,
                referrer=click.referrer,
            )
        )
        db.execute(
            update(Link)
            .where(Link.id == link_id)
            .values(clicks_count=Link.clicks_count + 1, updated_at=utcnow())
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageUnavailable("Failed to record click") from e


def delete_link(db: Session, link_id: int, owner_id: int) -> None:
    """Delete an owned link together with its click log."""
    result = db.execute(
        delete(Link).where(Link.id == link_id, Link.owner_id == owner_id)
    )

    if result.rowcount == 0:
        db.rollback()
        raise LinkNotFound()

    db.commit()
