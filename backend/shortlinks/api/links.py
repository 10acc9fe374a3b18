import math
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from ..config import settings
from ..core.limiter import limiter, user_or_remote_address
from ..core.security import get_current_user, get_optional_user
from ..database import get_db
from ..models import Link, User
from ..schemas.link import LinkCreate, LinkDetail, LinkList, LinkResponse
from ..services import link_store
from ..services.analytics import serialize_click
from ..services.links import format_short_url, shorten_url

router = APIRouter(prefix="/urls")

DETAIL_CLICKS = 50


def link_to_dict(link: Link) -> dict:
    return {
        "id": link.id,
        "original_url": link.original_url,
        "short_code": link.short_code,
        "short_url": format_short_url(link.short_code),
        "custom_slug": link.custom_slug,
        "click_count": link.clicks_count,
        "created_at": link.created_at,
        "updated_at": link.updated_at,
        "expires_at": link.expires_at,
    }


@router.post("/shorten", response_model=LinkResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.RATE_LIMIT_SHORTEN, key_func=user_or_remote_address)
def create_short_link(
    request: Request,
    link_data: LinkCreate,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user)
):
    """
    Create a short link.

    Anonymous when no valid token is sent. Rate limited per account, or per
    client address for anonymous callers.
    """
    link = shorten_url(
        db,
        link_data.original_url,
        custom_slug=link_data.custom_slug,
        owner_id=current_user.id if current_user else None,
    )

    return link_to_dict(link)


@router.get("/my", response_model=LinkList)
def get_my_links(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """List the caller's links, newest first."""
    links, total = link_store.list_by_owner(db, current_user.id, page=page, limit=limit)

    return {
        "items": [link_to_dict(link) for link in links],
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit),
    }


@router.get("/{link_id}", response_model=LinkDetail)
def get_link(
    link_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get one of the caller's links with its last 50 clicks."""
    link = link_store.find_by_id(db, link_id, current_user.id)

    data = link_to_dict(link)
    data["clicks"] = [serialize_click(click) for click in link.clicks[-DETAIL_CLICKS:]]

    return data


@router.delete("/{link_id}")
def delete_link(
    link_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete one of the caller's links and its click history."""
    link_store.delete_link(db, link_id, current_user.id)

    return {"message": "URL deleted successfully"}
