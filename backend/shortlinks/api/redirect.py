from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from ..database import get_db
from ..services.link_store import ClickData
from ..services.links import resolve_and_track, resolve_link
from ..utils.validators import get_client_ip, get_referrer, get_user_agent

router = APIRouter()

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate, max-age=0",
    "Pragma": "no-cache",
    "Expires": "0",
}


@router.head("/{short_code}")
def redirect_head(short_code: str, db: Session = Depends(get_db)):
    """Resolve without recording a click."""
    link = resolve_link(db, short_code)

    return RedirectResponse(url=link.original_url, status_code=302, headers=NO_CACHE_HEADERS)


@router.get("/{short_code}")
def redirect_to_url(
    short_code: str,
    request: Request,
    db: Session = Depends(get_db)
) -> Response:
    """
    Redirect to the original URL from short code.

    Records click statistics; a failure to record does not block the redirect.
    """
    click = ClickData(
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request),
        referrer=get_referrer(request),
    )

    target = resolve_and_track(db, short_code, click)

    # 302 so that every visit reaches us
    return RedirectResponse(url=target, status_code=302, headers=NO_CACHE_HEADERS)
