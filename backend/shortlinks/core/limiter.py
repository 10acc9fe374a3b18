import logging

from fastapi import HTTPException, Request, status
from limits import parse
from slowapi import Limiter
from slowapi.util import get_remote_address

from ..config import settings
from .security import decode_token

logger = logging.getLogger(__name__)


def user_or_remote_address(request: Request) -> str:
    """Rate limit key: the account for authenticated callers, the client address otherwise."""
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and token:
        user_id = decode_token(token)
        if user_id is not None:
            return f"user:{user_id}"

    return get_remote_address(request)


# Shared by main.py (app.state, SlowAPIMiddleware) and the route decorators.
# The application limit is one budget per client across every route
# the middleware sees.
limiter = Limiter(
    key_func=get_remote_address,
    application_limits=[settings.RATE_LIMIT_DEFAULT],
    enabled=settings.RATE_LIMIT_ENABLED,
)


class FailedAttemptLimit:
    """
    A limit that only failed attempts count against.

    Call ``check`` before doing the work and ``record_failure`` when the
    attempt is rejected. Successful logins never use up the budget.
    """

    def __init__(self, limit_value: str, scope: str):
        self.item = parse(limit_value)
        self.scope = scope

    def check(self, request: Request) -> None:
        if not limiter.enabled:
            return

        key = get_remote_address(request)
        if not limiter.limiter.test(self.item, key, self.scope):
            logger.warning("Too many failed %s attempts from %s", self.scope, key)
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many authentication attempts, please try again later",
            )

    def record_failure(self, request: Request) -> None:
        if limiter.enabled:
            limiter.limiter.hit(self.item, get_remote_address(request), self.scope)


# register and login share one budget per client address
auth_attempts = FailedAttemptLimit(settings.RATE_LIMIT_AUTH, "auth")
