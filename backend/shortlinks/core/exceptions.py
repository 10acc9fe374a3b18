from typing import Optional


class ShortLinkError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500
    detail = "Internal server error"

    def __init__(self, detail: Optional[str] = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class InvalidInput(ShortLinkError):
    """Raised when a URL or other field is malformed."""

    status_code = 400
    detail = "Invalid input"


class InvalidSlug(InvalidInput):
    """Raised when a custom slug breaks the charset/length rules."""

    detail = "Custom slug must be 3-50 characters of letters, digits, hyphens and underscores"


class SlugTaken(ShortLinkError):
    """Raised when a custom slug is already used by another link."""

    status_code = 409
    detail = "Custom slug is already taken"


class DuplicateCode(ShortLinkError):
    """Raised by the store when an insert hits the short code unique index."""

    status_code = 409
    detail = "Short code already exists"


class LinkNotFound(ShortLinkError):
    """Raised when a link is absent or not owned by the caller."""

    status_code = 404
    detail = "Short URL not found"


class LinkExpired(ShortLinkError):
    """Raised when a link exists but its expiry has passed."""

    status_code = 410
    detail = "Short URL has expired"


class StorageUnavailable(ShortLinkError):
    """Raised when the database rejects or fails an operation."""

    status_code = 503
    detail = "Storage unavailable"


class CodeAllocationError(StorageUnavailable):
    """Raised when no unused short code was found within the attempt bound."""

    detail = "Unable to generate unique short code"
