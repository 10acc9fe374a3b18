from urllib.parse import urlparse

MAX_URL_LENGTH = 2048

UNKNOWN = "unknown"


def is_valid_url(url: str) -> tuple[bool, str]:
    """
    Validate that a URL is absolute and uses http or https.

    Args:
        url: The URL to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not url.strip():
        return False, "URL cannot be empty"

    if len(url) > MAX_URL_LENGTH:
        return False, f"URL is too long (max {MAX_URL_LENGTH} characters)"

    try:
        result = urlparse(url)
        # Accessing .port validates the port component
        result.port
    except ValueError as e:
        return False, f"Invalid URL: {e}"

    # Only http and https
    if result.scheme not in ("http", "https"):
        return False, "Please provide a valid URL with http:// or https://"

    # Must have a host
    if not result.hostname:
        return False, "Invalid URL format"

    if any(ch.isspace() for ch in url):
        return False, "URL cannot contain whitespace"

    return True, ""


def get_client_ip(request) -> str:
    """
    Get client IP address from request.

    Args:
        request: FastAPI request object

    Returns:
        Client IP address, or "unknown"
    """
    # Check for X-Forwarded-For header (if behind proxy)
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # Take the first IP in the chain
        first = forwarded.split(",")[0].strip()
        if first:
            return first[:45]

    # Otherwise use client.host
    return request.client.host if request.client and request.client.host else UNKNOWN


def get_user_agent(request) -> str:
    return (request.headers.get("user-agent") or UNKNOWN)[:512]


def get_referrer(request) -> str:
    return (request.headers.get("referer") or "")[:512]
