"""HTTP status classification helpers."""


def is_http_success(status_code: int) -> bool:
    """Return True for the 2xx family."""
    return 200 <= status_code < 300


def is_http_error(status_code: int) -> bool:
    """Return True for client (4xx) and server (5xx) errors."""
    return 400 <= status_code < 600
