__all__ = [
    "validate_url",
    "url_path_of",
    "describe_error",
    "format_duration",
]

import httpx


def validate_url(value: str) -> str:
    """
    Check that a string can be parsed into an absolute URL.

    Args:
        value: URL to check

    Returns:
        the URL as it was passed in

    Raises:
        ValueError: if the URL is malformed or relative
    """
    try:
        url = httpx.URL(value)
    except httpx.InvalidURL as e:
        raise ValueError(f"malformed URL `{value}`: {e}") from e

    if not url.is_absolute_url:
        raise ValueError(f"`{value}` is not an absolute URL, it must have a scheme and a host")

    return value


def url_path_of(url: str) -> str:
    # keep percent-encoding intact, drop the query
    return httpx.URL(url).raw_path.decode("ascii").split("?", 1)[0]


def describe_error(e: BaseException) -> str:
    """
    Render an exception into a single human-readable line.

    Args:
        e: exception to describe

    Returns:
        exception type name followed by its message, or just the type name if there is no message
    """
    message = str(e).strip()

    if message == "":
        return type(e).__name__

    return f"{type(e).__name__}: {message}"


def format_duration(secs: float) -> str:
    # pick the largest unit that keeps the integral part non-zero
    if secs >= 1:
        return f"{secs:.3f}s"

    if secs >= 1e-3:
        return f"{secs * 1e3:.3f}ms"

    return f"{secs * 1e6:.3f}µs"
