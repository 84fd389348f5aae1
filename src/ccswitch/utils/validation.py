# ABOUTME: Validation utilities for credential inputs
# ABOUTME: Errors block an add; warnings are only reported
from dataclasses import dataclass
from urllib.parse import urlparse


@dataclass(frozen=True)
class ValidationError:
    """Represents a validation error or warning.

    ABOUTME: Uses frozen dataclass for immutability
    ABOUTME: Severity level distinguishes between blocking errors and warnings
    """
    field: str
    message: str
    severity: str  # 'error' or 'warning'


def is_blank(value: str | None) -> bool:
    """True for None, empty or whitespace-only strings."""
    return not isinstance(value, str) or value.strip() == ""


def validate_url(url: str) -> ValidationError | None:
    """Validate that a URL is properly formatted.

    ABOUTME: Uses urllib.parse for URL parsing
    ABOUTME: Requires HTTP or HTTPS scheme and a host
    ABOUTME: Returns None if URL valid, ValidationError otherwise

    Args:
        url: URL string to validate

    Returns:
        ValidationError if URL invalid, None otherwise
    """
    try:
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https"):
            return ValidationError(
                field="url",
                message=f"URL must use HTTP or HTTPS scheme: {url}",
                severity="error"
            )
        if not parsed.netloc:
            return ValidationError(
                field="url",
                message=f"URL missing host/domain: {url}",
                severity="error"
            )
    except ValueError as e:
        return ValidationError(
            field="url",
            message=f"Invalid URL format '{url}': {e}",
            severity="error"
        )
    return None


def validate_credentials(
    key: str | None,
    url: str | None,
    key_prefix: str | None = None,
) -> list[ValidationError]:
    """Validate the key/url pair used to build a profile.

    ABOUTME: Blank key or url is an error
    ABOUTME: A malformed URL or unexpected key prefix is only a warning

    Args:
        key: API key or auth token
        url: Base URL of the API endpoint
        key_prefix: Conventional key prefix for the platform, if any

    Returns:
        List of ValidationError instances (empty if valid)

    Examples:
        >>> validate_credentials("sk-abc", "https://api.example.com", key_prefix="sk-")
        []
        >>> [e.severity for e in validate_credentials("abc", "", key_prefix="sk-")]
        ['error', 'warning']
    """
    errors: list[ValidationError] = []

    if is_blank(url):
        errors.append(ValidationError(field="url", message="URL cannot be empty", severity="error"))
    else:
        url_error = validate_url(url.strip())
        if url_error:
            # Downgraded: format problems never block an add
            errors.append(ValidationError(
                field=url_error.field,
                message=url_error.message,
                severity="warning"
            ))

    if is_blank(key):
        errors.append(ValidationError(field="key", message="API key cannot be empty", severity="error"))
    elif key_prefix and not key.startswith(key_prefix):
        errors.append(ValidationError(
            field="key",
            message=f'API key usually starts with "{key_prefix}"',
            severity="warning"
        ))

    return sorted(errors, key=lambda e: e.severity != "error")
