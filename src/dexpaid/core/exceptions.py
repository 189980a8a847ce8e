"""DexPaid exception hierarchy.

This module defines the base exception class and specialized exceptions
for the failure modes of a monitoring pass.
"""


class DexPaidError(Exception):
    """Base exception for all DexPaid errors.

    All custom exceptions in DexPaid should inherit from this class
    to enable consistent error handling and logging.
    """

    pass


class ConfigurationError(DexPaidError):
    """Raised when configuration is invalid or missing.

    Example:
        raise ConfigurationError("Missing required env var: DISCORD_WEBHOOK_URL")
    """

    pass


class ExternalServiceError(DexPaidError):
    """Raised when an external service call fails.

    Attributes:
        service: Name of the external service that failed.
        status_code: HTTP status code if available, None otherwise.

    Example:
        raise ExternalServiceError(service="discord", message="Rate limited", status_code=429)
    """

    def __init__(
        self,
        service: str,
        message: str,
        status_code: int | None = None,
    ) -> None:
        self.service = service
        self.status_code = status_code
        super().__init__(f"{service}: {message}")


class FetchError(ExternalServiceError):
    """Raised when an upstream request does not return a success status.

    Also raised for transport failures (timeouts, refused connections),
    in which case ``status_code`` is None.

    Attributes:
        reason: HTTP reason phrase (e.g. "Not Found") or transport error text.

    Example:
        raise FetchError(service="dexscreener", reason="Bad Gateway", status_code=502)
    """

    def __init__(
        self,
        service: str,
        reason: str,
        status_code: int | None = None,
        path: str | None = None,
    ) -> None:
        self.reason = reason
        self.path = path
        message = f"{path}: {reason}" if path else reason
        super().__init__(service=service, message=message, status_code=status_code)


class EmptyResultError(DexPaidError):
    """Raised when the pairs endpoint returns no pairs for a token.

    Attributes:
        token_address: The token that has no trading pairs.
    """

    def __init__(self, token_address: str) -> None:
        self.token_address = token_address
        super().__init__(f"No trading pairs found for {token_address}")


class MappingError(DexPaidError):
    """Raised when an upstream response does not have the expected shape.

    Example:
        raise MappingError("orders: expected a JSON array, got dict")
    """

    pass
