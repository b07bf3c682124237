"""
zkpay custom exception hierarchy
"""

from typing import Any


class ZkPayError(Exception):
    """zkpay base exception"""

    pass


class ValidationError(ZkPayError):
    """Caller-supplied parameters are malformed"""

    pass


class ConfigurationError(ZkPayError):
    """Configuration-related error"""

    pass


class ApiError(ZkPayError):
    """Request to the zkpay service failed"""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_type: str | None = None,
        request_id: str | None = None,
        details: Any = None,
    ):
        self.status_code = status_code
        self.error_type = error_type
        self.request_id = request_id
        self.details = details
        super().__init__(message)


class RequestTimeoutError(ApiError):
    """Request aborted after the configured timeout"""

    def __init__(self, timeout: int, request_id: str | None = None):
        self.timeout = timeout
        super().__init__(
            f"Request timed out after {timeout}ms",
            status_code=408,
            error_type="TimeoutError",
            request_id=request_id,
        )


class AuthenticationError(ZkPayError):
    """Signing or token exchange failed"""

    pass


class DecryptionError(ZkPayError):
    """Persisted credential could not be decrypted"""

    pass


class TokenResolutionError(ZkPayError):
    """Token metadata could not be resolved"""

    pass
