"""
Errors raised by the Stream client.

Every failure the client detects itself is one of these. Transport
failures (connection refused, timeouts) come straight from requests
and are not wrapped.
"""

from typing import Optional


class StreamError(Exception):
    """Base class for all Stream client errors."""
    pass


class InvalidCredentials(StreamError):
    """Raised when key, email, or both account and zone are missing."""
    pass


class InvalidFile(StreamError):
    """Raised when a file cannot be opened or has no name, size or stream."""
    pass


class InvalidOrigins(StreamError):
    """Raised when an allowed-origins value looks like a URL path."""
    pass


class OperationFailed(StreamError):
    """
    Raised when Cloudflare answers with an unexpected status code.
    
    Keeps the status and body around so callers can log or surface
    the Cloudflare error payload.
    """
    
    def __init__(
        self,
        operation: str,
        status_code: Optional[int] = None,
        expected_status: Optional[int] = None,
        body: str = "",
    ) -> None:
        self.operation = operation
        self.status_code = status_code
        self.expected_status = expected_status
        self.body = body
        
        message = f"{operation} failed"
        if status_code is not None:
            message += f" with status {status_code}"
        if expected_status is not None:
            message += f" (expected {expected_status})"
        super().__init__(message)
