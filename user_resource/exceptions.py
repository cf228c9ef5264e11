"""
Custom exception classes for the user resource service.

Each exception carries the HTTP status it maps to, so the application's
exception handler can render it without a lookup table.
"""

from typing import Any, Dict, Optional


class UserServiceException(Exception):
    """Base exception for all user resource errors."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ) -> None:
        self.message = message
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class UserNotFoundException(UserServiceException):
    """Raised when a user identifier is not in the store."""

    status_code = 404

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(
            message="User could not be found.",
            details={"user_id": user_id},
        )


class InvalidUserPayloadException(UserServiceException):
    """
    Raised when a request body cannot be decoded into a user record.

    Defaults to 400. Callers may pass another status to reproduce the
    legacy mapping (404 on update, 500 on create).
    """

    status_code = 400

    def __init__(
        self,
        reason: str,
        media_type: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        self.reason = reason
        self.media_type = media_type
        super().__init__(
            message=f"Invalid user payload: {reason}",
            details={"reason": reason, "media_type": media_type},
            status_code=status_code,
        )


class UnsupportedMediaTypeException(UserServiceException):
    """Raised when the request Content-Type is neither JSON nor XML."""

    status_code = 415

    def __init__(self, media_type: str) -> None:
        self.media_type = media_type
        super().__init__(
            message=f"Unsupported media type: {media_type}",
            details={"media_type": media_type},
        )


class NotAcceptableException(UserServiceException):
    """Raised when the Accept header admits no producible media type."""

    status_code = 406

    def __init__(self, accept: str) -> None:
        self.accept = accept
        super().__init__(
            message=f"Cannot produce a response acceptable for: {accept}",
            details={"accept": accept},
        )
