from typing import List, Optional


class ServiceError(RuntimeError):
    """Recoverable service error; carries the HTTP status the API maps it to."""

    status_code = 500

    def __init__(self, message: str, details: Optional[List[dict]] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> dict:
        payload = {"success": False, "error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(ServiceError):
    status_code = 400


class AuthenticationRequired(ServiceError):
    status_code = 401

    def __init__(self, message: str = "Authentication required", details=None):
        super().__init__(message, details)


class AuthorizationDenied(ServiceError):
    status_code = 403


class NotFound(ServiceError):
    status_code = 404


class AlreadyGone(ServiceError):
    status_code = 410
