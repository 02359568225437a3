"""
Service errors - Framework-agnostic failure taxonomy.

Services raise these; the API layer maps each family to an HTTP status and
renders the standard error envelope. Every error carries a machine-readable
``code`` that is returned to the client unchanged.

Families:
- NotFoundError          unknown identifier                 (404)
- PermissionDeniedError  wrong actor for the operation      (403)
- InvalidOperationError  operation not valid in this state  (400)
- ConflictError          duplicate/already-done operation   (400)
- NotSupportedError      capability not offered             (501)
"""

from __future__ import annotations
from typing import Any, Optional


class ServiceError(Exception):
    """Base class for expected service failures."""
    code = "SERVICE_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details


class NotFoundError(ServiceError):
    code = "NOT_FOUND"


class PermissionDeniedError(ServiceError):
    code = "FORBIDDEN"


class InvalidOperationError(ServiceError):
    code = "INVALID_OPERATION"


class ConflictError(ServiceError):
    code = "CONFLICT"


class NotSupportedError(ServiceError):
    code = "NOT_SUPPORTED"


class ServiceConfigurationError(RuntimeError):
    """Raised when the service registry is incomplete or misused."""
