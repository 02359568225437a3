"""
Services Module - Pluggable backing services.

The API layer only talks to the interfaces defined here. The shipped
implementations are in-memory mocks (``stratagem.services.mock``); a real
deployment registers database-backed implementations under the same names.
"""

from .errors import (
    ServiceError,
    NotFoundError,
    PermissionDeniedError,
    InvalidOperationError,
    ConflictError,
    NotSupportedError,
    ServiceConfigurationError,
)
from .registry import (
    REQUIRED_SERVICES,
    ServiceContext,
    ServiceRegistry,
    build_mock_registry,
)
from .store import Store, InMemoryStore

__all__ = [
    # Errors
    "ServiceError",
    "NotFoundError",
    "PermissionDeniedError",
    "InvalidOperationError",
    "ConflictError",
    "NotSupportedError",
    "ServiceConfigurationError",
    # Registry
    "REQUIRED_SERVICES",
    "ServiceContext",
    "ServiceRegistry",
    "build_mock_registry",
    # Storage
    "Store",
    "InMemoryStore",
]
