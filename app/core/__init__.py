"""
Core Application - Infrastructure & Base Classes

Shared building blocks for the domain apps (authentication, chat, contacts).
Business logic does not live here.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Standard result wrapper for success/failure handling

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - PermissionDeniedError, NotFoundError

Handlers (import from core.handlers):
    - api_exception_handler: DRF EXCEPTION_HANDLER

Views (import from core.views):
    - health_check: Database/cache liveness check

Note:
    Models and handlers are NOT imported here to avoid AppRegistryNotReady
    errors. Import them directly from their modules.
"""

# Services (no Django model dependencies)
from .services import BaseService, ServiceResult

# Exceptions (no Django or DRF dependencies)
from .exceptions import BaseApplicationError, NotFoundError, PermissionDeniedError

__all__ = [
    # Services
    "BaseService",
    "ServiceResult",
    # Exceptions
    "BaseApplicationError",
    "NotFoundError",
    "PermissionDeniedError",
]
