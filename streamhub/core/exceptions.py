"""
Domain errors.

Services raise these; the handler registered in main.py turns them into
JSON responses with the error's status code.
"""
from typing import Any, Dict, Optional


class StreamHubError(Exception):
    status_code = 400
    error_code = "STREAMHUB_ERROR"

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "detail": self.message,
            "error_code": self.error_code,
            "context": self.context,
        }


class ValidationError(StreamHubError):
    status_code = 400
    error_code = "VALIDATION_ERROR"


class DuplicateTitle(ValidationError):
    error_code = "DUPLICATE_TITLE"

    def __init__(self, title: str):
        super().__init__("Content with this title already exists", context={"title": title})


class DuplicateUser(ValidationError):
    error_code = "DUPLICATE_USER"


class InvalidStateTransition(ValidationError):
    status_code = 409
    error_code = "INVALID_STATE_TRANSITION"

    def __init__(self, entity: str, current: Any, requested: Any):
        current = getattr(current, "value", current)
        requested = getattr(requested, "value", requested)
        super().__init__(
            f"{entity} cannot move from {current} to {requested}",
            context={"entity": entity, "current": current, "requested": requested},
        )


class ActiveSubscriptionExists(ValidationError):
    status_code = 409
    error_code = "ACTIVE_SUBSCRIPTION_EXISTS"

    def __init__(self, user_id: Any):
        super().__init__(
            "User already holds a live subscription",
            context={"user_id": str(user_id)},
        )


class NotFound(StreamHubError):
    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(
            f"{resource} not found with ID: {resource_id}",
            context={"resource": resource, "id": str(resource_id)},
        )


class AppendOnlyViolation(RuntimeError):
    """Raised when a ledger or log row is about to be updated or deleted."""


class ConcurrentUpdate(StreamHubError):
    status_code = 409
    error_code = "CONCURRENT_UPDATE"

    def __init__(self, entity: str, entity_id: Any = None):
        super().__init__(
            f"{entity} was modified by another request, retry",
            context={"entity": entity, "id": str(entity_id) if entity_id else None},
        )
