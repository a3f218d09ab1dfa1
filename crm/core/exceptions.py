"""
Platform-wide exception hierarchy.

Services raise these types; ``crm.blueprints.register_error_handlers``
maps each of them to one HTTP status so every blueprint answers the same
way.

Usage:
    from crm.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Client", resource_id=client_id)
    raise ValidationError("nom is required", details={"nom": "required"})
"""


class NotFoundError(Exception):
    """Raised when a requested resource does not exist for the caller.

    Used for both genuinely missing rows and rows hidden by role visibility
    (a teleprospecteur asking for another user's client). A 403 would confirm
    that the row exists; a 404 does not.

    Args:
        resource: Human-readable entity name (e.g. "Client", "RendezVous").
        resource_id: The id that was looked up. Logged, not sent to the caller.
    """

    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        super().__init__(msg)


class ValidationError(Exception):
    """Raised when input fails a business rule in the service layer.

    Maps to HTTP 422.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown, keyed by field name.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class ConflictError(Exception):
    """Raised when an operation would duplicate a unique value.

    Maps to HTTP 409.
    """

    def __init__(self, resource: str, field: str, value: str | None = None) -> None:
        self.resource = resource
        self.field = field
        self.value = value
        msg = f"{resource} with {field}={value!r} already exists"
        super().__init__(msg)


class AuthenticationError(Exception):
    """Raised when credentials are wrong or the account cannot log in.

    Maps to HTTP 401. The message never says which part was wrong.
    """

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)


class PermissionDeniedError(Exception):
    """Raised when the caller may see a resource but not change it.

    Maps to HTTP 403.
    """

    def __init__(self, message: str = "Insufficient permissions") -> None:
        super().__init__(message)
