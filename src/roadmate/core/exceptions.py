"""
Custom exceptions for the Roadmate client core.

Exception Hierarchy:
    RoadmateError (base)
    ├── ValidationError (client-side precondition failures)
    └── GatewayError (remote API failures)
        ├── ServerError (any non-2xx response, or no response at all)
        └── NotFound (target entity already deleted server-side)

Validation errors are raised before any network call is made and are never
sent to the gateway. Gateway errors are surfaced to the caller once the
optimistic local change has been rolled back; nothing is retried.

Example:
    >>> from roadmate.core.exceptions import ServerError
    >>> try:
    ...     raise ServerError(502, "bad gateway", route="/me/projects")
    ... except ServerError as e:
    ...     print(e.code, e.context["route"])
    502 /me/projects
"""


class RoadmateError(Exception):
    """
    Base exception for all Roadmate errors.

    Attributes:
        message: Human-readable error message
        context: Optional dictionary of additional context
    """

    def __init__(self, message: str, **context: object) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        return self.message


class ValidationError(RoadmateError):
    """
    A client-side precondition failed (blank name, unknown role key, ...).

    Attributes:
        field: Name of the offending input, when there is one
    """

    def __init__(self, message: str, field: str | None = None, **context: object) -> None:
        super().__init__(message, field=field, **context)
        self.field = field


class GatewayError(RoadmateError):
    """Base exception for failures reported by the remote API."""

    pass


class ServerError(GatewayError):
    """
    Any non-2xx response not otherwise classified.

    Transport failures (connection refused, timeout) carry ``code == -1``
    because no HTTP status was ever received.

    Attributes:
        code: HTTP status code, or -1 when no response arrived
        body: Raw response body (or the transport error message)
    """

    def __init__(self, code: int, body: str = "", **context: object) -> None:
        message = f"Server error {code}: {body}" if body else f"Server error {code}"
        super().__init__(message, code=code, **context)
        self.code = code
        self.body = body


class NotFound(GatewayError):
    """
    The target entity no longer exists on the server.

    Callers treat this as "already gone": the local copy is discarded.

    Attributes:
        entity_id: Identifier of the missing entity
    """

    def __init__(self, entity_id: str, message: str | None = None, **context: object) -> None:
        super().__init__(message or f"{entity_id} not found", entity_id=entity_id, **context)
        self.entity_id = entity_id
