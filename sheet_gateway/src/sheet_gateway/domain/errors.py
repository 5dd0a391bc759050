"""Error taxonomy for the gateway.

Handler-level failures are not transport failures: every error here knows how
to render itself as the ``{"error": ..., "sheet": ...}`` body that callers
inspect. Only MalformedPayloadError is raised before a handler runs, while the
request itself is being decoded.
"""

from __future__ import annotations

from typing import Any


class GatewayError(Exception):
    """Base class for all gateway errors."""

    def __init__(self, message: str, sheet: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.sheet = sheet

    def to_body(self) -> dict[str, Any]:
        """Render the structured error body."""
        body: dict[str, Any] = {"error": self.message}
        if self.sheet:
            body["sheet"] = self.sheet
        return body


class ValidationError(GatewayError):
    """A mutating action is missing its id or payload."""


class DuplicateIdError(ValidationError):
    """A create supplied an id that already exists in the collection."""


class NotFoundError(GatewayError):
    """The targeted id (or row) does not exist."""


class MalformedPayloadError(GatewayError):
    """The encoded payload could not be decoded."""


class UnknownActionError(GatewayError):
    """The requested action has no handler."""

    def __init__(self, action: str | None = None) -> None:
        super().__init__("Invalid action")
        self.action = action


class UnauthorizedError(GatewayError):
    """The shared secret is configured and the request did not match it."""

    def __init__(self) -> None:
        super().__init__("Unauthorized")


class BatchStepError(GatewayError):
    """A batch step failed; earlier steps stay committed."""

    def __init__(self, index: int, message: str, sheet: str | None = None) -> None:
        super().__init__(f"Operation {index} failed: {message}", sheet)
        self.index = index
        self.reason = message
