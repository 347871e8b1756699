"""Error taxonomy shared by the store, the mirror adapter and the HTTP layer.

Local mutators never raise; these exceptions only cross boundaries where a
caller has to be told something went wrong (HTTP handlers, session start,
remote calls).
"""

from __future__ import annotations


class VocaAidError(Exception):
    """Base class; ``status_code`` is what the HTTP layer answers with."""

    status_code: int = 500
    default_message: str = "Unexpected error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(VocaAidError):
    status_code = 400
    default_message = "Invalid input"


class EmptySelectionError(ValidationError):
    default_message = "No words match the selected conditions"


class InvalidImportError(ValidationError):
    default_message = "Invalid file format"


class MissingRemoteReferenceError(ValidationError):
    default_message = "Remote page ID is required"


class ConfirmationRequired(VocaAidError):
    """A destructive action was requested without explicit confirmation."""

    status_code = 409
    default_message = "Confirmation required"


class NotFoundError(VocaAidError):
    status_code = 404
    default_message = "Not found"


class PersistenceReadError(VocaAidError):
    """Stored content could not be decoded; recovered inside the store."""

    default_message = "Stored data is unreadable"


class TransportError(VocaAidError):
    """A call to the remote mirror failed.

    ``created`` carries the pages a bulk push made before it stopped
    (word id -> remote id) so the caller can still record them.
    """

    default_message = "Remote service call failed"

    def __init__(
        self, message: str | None = None, *, created: dict[str, str] | None = None
    ) -> None:
        super().__init__(message)
        self.created = dict(created or {})
