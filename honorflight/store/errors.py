"""Error taxonomy for the document store layer.

Single-document flows let these propagate and the HTTP layer maps them 1:1
to status codes. Batch flows (allocator, pairing sync) turn everything except
StoreSessionError into per-item error strings.
"""

from __future__ import annotations


class StoreError(Exception):
    """Base class for document store failures."""


class StoreSessionError(StoreError):
    """Authentication could not be (re)established within the retry budget."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(
            f"Database session could not be established after {attempts} attempts. Please try again."
        )


class StoreRequestError(StoreError):
    """The store answered with a non-success status."""

    def __init__(self, status_code: int, reason: str):
        self.status_code = status_code
        self.reason = reason
        super().__init__(reason)


class DocumentConflictError(StoreRequestError):
    """The store rejected a write because the revision token is stale."""


class DocumentNotFoundError(StoreError):
    """A referenced document does not exist."""

    def __init__(self, doc_id: str, kind: str = "Document"):
        self.doc_id = doc_id
        self.kind = kind
        super().__init__(f"{kind} not found")


class WrongDocumentKindError(StoreError):
    """A fetched document is not of the expected participant type."""

    def __init__(self, doc_id: str, expected: str, actual: str | None = None):
        self.doc_id = doc_id
        self.expected = expected
        self.actual = actual
        super().__init__(f"Document is not a {expected.lower()} record")


class ValidationFailedError(StoreError):
    """A document failed the validation gate; carries every field message."""

    def __init__(self, messages: list[str]):
        self.messages = list(messages)
        super().__init__("Validation failed: " + "; ".join(self.messages))
