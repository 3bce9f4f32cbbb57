"""Counter store error taxonomy."""

from __future__ import annotations

# Appwrite reports unknown attributes on create with this error type.
_SCHEMA_ERROR_TYPES = frozenset({"document_invalid_structure"})
_SCHEMA_MESSAGE_MARKER = "Unknown attribute"


class CounterStoreError(Exception):
    """Transport or store-side failure (network, non-2xx, validation)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        error_type: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_type = error_type


class CounterStoreConfigError(Exception):
    """Required store connection parameters are missing."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__(f"Missing counter store settings: {', '.join(missing)}")
        self.missing = missing


def is_schema_mismatch(error: BaseException) -> bool:
    """True when a create was rejected because the collection lacks a field.

    Structured error types win; the message substring is the fallback for
    stores (or older Appwrite versions) that only report free text.
    """
    if not isinstance(error, CounterStoreError):
        return _SCHEMA_MESSAGE_MARKER in str(error)
    if error.error_type is not None and error.error_type not in _SCHEMA_ERROR_TYPES:
        return False
    return _SCHEMA_MESSAGE_MARKER in error.message
