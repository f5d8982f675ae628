"""Exception taxonomy for Solr indexing.

Configuration problems and search client failures are raised to the
caller. Extraction problems are recoverable and are reported through
an ``ExtractionLog`` instead of being raised.
"""

from __future__ import annotations

from typing import Any


class SolrIndexError(Exception):
    """Base class for all indexing errors."""


class ConfigError(SolrIndexError):
    """Raised when an addon config source is malformed.

    Attributes:
        source: Path or name of the offending source, if known.
    """

    def __init__(self, message: str, source: str | None = None) -> None:
        self.source = source
        if source:
            message = f"{source}: {message}"
        super().__init__(message)


class ExtractionError(SolrIndexError):
    """A metadata value failed its expected numeric shape.

    Never raised by the mapper: instances are handed to an
    ``ExtractionLog`` and the document build continues.

    Attributes:
        record_id: ID of the offending record.
        field: Target facet name (e.g. ``height``).
        value: The value left after prefix and unit stripping.
        admin_url: Admin address of the record, for the diagnostic.
    """

    def __init__(
        self,
        record_id: int,
        field: str,
        value: str,
        admin_url: str = "",
    ) -> None:
        self.record_id = record_id
        self.field = field
        self.value = value
        self.admin_url = admin_url
        super().__init__(f'"{value}" is not a valid {field} (record #{record_id})')

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "record_id": self.record_id,
            "field": self.field,
            "value": self.value,
            "admin_url": self.admin_url,
            "message": str(self),
        }


class SolrClientError(SolrIndexError):
    """Raised when Solr rejects a request.

    Attributes:
        status_code: HTTP status, or None for transport failures.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class SolrConnectionError(SolrClientError):
    """Raised when Solr cannot be reached at all."""


class SolrUnavailableError(SolrConnectionError):
    """Raised when Solr stayed unreachable for every attempt of a call.

    Attributes:
        url: Base URL of the core that was called.
        operation: Client operation that failed (e.g. ``commit``).
        attempts: Number of attempts made.
        last_error: Transport error from the final attempt.
    """

    def __init__(
        self,
        url: str,
        operation: str,
        attempts: int,
        last_error: SolrConnectionError,
    ) -> None:
        self.url = url
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"{operation} on {url} failed after {attempts} attempt(s): {last_error}")
