"""Domain Ports - Ingestion Contract and Error Types.

Adapters that read encounter rows from the outside world implement
IngestionPort. The normalization core only ever receives RawRecord objects
and never learns which file format or driver produced them.

Data Quality Impact:
    - Source-level failures (missing file, unreadable format) raise
      IngestionError subclasses and stop the run
    - Row-level failures travel as failed Results, so one bad row is counted
      and reported instead of aborting the batch

Architecture:
    - Abstract contract only; no infrastructure imports
    - Adapters stream rows through an iterator
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic, Iterator, Optional, TypeVar, Union

from src.domain.golden_record import RawRecord

T = TypeVar('T')


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of reading one row: a value, or a description of what went wrong.

    Attributes:
        success: Whether a value was produced
        value: Produced value (None on failure)
        error: Failure message (None on success)
        error_type: Exception class name of the failure
        error_details: Where the failure happened (source, row_number)

    Example:
        ```python
        for result in adapter.ingest("encounters.csv"):
            if result.is_success():
                batch.append(result.value)
            else:
                logger.warning(result.error, extra=result.error_details)
        ```
    """

    success: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    error_details: Optional[dict] = None

    @classmethod
    def success_result(cls, value: T) -> 'Result[T]':
        return cls(success=True, value=value)

    @classmethod
    def failure_result(
        cls,
        error: Union[str, Exception],
        error_type: Optional[str] = None,
        error_details: Optional[dict] = None
    ) -> 'Result[T]':
        """Wrap a failure.

        Parameters:
            error: Message, or the exception that caused the failure
            error_type: Overrides the name taken from the exception class
            error_details: Location of the failure

        Returns:
            Result: Failed result carrying no value
        """
        if isinstance(error, Exception):
            message, kind = str(error), type(error).__name__
        else:
            message, kind = error, "UnknownError"

        return cls(
            success=False,
            error=message,
            error_type=error_type or kind,
            error_details=error_details or {},
        )

    def is_success(self) -> bool:
        return self.success

    def is_failure(self) -> bool:
        return not self.success


class IngestionError(Exception):
    """Raised by adapters when a source cannot be read as a whole.

    The normalization core itself never raises: unrecognised values resolve
    to fallbacks instead.
    """


class TransformationError(IngestionError):
    """A single source row could not be turned into a RawRecord.

    Attributes:
        source: Source the row came from
        row_number: 1-based data row number within the source
    """

    def __init__(self, message: str, source: Optional[str] = None, row_number: Optional[int] = None):
        super().__init__(message)
        self.source = source
        self.row_number = row_number


class SourceNotFoundError(IngestionError):
    """The source path does not exist."""

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.source = source


class UnsupportedSourceError(IngestionError):
    """No adapter can read the source, or the chosen adapter rejected it.

    Attributes:
        source: Offending source
        adapter: Name of the adapter that gave up, when one was chosen
    """

    def __init__(self, message: str, source: Optional[str] = None, adapter: Optional[str] = None):
        super().__init__(message)
        self.source = source
        self.adapter = adapter


class IngestionPort(ABC):
    """Contract for adapters that feed raw encounter rows to the pipeline.

    Adapters must:
        - yield one Result per source row, in source order
        - pass field values through verbatim (cleaning belongs to the core)
        - report unreadable rows as failed Results rather than raising

    Example Usage:
        ```python
        adapter = CSVIngester()
        batch = [r.value for r in adapter.ingest("data.csv") if r.is_success()]
        dataset = normalize_and_deduplicate(batch)
        ```
    """

    @abstractmethod
    def ingest(self, source: str) -> Iterator[Result[RawRecord]]:
        """Stream the rows of a source.

        Parameters:
            source: File path or other source identifier

        Yields:
            Result[RawRecord]: One result per row

        Raises:
            SourceNotFoundError: If the source does not exist
            UnsupportedSourceError: If the source cannot be read by this adapter
        """

    @abstractmethod
    def can_ingest(self, source: str) -> bool:
        """Return True if this adapter handles the given source."""

    def get_source_info(self, source: str) -> Optional[dict]:
        """Describe the source (size, format, ...); None when unknown."""
        return None
