"""CSV Data Ingestion Adapter.

This adapter implements the IngestionPort contract for CSV data sources.
It reads messy encounter exports and yields RawRecord objects with every
value passed through verbatim, leaving all cleaning to the normalization core.

Data Quality Impact:
    - Values are read as text; pandas never guesses numeric or date types
    - Empty cells become absent values, matching database CSV import semantics
    - Each row is wrapped in try/except so one bad row cannot stop the run
    - Rejected rows are logged and yielded as Result failures

Architecture:
    - Implements IngestionPort (Hexagonal Architecture)
    - Configurable column mapping via dictionary or header detection
    - Isolated from domain core - only depends on ports and models
    - Chunked reading prevents memory exhaustion
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import pandas as pd
from pydantic import ValidationError as PydanticValidationError

from src.domain.golden_record import RAW_FIELDS, RawRecord
from src.domain.ports import (
    IngestionPort,
    Result,
    SourceNotFoundError,
    TransformationError,
    UnsupportedSourceError,
)

logger = logging.getLogger(__name__)

# Header spellings accepted for each raw field (compared lower-case, trimmed)
FIELD_VARIATIONS: Dict[str, List[str]] = {
    'patient_id': ['patient_id', 'patientid', 'patient id', 'mrn', 'id'],
    'full_name': ['full_name', 'fullname', 'full name', 'name', 'patient_name'],
    'gender': ['gender', 'sex'],
    'date_of_birth': ['date_of_birth', 'dateofbirth', 'dob', 'birth_date', 'birthdate'],
    'phone': ['phone', 'phone_number', 'phonenumber', 'telephone', 'tel', 'mobile'],
    'admission_time': ['admission_time', 'admission', 'admitted_at', 'admission_date'],
    'discharge_time': ['discharge_time', 'discharge', 'discharged_at', 'discharge_date'],
    'vital_type': ['vital_type', 'vitaltype', 'vital'],
    'vital_value': ['vital_value', 'vitalvalue'],
    'lab_test': ['lab_test', 'labtest', 'test'],
    'lab_result': ['lab_result', 'labresult', 'result'],
}


class CSVIngester(IngestionPort):
    """CSV ingestion adapter with configurable column mapping and fail-safe error handling.

    Key Features:
        - Configurable column mapping: Map raw record fields to CSV column names
        - Header detection: Matches common header spellings case-insensitively
        - Fail-safe: Each row wrapped in try/except
        - Streaming: Reads the file in chunks
        - Multiple delimiters: Supports comma, tab, semicolon, pipe

    Column Mapping Format:
        {
            "patient_id": "MRN",
            "full_name": "Patient Name",
            "admission_time": "Admitted",
            ...
        }
    """

    def __init__(
        self,
        column_mapping: Optional[Dict[str, str]] = None,
        delimiter: str = ',',
        chunk_size: int = 10000,
        encoding: str = 'utf-8',
    ):
        """Initialize CSV ingester.

        Parameters:
            column_mapping: Dictionary mapping raw record fields to CSV column names.
                          Fields not listed are auto-detected from the header row.
            delimiter: CSV delimiter character (default: ',', also supports '\t', ';', '|')
            chunk_size: Number of rows read per chunk (default: 10000)
            encoding: File encoding (default: utf-8)
        """
        unknown = set(column_mapping or {}) - set(RAW_FIELDS)
        if unknown:
            raise ValueError(f"Unknown record fields in column mapping: {sorted(unknown)}")
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive. Got: {chunk_size}")

        self.column_mapping = column_mapping or {}
        self.delimiter = delimiter
        self.chunk_size = chunk_size
        self.encoding = encoding
        self.adapter_name = "csv_ingester"

    def can_ingest(self, source: str) -> bool:
        """Check if this adapter can handle the given source.

        Parameters:
            source: Source identifier (file path or URL)

        Returns:
            bool: True if source is a CSV/TSV file, False otherwise
        """
        if not source:
            return False
        return Path(source).suffix.lower() in ('.csv', '.tsv')

    def get_source_info(self, source: str) -> Optional[dict]:
        """Get metadata about the CSV source.

        Parameters:
            source: Source identifier

        Returns:
            Optional[dict]: Metadata dictionary or None if unavailable
        """
        try:
            source_path = Path(source)
            if source_path.exists():
                stat = source_path.stat()
                return {
                    'format': 'csv',
                    'size': stat.st_size,
                    'encoding': self.encoding,
                    'exists': True,
                    'delimiter': self._delimiter_for(source_path),
                }
        except (OSError, ValueError):
            pass

        return None

    def ingest(self, source: str) -> Iterator[Result[RawRecord]]:
        """Ingest CSV rows and yield one Result per row.

        Parameters:
            source: Path to CSV file

        Yields:
            Result[RawRecord]: Success with the raw record, or failure details

        Raises:
            SourceNotFoundError: If source file doesn't exist
            UnsupportedSourceError: If the file is empty, unparseable, or has
                no recognisable columns
        """
        source_path = Path(source)
        if not source_path.exists():
            raise SourceNotFoundError(f"CSV source not found: {source}", source=source)

        delimiter = self._delimiter_for(source_path)

        try:
            chunk_iterator = pd.read_csv(
                source_path,
                chunksize=self.chunk_size,
                delimiter=delimiter,
                dtype=str,
                keep_default_na=False,
                na_values=[''],
                skipinitialspace=False,
                encoding=self.encoding,
            )

            column_mapping: Optional[Dict[str, str]] = None
            row_number = 0
            total_rejected = 0

            for chunk_df in chunk_iterator:
                if column_mapping is None:
                    column_mapping = self._resolve_column_mapping(chunk_df.columns.tolist())
                    if not column_mapping:
                        raise UnsupportedSourceError(
                            f"CSV file {source} has no recognisable columns",
                            source=source,
                            adapter=self.adapter_name
                        )
                    missing = [f for f in RAW_FIELDS if f not in column_mapping]
                    if missing:
                        logger.warning(f"CSV file {source} has no column for: {', '.join(missing)}")

                for row in chunk_df.to_dict(orient='records'):
                    row_number += 1
                    result = self._row_to_result(row, column_mapping, source, row_number)
                    if result.is_failure():
                        total_rejected += 1
                    yield result

            logger.info(
                f"CSV ingestion complete: {source} - "
                f"{row_number - total_rejected} accepted, {total_rejected} rejected"
            )

        except pd.errors.EmptyDataError:
            raise UnsupportedSourceError(
                f"CSV file {source} is empty",
                source=source,
                adapter=self.adapter_name
            )
        except pd.errors.ParserError as e:
            raise UnsupportedSourceError(
                f"CSV file {source} could not be parsed: {str(e)}",
                source=source,
                adapter=self.adapter_name
            )
        except UnicodeDecodeError as e:
            raise UnsupportedSourceError(
                f"CSV file {source} is not valid {self.encoding}: {str(e)}",
                source=source,
                adapter=self.adapter_name
            )

    def read_records(self, source: str) -> List[RawRecord]:
        """Read every successfully parsed row of a source into a list."""
        return [result.value for result in self.ingest(source) if result.is_success()]

    def _delimiter_for(self, source_path: Path) -> str:
        return '\t' if source_path.suffix.lower() == '.tsv' else self.delimiter

    def _resolve_column_mapping(self, headers: List[str]) -> Dict[str, str]:
        """Resolve raw record fields to CSV column names.

        Explicit mappings win; remaining fields are matched against
        FIELD_VARIATIONS. Matching is case-insensitive and ignores
        surrounding whitespace.

        Parameters:
            headers: CSV column names from the header row

        Returns:
            dict: Mapping from raw record field to CSV column name
        """
        normalized_headers = {str(h).lower().strip(): h for h in headers}
        mapping: Dict[str, str] = {}

        for field, csv_col in self.column_mapping.items():
            key = csv_col.lower().strip()
            if key in normalized_headers:
                mapping[field] = normalized_headers[key]
            else:
                logger.warning(f"Mapped column {csv_col!r} for {field} not found in CSV header")

        claimed = set(mapping.values())
        for field, variations in FIELD_VARIATIONS.items():
            if field in mapping:
                continue
            for variation in variations:
                header = normalized_headers.get(variation)
                if header is not None and header not in claimed:
                    mapping[field] = header
                    claimed.add(header)
                    break

        return mapping

    def _row_to_result(
        self,
        row: Dict[str, Any],
        column_mapping: Dict[str, str],
        source: str,
        row_number: int,
    ) -> Result[RawRecord]:
        try:
            values = {field: row.get(csv_col) for field, csv_col in column_mapping.items()}
            return Result.success_result(RawRecord.model_validate(values))
        except (PydanticValidationError, TypeError, ValueError) as e:
            logger.warning(
                f"Rejected row {row_number} from {source}: {type(e).__name__}",
                extra={'source': source, 'row_number': row_number},
            )
            return Result.failure_result(
                TransformationError(f"Row {row_number} could not be read: {str(e)}", source=source, row_number=row_number),
                error_details={"source": source, "row_number": row_number},
            )
