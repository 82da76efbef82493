"""Ingestion adapters for Clinical-Normalizer.

Each adapter turns one kind of source into a stream of RawRecord results
through the IngestionPort contract.
"""

from pathlib import Path

from src.adapters.ingesters.csv_ingester import CSVIngester
from src.domain.ports import IngestionPort, UnsupportedSourceError

__all__ = ["CSVIngester", "ADAPTERS_BY_SUFFIX", "get_adapter"]

# Delimited text exports; .tsv forces a tab delimiter inside CSVIngester
ADAPTERS_BY_SUFFIX = {
    ".csv": CSVIngester,
    ".tsv": CSVIngester,
}


def get_adapter(source: str, **kwargs) -> IngestionPort:
    """Pick the ingestion adapter for a source by its file suffix.

    Parameters:
        source: File path of the export
        **kwargs: Adapter options (column_mapping, delimiter, chunk_size, encoding)

    Returns:
        IngestionPort: Configured adapter

    Raises:
        UnsupportedSourceError: If the suffix is unknown or the options are invalid

    Example Usage:
        ```python
        adapter = get_adapter("encounters.tsv", chunk_size=5000)
        ```
    """
    suffix = Path(source).suffix.lower()
    adapter_class = ADAPTERS_BY_SUFFIX.get(suffix)
    if adapter_class is None:
        supported = ", ".join(sorted(ADAPTERS_BY_SUFFIX))
        raise UnsupportedSourceError(
            f"No adapter found for source: {source}. Supported suffixes: {supported}",
            source=source
        )

    try:
        return adapter_class(**kwargs)
    except (TypeError, ValueError) as e:
        raise UnsupportedSourceError(
            f"Failed to create adapter for {suffix} source: {str(e)}",
            source=source,
            adapter=adapter_class.__name__
        )
