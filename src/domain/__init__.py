"""Domain layer for Clinical-Normalizer.

This module contains the normalization core: record models, the pattern
library, field normalizers, the per-record pipeline and the deduplicator.
All domain models are pure Python with no external dependencies beyond
Pydantic and pandas.
"""

from .golden_record import (
    RawRecord,
    PhoneNumber,
    CleanRecord,
    CanonicalDataset,
)
from .patterns import PatternLibrary, DEFAULT_PATTERNS
from .services import FieldNormalizer
from .deduplicator import Deduplicator
from .pipeline import NormalizationPipeline, PipelineRunner, normalize_and_deduplicate

__all__ = [
    "RawRecord",
    "PhoneNumber",
    "CleanRecord",
    "CanonicalDataset",
    "PatternLibrary",
    "DEFAULT_PATTERNS",
    "FieldNormalizer",
    "Deduplicator",
    "NormalizationPipeline",
    "PipelineRunner",
    "normalize_and_deduplicate",
]
