"""Normalization Pipeline and Runner.

This module wires the field normalizers into a per-record pipeline and runs
that pipeline over a whole batch before handing the result to the
Deduplicator.

Data Quality Impact:
    - Every field of every record is normalized; no record is rejected
    - Deduplication only starts once the whole batch is normalized

Architecture:
    - NormalizationPipeline: pure function RawRecord -> CleanRecord
    - PipelineRunner: batch orchestration, optional thread pool, then dedup
    - normalize_and_deduplicate(): single entry point for collaborators
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Mapping, Optional, Sequence, Union

from src.domain.deduplicator import Deduplicator
from src.domain.golden_record import CanonicalDataset, CleanRecord, RawRecord
from src.domain.patterns import DEFAULT_PATTERNS, PatternLibrary
from src.domain.quality import QualityReport, build_quality_report
from src.domain.services import FieldNormalizer
from src.domain.utils import (
    DEFAULT_PARALLEL_THRESHOLD,
    resolve_worker_count,
    should_use_parallel,
)

logger = logging.getLogger(__name__)

RawInput = Union[RawRecord, Mapping[str, object]]


def _as_raw_record(raw: RawInput) -> RawRecord:
    if isinstance(raw, RawRecord):
        return raw
    return RawRecord.model_validate(dict(raw))


class NormalizationPipeline:
    """Normalize every field of a single record.

    Fields are independent: each normalizer reads exactly one raw field, so
    evaluation order does not affect the result.
    """

    def __init__(self, patterns: Optional[PatternLibrary] = None):
        self.patterns = patterns or DEFAULT_PATTERNS

    def normalize(self, raw: RawInput) -> CleanRecord:
        """Normalize one raw record.

        Parameters:
            raw: RawRecord, or a mapping of field name to raw value

        Returns:
            CleanRecord: Fully populated normalized record
        """
        record = _as_raw_record(raw)
        p = self.patterns
        return CleanRecord(
            patient_id=FieldNormalizer.normalize_patient_id(record.patient_id, p),
            full_name=FieldNormalizer.normalize_name(record.full_name),
            gender=FieldNormalizer.normalize_gender(record.gender, p),
            date_of_birth=FieldNormalizer.normalize_date_of_birth(record.date_of_birth, p),
            phone=FieldNormalizer.normalize_phone(record.phone, p),
            admission_time=FieldNormalizer.normalize_timestamp(record.admission_time, p),
            discharge_time=FieldNormalizer.normalize_timestamp(record.discharge_time, p),
            vital_type=FieldNormalizer.normalize_vital_type(record.vital_type, p),
            vital_value=FieldNormalizer.normalize_free_text(record.vital_value),
            lab_test=FieldNormalizer.normalize_lab_test(record.lab_test, p),
            lab_result=FieldNormalizer.normalize_free_text(record.lab_result),
        )


class PipelineRunner:
    """Run the normalization pipeline over a batch, then deduplicate.

    Per-record normalization is pure, so large batches are spread over a
    thread pool; results keep input order. Deduplication runs once, after
    every record has been normalized.

    Example Usage:
        ```python
        runner = PipelineRunner(max_workers=4)
        dataset = runner.run(raw_records)
        dataset, report = runner.run_with_report(raw_records)
        ```
    """

    def __init__(
        self,
        pipeline: Optional[NormalizationPipeline] = None,
        deduplicator: Optional[Deduplicator] = None,
        max_workers: Optional[int] = None,
        parallel_threshold: Optional[int] = None,
    ):
        """Initialize runner.

        Parameters:
            pipeline: Per-record pipeline (default: NormalizationPipeline with DEFAULT_PATTERNS)
            deduplicator: Deduplicator instance (default: Deduplicator())
            max_workers: Thread pool size (default: CPU count)
            parallel_threshold: Batch size above which the thread pool is used
        """
        self.pipeline = pipeline or NormalizationPipeline()
        self.deduplicator = deduplicator or Deduplicator()
        self.max_workers = max_workers
        self.parallel_threshold = (
            parallel_threshold if parallel_threshold is not None else DEFAULT_PARALLEL_THRESHOLD
        )

    def normalize_batch(self, batch: Iterable[RawInput]) -> list[CleanRecord]:
        """Normalize every record of a batch, preserving input order."""
        records = [_as_raw_record(raw) for raw in batch]

        if should_use_parallel(len(records), self.max_workers, self.parallel_threshold):
            workers = resolve_worker_count(self.max_workers)
            logger.info(f"Normalizing {len(records)} records on {workers} threads")
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="normalizer") as executor:
                clean = list(executor.map(self.pipeline.normalize, records))
        else:
            logger.debug(f"Normalizing {len(records)} records sequentially")
            clean = [self.pipeline.normalize(record) for record in records]

        logger.info(f"Normalization complete: {len(clean)} records")
        return clean

    def run(self, batch: Iterable[RawInput]) -> CanonicalDataset:
        """Normalize a batch and collapse it to one record per patient."""
        return self.deduplicator.deduplicate(self.normalize_batch(batch))

    def run_with_report(self, batch: Iterable[RawInput]) -> tuple[CanonicalDataset, QualityReport]:
        """Run the pipeline and build the data quality report for the run.

        Returns:
            tuple: (CanonicalDataset, QualityReport)
        """
        raw_records: Sequence[RawRecord] = [_as_raw_record(raw) for raw in batch]
        clean = self.normalize_batch(raw_records)
        duplicates = self.deduplicator.find_duplicates(clean)
        if duplicates:
            logger.info(f"Found {len(duplicates)} patient ids with more than one record")
        dataset = self.deduplicator.deduplicate(clean)
        report = build_quality_report(
            raw_records,
            clean,
            dataset,
            patterns=self.pipeline.patterns,
            duplicate_patient_ids=duplicates,
        )
        return dataset, report


def normalize_and_deduplicate(
    batch: Iterable[RawInput],
    patterns: Optional[PatternLibrary] = None,
) -> CanonicalDataset:
    """Normalize a batch of raw records and deduplicate by patient.

    This is the entry point external collaborators call.

    Parameters:
        batch: Raw records (RawRecord instances or field mappings)
        patterns: Pattern library (default: DEFAULT_PATTERNS)

    Returns:
        CanonicalDataset: One clean record per canonical patient_id
    """
    runner = PipelineRunner(pipeline=NormalizationPipeline(patterns))
    return runner.run(batch)
