"""Data Quality Report Models.

This module summarizes a pipeline run as aggregate counts: a profile of the
raw batch, an audit of the fallbacks the normalizers applied, and the outcome
of deduplication. Per-record problems (malformed phones, unknown labels,
unparseable dates) are surfaced here as counts rather than rejections.

Architecture:
    - Pure domain models (Pydantic V2) with no infrastructure dependencies
    - Built after the run from its inputs and outputs; never feeds back into it
"""

from datetime import datetime
from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from src.domain.deduplicator import Deduplicator
from src.domain.enums import Gender, LabTest, VitalType
from src.domain.golden_record import CanonicalDataset, CleanRecord, RawRecord
from src.domain.patterns import DEFAULT_PATTERNS, PatternLibrary
from src.domain.services import UNKNOWN_NAME


class SourceProfile(BaseModel):
    """Profile of the raw batch before normalization.

    Parameters:
        total_rows: Number of raw records
        unique_patients: Distinct raw patient_id values (absent values excluded)
        missing_names: Records whose full_name is absent or blank
        unusual_genders: Records with a gender value no synonym recognises
    """

    total_rows: int = 0
    unique_patients: int = 0
    missing_names: int = 0
    unusual_genders: int = 0

    model_config = ConfigDict(frozen=True)


class NormalizationAudit(BaseModel):
    """Counts of fallback values in the normalized batch (pre-deduplication)."""

    invalid_phones: int = 0
    unknown_names: int = 0
    unknown_genders: int = 0
    unknown_vital_types: int = 0
    unknown_lab_tests: int = 0
    missing_dates_of_birth: int = 0
    missing_admission_times: int = 0
    missing_discharge_times: int = 0

    model_config = ConfigDict(frozen=True)


class DeduplicationSummary(BaseModel):
    """Outcome of collapsing clean records to one per patient."""

    records_in: int = 0
    records_out: int = 0
    duplicates_removed: int = 0
    duplicate_patient_ids: dict[str, int] = Field(
        default_factory=dict,
        description="Canonical patient_id to record count, for ids seen more than once"
    )

    model_config = ConfigDict(frozen=True)


class QualityReport(BaseModel):
    """Data quality report for one pipeline run."""

    source: SourceProfile
    audit: NormalizationAudit
    deduplication: DeduplicationSummary
    generated_at: datetime = Field(default_factory=datetime.now)

    model_config = ConfigDict(frozen=True)


def profile_source(raw_batch: Sequence[RawRecord], patterns: PatternLibrary = DEFAULT_PATTERNS) -> SourceProfile:
    """Profile raw records the way the source quality checks do.

    A gender value counts as unusual when it is present but not a known
    synonym; absent genders are not counted. The lookup is trimmed and
    case-insensitive, so "MALE" and " m " are not unusual even though a
    case-sensitive check against male/female/M/F/Male/Female would count
    them.
    """
    patient_ids = {raw.patient_id for raw in raw_batch if raw.patient_id is not None}
    missing_names = sum(1 for raw in raw_batch if not (raw.full_name or "").strip())
    unusual_genders = sum(
        1 for raw in raw_batch
        if raw.gender is not None and raw.gender.strip().lower() not in patterns.gender_synonyms
    )
    return SourceProfile(
        total_rows=len(raw_batch),
        unique_patients=len(patient_ids),
        missing_names=missing_names,
        unusual_genders=unusual_genders,
    )


def audit_records(records: Sequence[CleanRecord]) -> NormalizationAudit:
    """Count fallback values across normalized records."""
    return NormalizationAudit(
        invalid_phones=sum(1 for r in records if r.phone.is_invalid),
        unknown_names=sum(1 for r in records if r.full_name == UNKNOWN_NAME),
        unknown_genders=sum(1 for r in records if r.gender is Gender.UNKNOWN),
        unknown_vital_types=sum(1 for r in records if r.vital_type is VitalType.UNKNOWN),
        unknown_lab_tests=sum(1 for r in records if r.lab_test is LabTest.UNKNOWN),
        missing_dates_of_birth=sum(1 for r in records if r.date_of_birth is None),
        missing_admission_times=sum(1 for r in records if r.admission_time is None),
        missing_discharge_times=sum(1 for r in records if r.discharge_time is None),
    )


def build_quality_report(
    raw_batch: Sequence[RawRecord],
    clean_records: Sequence[CleanRecord],
    dataset: CanonicalDataset,
    patterns: Optional[PatternLibrary] = None,
    duplicate_patient_ids: Optional[dict[str, int]] = None,
) -> QualityReport:
    """Build the quality report for one run.

    Parameters:
        raw_batch: Records as ingested
        clean_records: Normalized records, before deduplication
        dataset: Deduplicated output
        patterns: Pattern library used for the run (default: DEFAULT_PATTERNS)
        duplicate_patient_ids: Precomputed duplicate counts; derived from
            clean_records when omitted

    Returns:
        QualityReport: Aggregate counts for the run
    """
    patterns = patterns or DEFAULT_PATTERNS
    if duplicate_patient_ids is None:
        duplicate_patient_ids = Deduplicator.find_duplicates(clean_records)

    return QualityReport(
        source=profile_source(raw_batch, patterns),
        audit=audit_records(clean_records),
        deduplication=DeduplicationSummary(
            records_in=len(clean_records),
            records_out=len(dataset),
            duplicates_removed=len(clean_records) - len(dataset),
            duplicate_patient_ids=duplicate_patient_ids,
        ),
    )
