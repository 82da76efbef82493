"""Golden Record Schema Definitions.

This module defines the record models that flow through the normalization
pipeline: the raw encounter row as ingested, the normalized row, and the
deduplicated canonical dataset.

Data Quality Impact:
    - RawRecord keeps source text verbatim so every rule sees the original value
    - CleanRecord fields are total: every field always holds a canonical value,
      a fixed fallback, or None
    - CanonicalDataset guarantees one record per canonical patient identifier

Architecture:
    - Pure domain models with zero infrastructure dependencies
    - Models are immutable (frozen Pydantic V2 models)
    - Normalization logic lives in FieldNormalizer, not in validators
"""

from datetime import date, datetime
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

from src.domain.enums import Gender, LabTest, VitalType

RAW_FIELDS = (
    "patient_id",
    "full_name",
    "gender",
    "date_of_birth",
    "phone",
    "admission_time",
    "discharge_time",
    "vital_type",
    "vital_value",
    "lab_test",
    "lab_result",
)

PATIENT_ID_PATTERN = r"^P-\d{4}$"


class RawRecord(BaseModel):
    """One encounter row exactly as ingested.

    Every field is optional opaque text. Values are not stripped or
    otherwise altered; missing markers produced by pandas (NaN, NaT, NA)
    are coerced to None and other scalars to their string form.
    """

    patient_id: Optional[str] = None
    full_name: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[str] = None
    phone: Optional[str] = None
    admission_time: Optional[str] = None
    discharge_time: Optional[str] = None
    vital_type: Optional[str] = None
    vital_value: Optional[str] = None
    lab_test: Optional[str] = None
    lab_result: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def coerce_to_text(cls, v: Any) -> Optional[str]:
        """Coerce ingested scalars to text, mapping missing markers to None."""
        if v is None or isinstance(v, str):
            return v
        try:
            if pd.isna(v):
                return None
        except (TypeError, ValueError):
            # Array-like values are not scalars; fall through to str()
            pass
        return str(v)

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
    )


class PhoneNumber(BaseModel):
    """Normalized phone number with its validity flag.

    Parameters:
        number: E.164-style number (``+260971234567``) or None when malformed
        is_invalid: True when no phone rule matched the raw value
    """

    number: Optional[str] = Field(None, description="Normalized phone number")
    is_invalid: bool = Field(..., description="True when the raw value matched no phone rule")

    model_config = ConfigDict(frozen=True)


class CleanRecord(BaseModel):
    """One encounter row after field-level normalization.

    Parameters:
        patient_id: Canonical identifier ``P-####``
        full_name: Title-cased name or ``"Unknown"``
        gender: Canonical gender label
        date_of_birth: Parsed date or None
        phone: Normalized phone number and validity flag
        admission_time: Parsed admission timestamp or None
        discharge_time: Parsed discharge timestamp or None
        vital_type: Canonical vital-sign type label
        vital_value: Trimmed free text or None
        lab_test: Canonical lab test label
        lab_result: Trimmed free text or None
    """

    patient_id: str = Field(..., pattern=PATIENT_ID_PATTERN, description="Canonical patient identifier")
    full_name: str = Field(..., description="Title-cased full name or 'Unknown'")
    gender: Gender = Field(..., description="Canonical gender label")
    date_of_birth: Optional[date] = Field(None, description="Date of birth")
    phone: PhoneNumber = Field(..., description="Normalized phone number")
    admission_time: Optional[datetime] = Field(None, description="Admission timestamp")
    discharge_time: Optional[datetime] = Field(None, description="Discharge timestamp")
    vital_type: VitalType = Field(..., description="Canonical vital-sign type")
    vital_value: Optional[str] = Field(None, description="Vital-sign value (unvalidated)")
    lab_test: LabTest = Field(..., description="Canonical lab test")
    lab_result: Optional[str] = Field(None, description="Lab result (unvalidated)")

    model_config = ConfigDict(frozen=True)

    def to_flat_dict(self) -> dict[str, Any]:
        """Flatten the record for tabular export.

        The phone pair becomes ``phone`` and ``is_invalid_phone`` columns and
        enum members become their canonical labels.

        Returns:
            dict: Column name to scalar value, in field order
        """
        return {
            "patient_id": self.patient_id,
            "full_name": self.full_name,
            "gender": self.gender.value,
            "date_of_birth": self.date_of_birth,
            "phone": self.phone.number,
            "is_invalid_phone": self.phone.is_invalid,
            "admission_time": self.admission_time,
            "discharge_time": self.discharge_time,
            "vital_type": self.vital_type.value,
            "vital_value": self.vital_value,
            "lab_test": self.lab_test.value,
            "lab_result": self.lab_result,
        }


EXPORT_COLUMNS = (
    "patient_id",
    "full_name",
    "gender",
    "date_of_birth",
    "phone",
    "is_invalid_phone",
    "admission_time",
    "discharge_time",
    "vital_type",
    "vital_value",
    "lab_test",
    "lab_result",
)


class CanonicalDataset(BaseModel):
    """Deduplicated collection of clean records keyed by patient identifier.

    Created once per batch run by the Deduplicator and only read afterwards.
    Iteration order is the order in which each patient identifier was first
    seen in the input batch.
    """

    records: Mapping[str, CleanRecord] = Field(default_factory=dict, validate_default=True)

    model_config = ConfigDict(frozen=True)

    @field_validator("records", mode="after")
    @classmethod
    def freeze_records(cls, v: Mapping[str, CleanRecord]) -> Mapping[str, CleanRecord]:
        """Store records behind a read-only view."""
        return MappingProxyType(dict(v))

    @field_serializer("records")
    def serialize_records(self, v: Mapping[str, CleanRecord]) -> dict[str, CleanRecord]:
        return dict(v)

    @model_validator(mode="after")
    def check_keys_match_records(self) -> "CanonicalDataset":
        """Reject entries whose key differs from the record's patient_id."""
        for key, record in self.records.items():
            if key != record.patient_id:
                raise ValueError(
                    f"Dataset key {key!r} does not match record patient_id {record.patient_id!r}"
                )
        return self

    def __len__(self) -> int:
        return len(self.records)

    def __contains__(self, patient_id: object) -> bool:
        return patient_id in self.records

    def get(self, patient_id: str) -> Optional[CleanRecord]:
        return self.records.get(patient_id)

    def patient_ids(self) -> list[str]:
        return list(self.records.keys())

    def values(self) -> Iterator[CleanRecord]:
        return iter(self.records.values())

    def to_dataframe(self) -> pd.DataFrame:
        """Export the dataset as a DataFrame, one row per patient.

        Returns:
            pd.DataFrame: Flattened records with EXPORT_COLUMNS as columns
        """
        rows = [record.to_flat_dict() for record in self.records.values()]
        return pd.DataFrame(rows, columns=list(EXPORT_COLUMNS))
