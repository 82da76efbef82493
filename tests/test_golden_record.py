"""Tests for golden record schemas.

These tests verify that the record models keep raw values verbatim, enforce
the canonical patient identifier format, and stay immutable.
"""

from datetime import date, datetime

import pandas as pd
import pytest
from pydantic import ValidationError

from src.domain.enums import Gender, LabTest, VitalType
from src.domain.golden_record import (
    EXPORT_COLUMNS,
    RAW_FIELDS,
    CanonicalDataset,
    CleanRecord,
    PhoneNumber,
    RawRecord,
)


def make_clean(patient_id="P-0001", admission_time=None, **overrides) -> CleanRecord:
    values = dict(
        patient_id=patient_id,
        full_name="Jane Doe",
        gender=Gender.FEMALE,
        date_of_birth=date(1990, 5, 1),
        phone=PhoneNumber(number="+260971234567", is_invalid=False),
        admission_time=admission_time,
        discharge_time=None,
        vital_type=VitalType.HEART_RATE,
        vital_value="72",
        lab_test=LabTest.WBC,
        lab_result="6.1",
    )
    values.update(overrides)
    return CleanRecord(**values)


class TestRawRecord:
    """Test suite for RawRecord model."""

    def test_all_fields_optional(self):
        """Test that an empty mapping yields a record of absent fields."""
        raw = RawRecord()
        for field in RAW_FIELDS:
            assert getattr(raw, field) is None

    def test_values_kept_verbatim(self):
        """Test that whitespace and case are not altered."""
        raw = RawRecord(full_name="  jOHN doe ", gender=" Male ")
        assert raw.full_name == "  jOHN doe "
        assert raw.gender == " Male "

    def test_missing_markers_become_none(self):
        """Test that pandas missing markers are coerced to None."""
        raw = RawRecord(patient_id=float("nan"), phone=float("nan"), gender=pd.NA, admission_time=pd.NaT)
        assert raw.patient_id is None
        assert raw.phone is None
        assert raw.gender is None
        assert raw.admission_time is None

    def test_scalars_become_text(self):
        """Test that numeric values from loose sources are kept as text."""
        raw = RawRecord(patient_id=42, phone=971234567)
        assert raw.patient_id == "42"
        assert raw.phone == "971234567"

    def test_unknown_keys_ignored(self):
        """Test that extra columns are ignored."""
        raw = RawRecord.model_validate({"patient_id": "P1", "ward": "B"})
        assert raw.patient_id == "P1"
        assert not hasattr(raw, "ward")

    def test_immutable(self):
        """Test that raw records cannot be modified."""
        raw = RawRecord(patient_id="P1")
        with pytest.raises(ValidationError):
            raw.patient_id = "P2"


class TestCleanRecord:
    """Test suite for CleanRecord model."""

    def test_valid_record(self):
        """Test creating a valid clean record."""
        record = make_clean()
        assert record.patient_id == "P-0001"
        assert record.gender == "F"
        assert record.phone.number == "+260971234567"

    @pytest.mark.parametrize("bad_id", ["P-1", "P-12345", "0001", "p-0001", "P-00a1"])
    def test_patient_id_format_enforced(self, bad_id):
        """Test that patient_id must match P-####."""
        with pytest.raises(ValidationError):
            make_clean(patient_id=bad_id)

    def test_immutable(self):
        """Test that clean records cannot be modified."""
        record = make_clean()
        with pytest.raises(ValidationError):
            record.full_name = "Someone Else"

    def test_to_flat_dict(self):
        """Test flattening for tabular export."""
        record = make_clean(admission_time=datetime(2021, 1, 1, 9, 0))
        flat = record.to_flat_dict()
        assert tuple(flat.keys()) == EXPORT_COLUMNS
        assert flat["gender"] == "F"
        assert flat["vital_type"] == "Heart Rate"
        assert flat["phone"] == "+260971234567"
        assert flat["is_invalid_phone"] is False
        assert flat["admission_time"] == datetime(2021, 1, 1, 9, 0)


class TestCanonicalDataset:
    """Test suite for CanonicalDataset model."""

    def test_lookup_helpers(self):
        """Test read-only helpers."""
        a = make_clean("P-0001")
        b = make_clean("P-0002")
        dataset = CanonicalDataset(records={"P-0001": a, "P-0002": b})
        assert len(dataset) == 2
        assert "P-0001" in dataset
        assert "P-0003" not in dataset
        assert dataset.get("P-0002") is b
        assert dataset.get("P-0003") is None
        assert dataset.patient_ids() == ["P-0001", "P-0002"]
        assert list(dataset.values()) == [a, b]

    def test_key_must_match_patient_id(self):
        """Test that a mismatched key is rejected."""
        with pytest.raises(ValidationError):
            CanonicalDataset(records={"P-0009": make_clean("P-0001")})

    def test_records_cannot_be_edited(self):
        """Test that entries cannot be added, replaced or removed after construction."""
        source = {"P-0001": make_clean("P-0001")}
        dataset = CanonicalDataset(records=source)

        with pytest.raises(TypeError):
            dataset.records["P-9999"] = dataset.get("P-0001")
        with pytest.raises(TypeError):
            del dataset.records["P-0001"]

        source["P-0002"] = make_clean("P-0002")
        assert dataset.patient_ids() == ["P-0001"]

    def test_default_records_cannot_be_edited(self):
        """Test that an empty dataset is read-only too."""
        with pytest.raises(TypeError):
            CanonicalDataset().records["P-0001"] = make_clean("P-0001")

    def test_model_dump(self):
        """Test that the read-only records still serialize."""
        dumped = CanonicalDataset(records={"P-0001": make_clean("P-0001")}).model_dump(mode="json")
        assert list(dumped["records"]) == ["P-0001"]
        assert dumped["records"]["P-0001"]["date_of_birth"] == "1990-05-01"

    def test_empty_dataset(self):
        """Test an empty dataset exports an empty frame with all columns."""
        df = CanonicalDataset().to_dataframe()
        assert df.empty
        assert list(df.columns) == list(EXPORT_COLUMNS)

    def test_to_dataframe(self):
        """Test DataFrame export."""
        dataset = CanonicalDataset(records={
            "P-0001": make_clean("P-0001"),
            "P-0002": make_clean("P-0002", phone=PhoneNumber(number=None, is_invalid=True)),
        })
        df = dataset.to_dataframe()
        assert list(df["patient_id"]) == ["P-0001", "P-0002"]
        assert list(df["is_invalid_phone"]) == [False, True]
        assert pd.isna(df.loc[1, "phone"])
