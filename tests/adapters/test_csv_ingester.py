"""Unit tests for CSV Ingestion Adapter.

Tests cover:
- Initialization and validation of options
- Column mapping and header auto-detection
- Verbatim pass-through of cell values
- Error handling for missing, empty and unreadable files
- Adapter factory
"""

import pytest

from src.adapters.ingesters import CSVIngester, get_adapter
from src.adapters.ingesters import csv_ingester as csv_module
from src.domain.golden_record import RawRecord
from src.domain.ports import SourceNotFoundError, UnsupportedSourceError

HEADER = "patient_id,full_name,gender,date_of_birth,phone,admission_time,discharge_time,vital_type,vital_value,lab_test,lab_result"


@pytest.fixture
def messy_csv(tmp_path):
    path = tmp_path / "encounters.csv"
    path.write_text(
        HEADER + "\n"
        "p001,  jOHN doe ,male,1985-03-12,0971234567,2021-02-01 10:00,,hr, 88 ,wbc,7.2\n"
        "P-0001,John Doe,M,12/03/1985,971234567,15/01/2021 08:00,,temp,37.1,hb,13\n"
        "PAT-2,,other,NA,12345,,,pulse,,glucose,\n",
        encoding="utf-8",
    )
    return path


class TestCSVIngesterInitialization:
    """Test CSV ingester initialization."""

    def test_init_defaults(self):
        """Test initialization with default parameters."""
        ingester = CSVIngester()
        assert ingester.delimiter == ','
        assert ingester.chunk_size == 10000
        assert ingester.encoding == 'utf-8'
        assert ingester.adapter_name == "csv_ingester"

    def test_unknown_mapping_field(self):
        """Test that mappings for unknown fields are rejected."""
        with pytest.raises(ValueError, match="Unknown record fields"):
            CSVIngester(column_mapping={'ward': 'Ward'})

    def test_invalid_chunk_size(self):
        """Test that chunk_size must be positive."""
        with pytest.raises(ValueError, match="chunk_size"):
            CSVIngester(chunk_size=0)

    @pytest.mark.parametrize("source, expected", [
        ("data.csv", True),
        ("DATA.CSV", True),
        ("data.tsv", True),
        ("data.json", False),
        ("", False),
    ])
    def test_can_ingest(self, source, expected):
        assert CSVIngester().can_ingest(source) is expected


class TestCSVIngestion:
    """Test row ingestion."""

    def test_yields_raw_records(self, messy_csv):
        """Test that every row becomes a successful RawRecord result."""
        results = list(CSVIngester().ingest(str(messy_csv)))
        assert len(results) == 3
        assert all(r.is_success() for r in results)
        assert all(isinstance(r.value, RawRecord) for r in results)

    def test_values_are_verbatim(self, messy_csv):
        """Test that whitespace, case and numeric-looking text are kept."""
        first = CSVIngester().read_records(str(messy_csv))[0]
        assert first.patient_id == "p001"
        assert first.full_name == "  jOHN doe "
        assert first.phone == "0971234567"
        assert first.vital_value == " 88 "
        assert first.lab_result == "7.2"

    def test_empty_cells_are_absent(self, messy_csv):
        """Test that empty cells become None and NA is kept as text."""
        third = CSVIngester().read_records(str(messy_csv))[2]
        assert third.full_name is None
        assert third.admission_time is None
        assert third.lab_result is None
        assert third.date_of_birth == "NA"

    def test_chunked_reading(self, messy_csv):
        """Test that small chunks yield the same rows."""
        records = CSVIngester(chunk_size=1).read_records(str(messy_csv))
        assert [r.patient_id for r in records] == ["p001", "P-0001", "PAT-2"]

    def test_header_variations(self, tmp_path):
        """Test header detection ignores case and surrounding whitespace."""
        path = tmp_path / "variant.csv"
        path.write_text(" MRN , Name ,Sex,DOB\n42,ann lee,F,1990-01-01\n", encoding="utf-8")
        record = CSVIngester().read_records(str(path))[0]
        assert record.patient_id == "42"
        assert record.full_name == "ann lee"
        assert record.gender == "F"
        assert record.date_of_birth == "1990-01-01"
        assert record.phone is None

    def test_explicit_mapping_wins(self, tmp_path):
        """Test that an explicit column mapping overrides detection."""
        path = tmp_path / "mapped.csv"
        path.write_text("id,Hospital Number\n1,H-77\n", encoding="utf-8")
        ingester = CSVIngester(column_mapping={'patient_id': 'Hospital Number'})
        record = ingester.read_records(str(path))[0]
        assert record.patient_id == "H-77"

    def test_tsv_uses_tab(self, tmp_path):
        """Test that .tsv files are read tab-delimited."""
        path = tmp_path / "encounters.tsv"
        path.write_text("patient_id\tfull_name\n7\tJane, Doe\n", encoding="utf-8")
        record = CSVIngester().read_records(str(path))[0]
        assert record.full_name == "Jane, Doe"

    def test_custom_delimiter(self, tmp_path):
        path = tmp_path / "semi.csv"
        path.write_text("patient_id;phone\n7;097-123-4567\n", encoding="utf-8")
        record = CSVIngester(delimiter=';').read_records(str(path))[0]
        assert record.phone == "097-123-4567"

    def test_rejected_row_is_failure_result(self, messy_csv, monkeypatch):
        """Test that a row that cannot be read yields a failure, not an exception."""
        class BrokenRecord:
            @staticmethod
            def model_validate(values):
                raise ValueError("broken")

        monkeypatch.setattr(csv_module, "RawRecord", BrokenRecord)
        results = list(CSVIngester().ingest(str(messy_csv)))
        assert len(results) == 3
        assert all(r.is_failure() for r in results)
        assert results[0].error_type == "TransformationError"
        assert results[0].error_details["row_number"] == 1


class TestCSVIngestionErrors:
    """Test source-level error handling."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceNotFoundError):
            list(CSVIngester().ingest(str(tmp_path / "missing.csv")))

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("", encoding="utf-8")
        with pytest.raises(UnsupportedSourceError, match="empty"):
            list(CSVIngester().ingest(str(path)))

    def test_no_recognisable_columns(self, tmp_path):
        path = tmp_path / "other.csv"
        path.write_text("colour,size\nred,L\n", encoding="utf-8")
        with pytest.raises(UnsupportedSourceError, match="no recognisable columns"):
            list(CSVIngester().ingest(str(path)))

    def test_wrong_encoding(self, tmp_path):
        path = tmp_path / "latin.csv"
        path.write_bytes("patient_id,full_name\n1,Jos\xe9\n".encode("latin-1"))
        with pytest.raises(UnsupportedSourceError):
            list(CSVIngester().ingest(str(path)))

    def test_source_info(self, messy_csv, tmp_path):
        info = CSVIngester().get_source_info(str(messy_csv))
        assert info['format'] == 'csv'
        assert info['delimiter'] == ','
        assert info['size'] > 0
        assert CSVIngester().get_source_info(str(tmp_path / "missing.csv")) is None


class TestGetAdapter:
    """Test the adapter factory."""

    def test_csv_adapter(self):
        adapter = get_adapter("data.csv", chunk_size=50)
        assert isinstance(adapter, CSVIngester)
        assert adapter.chunk_size == 50

    def test_unsupported_extension(self):
        with pytest.raises(UnsupportedSourceError, match="No adapter found"):
            get_adapter("data.xml")

    def test_invalid_options(self):
        with pytest.raises(UnsupportedSourceError, match="Failed to create"):
            get_adapter("data.csv", chunk_size=0)
