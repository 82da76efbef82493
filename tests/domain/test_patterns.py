"""Tests for the pattern library."""

import pytest

from src.domain.enums import Gender, LabTest, VitalType
from src.domain.patterns import DEFAULT_PATTERNS, PatternLibrary


class TestPatternLibrary:
    """Test suite for PatternLibrary construction."""

    def test_default_country_code(self):
        """Test the default library uses the 260 dialling code."""
        assert DEFAULT_PATTERNS.country_code == "260"
        assert [rule.name for rule in DEFAULT_PATTERNS.phone_rules] == ["local", "international", "subscriber"]

    def test_plus_prefix_accepted(self):
        """Test that a leading + on the country code is ignored."""
        assert PatternLibrary.build("+254").country_code == "254"

    def test_empty_country_code_uses_default(self):
        assert PatternLibrary.build("").country_code == "260"

    @pytest.mark.parametrize("code", ["abc", "26 0", "٢٦٠"])
    def test_invalid_country_code(self, code):
        """Test that non-digit country codes are rejected."""
        with pytest.raises(ValueError, match="digits only"):
            PatternLibrary.build(code)

    def test_synonym_tables_are_read_only(self):
        """Test that synonym tables cannot be mutated."""
        with pytest.raises(TypeError):
            DEFAULT_PATTERNS.gender_synonyms["x"] = Gender.MALE

    def test_library_is_frozen(self):
        """Test that the library itself is immutable."""
        with pytest.raises(AttributeError):
            DEFAULT_PATTERNS.country_code = "1"

    def test_canonical_labels_present(self):
        """Test that each canonical label is its own synonym."""
        assert DEFAULT_PATTERNS.gender_synonyms["m"] is Gender.MALE
        assert DEFAULT_PATTERNS.vital_type_synonyms["blood pressure"] is VitalType.BLOOD_PRESSURE
        assert DEFAULT_PATTERNS.lab_test_synonyms["hgb"] is LabTest.HGB

    def test_unknown_is_not_a_synonym(self):
        """Test that fallback labels are not listed as synonyms."""
        assert "unknown" not in DEFAULT_PATTERNS.gender_synonyms
        assert "unknown" not in DEFAULT_PATTERNS.vital_type_synonyms

    def test_phone_rule_apply(self):
        """Test rule rewriting of digits-only values."""
        local, international, subscriber = DEFAULT_PATTERNS.phone_rules
        assert local.apply("0971234567") == "+260971234567"
        assert international.apply("260971234567") == "+260971234567"
        assert subscriber.apply("971234567") == "+260971234567"
