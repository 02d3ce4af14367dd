"""
Tests for DataValidator settings coercion helpers.

Target Coverage: 95%+
"""
import pytest

from oneiro.core.exceptions import ConfigError
from oneiro.core.validators import DataValidator


class TestValidateRequiredFields:
    """Test validate_required_fields()."""

    def test_present_fields_pass(self):
        """Test no error when fields are present."""
        DataValidator.validate_required_fields({"name": "Lucidity"}, ["name"])

    def test_missing_field_raises(self):
        """Test missing field raises ConfigError."""
        with pytest.raises(ConfigError, match="name"):
            DataValidator.validate_required_fields({}, ["name"])

    def test_empty_field_raises(self):
        """Test empty string counts as missing."""
        with pytest.raises(ConfigError):
            DataValidator.validate_required_fields({"name": ""}, ["name"])


class TestNormalizeCalloutName:
    """Test normalize_callout_name()."""

    def test_lowercases_and_hyphenates(self):
        """Test spaces become hyphens and case is folded."""
        assert DataValidator.normalize_callout_name("Dream Diary") == "dream-diary"

    def test_strips_whitespace(self):
        """Test surrounding whitespace is removed."""
        assert DataValidator.normalize_callout_name("  journal-entry ") == "journal-entry"

    def test_empty_raises(self):
        """Test empty name raises."""
        with pytest.raises(ConfigError):
            DataValidator.normalize_callout_name("   ")

    def test_non_string_raises(self):
        """Test non-string raises."""
        with pytest.raises(ConfigError):
            DataValidator.normalize_callout_name(5)


class TestNormalizeBool:
    """Test normalize_bool()."""

    @pytest.mark.parametrize("value", [True, 1, "yes", "TRUE", "on"])
    def test_truthy(self, value):
        """Test truthy spellings."""
        assert DataValidator.normalize_bool(value) is True

    @pytest.mark.parametrize("value", [False, 0, "no", "False", "off"])
    def test_falsy(self, value):
        """Test falsy spellings."""
        assert DataValidator.normalize_bool(value) is False

    def test_none(self):
        """Test None passes through."""
        assert DataValidator.normalize_bool(None) is None

    def test_invalid_string_raises(self):
        """Test unknown string raises."""
        with pytest.raises(ConfigError):
            DataValidator.normalize_bool("maybe")


class TestNormalizeNumbers:
    """Test normalize_float() and normalize_int()."""

    def test_float_from_string(self):
        """Test numeric string converts."""
        assert DataValidator.normalize_float("2.5") == 2.5

    def test_float_rejects_bool(self):
        """Test booleans are not numbers."""
        with pytest.raises(ConfigError):
            DataValidator.normalize_float(True)

    def test_float_rejects_text(self):
        """Test text raises."""
        with pytest.raises(ConfigError):
            DataValidator.normalize_float("five")

    def test_int_accepts_whole_float(self):
        """Test 5.0 becomes 5."""
        assert DataValidator.normalize_int("5.0") == 5

    def test_int_rejects_fraction_and_negative(self):
        """Test 2.5 and -1 raise."""
        with pytest.raises(ConfigError):
            DataValidator.normalize_int(2.5)
        with pytest.raises(ConfigError):
            DataValidator.normalize_int(-1)
