"""
test_txt_utils.py
-----------------
Unit tests for txt utility functions.

Target Coverage: 95%+
"""
import pytest

from oneiro.utils.txt import word_count


class TestWordCount:
    """Test word_count()."""

    def test_counts_words(self):
        """Test simple sentence."""
        assert word_count("I searched every drawer for my keys.") == 7

    def test_punctuation_ignored(self):
        """Test punctuation is not counted as words."""
        assert word_count("Flying , over ; the sea !") == 4

    @pytest.mark.parametrize("text", ["", "   ", "\n\n"])
    def test_empty(self, text):
        """Test empty text is zero words."""
        assert word_count(text) == 0

