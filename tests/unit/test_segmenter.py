"""Unit tests for text cleaning and sentence segmentation."""

from pathlib import Path

import pytest

from speech_collector.lib.exceptions import ValidationError
from speech_collector.services.text.segmenter import clean_text, load_text_file, segment_text


class TestCleanText:
    def test_digits_removed_and_whitespace_collapsed(self):
        assert clean_text("Omwana 12 nigo   7 abwate.") == "Omwana nigo abwate."

    def test_newlines_collapsed(self):
        assert clean_text("  One.\n\n\tTwo.  ") == "One. Two."


class TestSegmentText:
    """Tests for segment_text."""

    def test_digits_stripped_and_split_on_terminators(self):
        result = segment_text("Omwana 12 nigo 7 abwate. Naende 3 akore.")

        assert result == ["Omwana nigo abwate.", "Naende akore."]

    def test_mixed_terminators(self):
        assert segment_text("Is it? Yes! Fine.") == ["Is it?", "Yes!", "Fine."]

    def test_repeated_terminators_stay_together(self):
        assert segment_text("Really?! Wait...") == ["Really?!", "Wait..."]

    def test_no_terminator_is_one_sentence(self):
        assert segment_text("no punctuation here") == ["no punctuation here"]

    def test_trailing_fragment_without_terminator_dropped(self):
        assert segment_text("Complete. incomplete") == ["Complete."]

    @pytest.mark.parametrize("raw", ["", "   ", "123 456", "\n\t"])
    def test_blank_input_yields_nothing(self, raw):
        assert segment_text(raw) == []

    def test_punctuation_only_fragments_skipped(self):
        assert segment_text("First. . Second.") == ["First.", "Second."]


class TestLoadTextFile:
    def test_reads_utf8(self, tmp_path: Path):
        path = tmp_path / "story.txt"
        path.write_text("Ekegusii ni rurimi.", encoding="utf-8")

        assert load_text_file(path) == "Ekegusii ni rurimi."

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ValidationError, match="not found"):
            load_text_file(tmp_path / "absent.txt")

    def test_blank_file(self, tmp_path: Path):
        path = tmp_path / "blank.txt"
        path.write_text("   \n")

        with pytest.raises(ValidationError):
            load_text_file(path)

    def test_directory_rejected(self, tmp_path: Path):
        with pytest.raises(ValidationError, match="not a file"):
            load_text_file(tmp_path)
