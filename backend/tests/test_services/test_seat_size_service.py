"""
Unit tests for seat size extraction

Author: TM3
Date: 2025-10-17
"""
import pytest

from app.services.seat_size_service import (
    SeatSizeExtractor,
    merge_seat_sizes,
    normalize_seat_size,
)


@pytest.fixture
def extractor():
    return SeatSizeExtractor()


class TestFromNotes:

    @pytest.mark.parametrize("notes,expected", [
        ("Seat size 17.5", ["17,5"]),
        ("seat size: 18", ["18"]),
        ("17,5 seat, wide tree", ["17,5"]),
        ('Rider wants 17.5" with long flaps', ["17,5"]),
        ("16 inch", ["16"]),
        ("stamped in 18", ["18"]),
        ("Stamped 17", ["17"]),
    ])
    def test_patterns(self, extractor, notes, expected):
        assert extractor.from_notes(notes) == expected

    def test_inch_sizes_outside_range_are_ignored(self, extractor):
        assert extractor.from_notes('Flap 24" long, panel 3 inch') is None

    def test_explicit_seat_size_is_not_range_checked(self, extractor):
        assert extractor.from_notes("seat size 12") == ["12"]

    def test_seat_followed_by_size_is_not_a_size_seat_match(self, extractor):
        # "17 seat size 18" only yields the explicit seat size
        assert extractor.from_notes("17 seat size 18") == ["18"]

    def test_deduplicates_in_first_seen_order(self, extractor):
        notes = "Seat size 17.5 and stamped 18, confirm seat size 17,5"
        assert extractor.from_notes(notes) == ["17,5", "18"]

    @pytest.mark.parametrize("notes", [None, "", "   ", "black saddle, brown stitching"])
    def test_nothing_found(self, extractor, notes):
        assert extractor.from_notes(notes) is None


class TestFromOptionItems:

    def test_reads_seat_size_option_only(self, extractor):
        items = [
            {"option_id": 1, "name": "17.5"},
            {"option_id": 2, "name": "Brown"},
            {"option_id": 1, "name": "18"},
            {"option_id": 1, "name": "17,5"},
        ]
        assert extractor.from_option_items(items) == ["17,5", "18"]

    def test_ignores_malformed_items(self, extractor):
        assert extractor.from_option_items(["17", {"option_id": 1, "name": "  "}]) is None

    def test_empty(self, extractor):
        assert extractor.from_option_items([]) is None
        assert extractor.from_option_items(None) is None


class TestExtract:

    def test_option_items_win_over_notes(self, extractor):
        sizes = extractor.extract([{"option_id": 1, "name": "16"}], "Seat size 17")
        assert sizes == ["16"]

    def test_falls_back_to_notes_in_order(self, extractor):
        assert extractor.extract([], None, "no size here", "stamped 17.5") == ["17,5"]

    def test_nothing_anywhere(self, extractor):
        assert extractor.extract(None, None) is None


class TestHelpers:

    def test_normalize(self):
        assert normalize_seat_size(" 17.5 ") == "17,5"

    def test_merge_prefers_option_sizes(self):
        assert merge_seat_sizes(["17.5", "17,5", "18"], ["16"]) == ["17,5", "18"]

    def test_merge_falls_back(self):
        assert merge_seat_sizes(None, ["16"]) == ["16"]
        assert merge_seat_sizes([], None) is None
