"""
Seat Size Extraction Service

Pulls saddle seat sizes out of an order's selected option items or, failing
that, out of the free-text notes fitters typed into the order form.

Sizes are stored in European notation (comma as decimal separator) and
de-duplicated in the order they were found: ["17", "17,5"].

Author: TM3
Date: 2025-10-17
"""
import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)

# option_id of the "Seat Size" option in the order form
SEAT_SIZE_OPTION_ID = 1

# Valid saddle seat sizes in inches
MIN_SEAT_SIZE = Decimal("14")
MAX_SEAT_SIZE = Decimal("20")

_SIZE = r"(\d{1,2}(?:[.,]\d)?)"

# Patterns are tried in this order; the first two accept any size, the
# last two only sizes within the valid range.
SEAT_SIZE_PATTERN = re.compile(r"seat\s*size[:\s]+" + _SIZE, re.IGNORECASE)
SIZE_SEAT_PATTERN = re.compile(_SIZE + r"\s*seat(?!\s*size)", re.IGNORECASE)
INCH_PATTERN = re.compile(_SIZE + r"\s*(?:\"|''|inch)", re.IGNORECASE)
STAMPED_PATTERN = re.compile(r"stamped(?:\s+in)?\s+" + _SIZE, re.IGNORECASE)

UNBOUNDED_PATTERNS = (SEAT_SIZE_PATTERN, SIZE_SEAT_PATTERN)
BOUNDED_PATTERNS = (INCH_PATTERN, STAMPED_PATTERN)


def normalize_seat_size(value: str) -> str:
    """17.5 -> 17,5"""
    return value.strip().replace(".", ",")


def _in_range(value: str) -> bool:
    try:
        number = Decimal(value.replace(",", "."))
    except InvalidOperation:
        return False
    return MIN_SEAT_SIZE <= number <= MAX_SEAT_SIZE


def _append_unique(result: List[str], value: str):
    normalized = normalize_seat_size(value)
    if normalized and normalized not in result:
        result.append(normalized)


class SeatSizeExtractor:
    """
    Stateless extractor; one shared instance is fine.

    Usage:
        extractor = SeatSizeExtractor()
        extractor.from_notes('Seat size 17.5, stamped 18')  # ['17,5', '18']
    """

    def from_notes(self, notes: Optional[str]) -> Optional[List[str]]:
        """
        Extract seat sizes from free text

        Returns:
            List of sizes, or None when nothing was found
        """
        if not notes or not notes.strip():
            return None

        result: List[str] = []

        for pattern in UNBOUNDED_PATTERNS:
            for match in pattern.finditer(notes):
                _append_unique(result, match.group(1))

        for pattern in BOUNDED_PATTERNS:
            for match in pattern.finditer(notes):
                if _in_range(match.group(1)):
                    _append_unique(result, match.group(1))

        return result or None

    def from_option_items(self, option_items: Optional[Iterable[dict]]) -> Optional[List[str]]:
        """
        Extract seat sizes from selected order options

        option_items: [{"option_id": 1, "name": "17.5"}, ...]
        """
        if not option_items:
            return None

        result: List[str] = []
        for item in option_items:
            if not isinstance(item, dict):
                continue
            if item.get("option_id") != SEAT_SIZE_OPTION_ID:
                continue
            name = item.get("name")
            if name is not None and str(name).strip():
                _append_unique(result, str(name))

        return result or None

    def extract(self, option_items: Optional[Iterable[dict]] = None,
                *notes: Optional[str]) -> Optional[List[str]]:
        """Option items win; notes are the fallback, tried in the given order"""
        sizes = self.from_option_items(option_items)
        if sizes:
            return sizes

        for text in notes:
            sizes = self.from_notes(text)
            if sizes:
                return sizes

        return None


seat_size_extractor = SeatSizeExtractor()


def merge_seat_sizes(option_sizes: Optional[List[str]], notes_sizes: Optional[List[str]]) -> Optional[List[str]]:
    """Sizes from option items when there are any, otherwise the ones from notes"""
    if option_sizes:
        result: List[str] = []
        for size in option_sizes:
            _append_unique(result, str(size))
        if result:
            return result
    return notes_sizes or None
