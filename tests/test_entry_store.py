# tests/test_entry_store.py

"""Tests for snapshot decoding, encoding and day-key helpers."""

import json
import unittest
from datetime import date

from src.history import entry_store


class TestDayKeys(unittest.TestCase):
    """format_day_key / parse_day_key behaviour."""

    def test_format_zero_pads(self) -> None:
        """Month and day are zero-padded to two digits."""
        self.assertEqual(
            entry_store.format_day_key(date(2026, 3, 5)), "20260305",
        )

    def test_parse_valid_date(self) -> None:
        """A real YYYYMMDD day parses to a date."""
        self.assertEqual(
            entry_store.parse_day_key("20151021"), date(2015, 10, 21),
        )

    def test_parse_rejects_garbage(self) -> None:
        """Non-date strings are rejected."""
        self.assertIsNone(entry_store.parse_day_key("INVALID"))
        self.assertIsNone(entry_store.parse_day_key("Dec 24th 0000"))

    def test_parse_rejects_impossible_day(self) -> None:
        """February 30th is not a calendar day."""
        self.assertIsNone(entry_store.parse_day_key("20260230"))

    def test_parse_rejects_short_keys(self) -> None:
        """Keys must be exactly eight digits."""
        self.assertIsNone(entry_store.parse_day_key("2026011"))
        self.assertIsNone(entry_store.parse_day_key("202601011"))

    def test_parse_rejects_non_strings(self) -> None:
        """Only strings can be day-keys."""
        self.assertIsNone(entry_store.parse_day_key(20260101))


class TestDecode(unittest.TestCase):
    """decode() never raises and tags its result."""

    def test_absent_is_empty(self) -> None:
        """None and blank text decode to an empty history."""
        for text in (None, "", "   "):
            with self.subTest(text=text):
                decoded = entry_store.decode(text)
                self.assertEqual(decoded.status, "empty")
                self.assertEqual(decoded.entries, {})

    def test_valid_map(self) -> None:
        """A JSON object decodes to its entries."""
        decoded = entry_store.decode('{"19700101":0.01}')
        self.assertEqual(decoded.status, "ok")
        self.assertTrue(decoded.is_usable)
        self.assertEqual(decoded.entries, {"19700101": 0.01})

    def test_malformed_json_is_invalid(self) -> None:
        """Unparseable text is reported and treated as no history."""
        with self.assertLogs(
            "price_history.entry_store", level="WARNING",
        ) as logs:
            decoded = entry_store.decode("{not json", "SKU-1")
        self.assertEqual(decoded.status, "invalid")
        self.assertEqual(decoded.entries, {})
        self.assertIn("SKU-1", logs.output[0])

    def test_non_object_json_is_invalid(self) -> None:
        """JSON arrays and numbers are not price maps."""
        for text in ("[1, 2]", "42"):
            with self.subTest(text=text):
                decoded = entry_store.decode(text)
                self.assertEqual(decoded.status, "invalid")
                self.assertFalse(decoded.is_usable)

    def test_deeply_nested_json_is_invalid(self) -> None:
        """Nesting deeper than the parser allows is no history."""
        text = "[" * 100000 + "]" * 100000
        with self.assertLogs("price_history.entry_store", level="WARNING"):
            decoded = entry_store.decode(text, "SKU-1")
        self.assertEqual(decoded.status, "invalid")
        self.assertEqual(decoded.entries, {})

    def test_overflow_sentinel(self) -> None:
        """The overflow marker decodes to an overflow status."""
        decoded = entry_store.decode(json.dumps("Dataset too large!"))
        self.assertEqual(decoded.status, "overflow")
        self.assertEqual(decoded.entries, {})


class TestEncode(unittest.TestCase):
    """encode(), size() and latest()."""

    def test_encode_sorts_keys_compactly(self) -> None:
        """Keys are written in ascending order without whitespace."""
        text = entry_store.encode({"20260402": 1, "20260401": 2.5})
        self.assertEqual(text, '{"20260401":2.5,"20260402":1}')

    def test_size_matches_encoding(self) -> None:
        """size() is the length of the canonical encoding."""
        data = {"19700101": 0.01}
        self.assertEqual(entry_store.size(data), len('{"19700101":0.01}'))

    def test_size_of_empty(self) -> None:
        """An empty map encodes to '{}'."""
        self.assertEqual(entry_store.size({}), 2)

    def test_latest_single_entry(self) -> None:
        """The only entry is the latest."""
        self.assertEqual(entry_store.latest({"16990101": 0.01}), 0.01)

    def test_latest_unsorted_entries(self) -> None:
        """Insertion order does not matter, the greatest day wins."""
        data = {"16990101": 0.01, "17010315": 0.02, "16991010": 0.05}
        self.assertEqual(entry_store.latest(data), 0.02)

    def test_latest_empty(self) -> None:
        """An empty history has no latest price."""
        self.assertIsNone(entry_store.latest({}))

    def test_to_entries_oldest_first(self) -> None:
        """Typed entries come out in chronological order."""
        entries = entry_store.to_entries(
            {"20260402": 1.0, "20260401": 2.0},
        )
        self.assertEqual(
            [e.day_key for e in entries], ["20260401", "20260402"],
        )
        self.assertEqual(entries[0].price, 2.0)


if __name__ == "__main__":
    unittest.main()
