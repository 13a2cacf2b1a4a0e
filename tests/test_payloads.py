"""Unit tests for best-effort JSON decoding of dashboard answers."""

import unittest

from trademind.diagnostics import (
    DiagnosticLog,
    JSON_DECODE_FAILED,
    JSON_SHAPE_INVALID,
    MARKET_KEY_DEFAULTED,
)
from trademind.domain.models import EarningsItem, MarketMover, MarketOverview
from trademind.domain.payloads import (
    decode_json_payload,
    parse_earnings,
    parse_market_overview,
    strip_code_fences,
)


class TestStripCodeFences(unittest.TestCase):

    def test_json_fence(self):
        self.assertEqual(strip_code_fences('```json\n{"a": 1}\n```'), '{"a": 1}')

    def test_bare_fence(self):
        self.assertEqual(strip_code_fences("```\n[]\n```  "), "[]")

    def test_no_fence(self):
        self.assertEqual(strip_code_fences('  {"a": 1} '), '{"a": 1}')


class TestDecodeJsonPayload(unittest.TestCase):
    """Test decoder fallbacks."""

    def test_valid_json(self):
        self.assertEqual(decode_json_payload('```JSON\n[1, 2]\n```', []), [1, 2])

    def test_invalid_json_returns_default(self):
        """Should never raise; the default comes back."""
        default = {"fallback": True}
        self.assertIs(decode_json_payload("Sorry, no data today.", default), default)

    def test_empty_text_returns_default(self):
        self.assertEqual(decode_json_payload("", []), [])

    def test_failure_logged_and_recorded(self):
        diagnostics = DiagnosticLog()
        with self.assertLogs("trademind.diagnostics", level="WARNING"):
            decode_json_payload("{not json", None, diagnostics)
        self.assertEqual(diagnostics.codes(), [JSON_DECODE_FAILED])

    def test_deeply_nested_json_returns_default(self):
        diagnostics = DiagnosticLog()
        self.assertEqual(decode_json_payload("[" * 100000, "fallback", diagnostics), "fallback")
        self.assertEqual(diagnostics.codes(), [JSON_DECODE_FAILED])


class TestParseMarketOverview(unittest.TestCase):
    """Test market overview normalisation."""

    def test_missing_and_null_keys_default_per_field(self):
        """Fenced payload with null/missing keys gives empty lists."""
        diagnostics = DiagnosticLog()
        overview = parse_market_overview('```json\n{"gainers":[],"losers":null}\n```', diagnostics)
        self.assertEqual(overview, MarketOverview(gainers=(), losers=(), breakouts=()))
        self.assertTrue(overview.is_empty)
        self.assertEqual(diagnostics.count(MARKET_KEY_DEFAULTED), 2)

    def test_partial_success_preserved(self):
        text = '{"gainers": [{"symbol": "RELIANCE", "price": 2450, "change": "+2.5%"}], "breakouts": "none"}'
        overview = parse_market_overview(text)
        self.assertEqual(overview.gainers, (MarketMover("RELIANCE", "2450", "+2.5%"),))
        self.assertEqual(overview.losers, ())
        self.assertEqual(overview.breakouts, ())

    def test_full_payload(self):
        text = """{
          "gainers": [{"symbol": "RELIANCE", "price": "2450", "change": "+2.5%"}],
          "losers": [{"symbol": "TCS", "price": "3200", "change": "-1.2%"}, "junk"],
          "breakouts": [{"symbol": "ZOMATO", "price": "140", "change": "+5%"}]
        }"""
        overview = parse_market_overview(text)
        self.assertEqual([m.symbol for m in overview.gainers], ["RELIANCE"])
        self.assertEqual([m.symbol for m in overview.losers], ["TCS"])
        self.assertEqual(overview.breakouts[0].change, "+5%")

    def test_invalid_json(self):
        diagnostics = DiagnosticLog()
        self.assertEqual(parse_market_overview("no json here", diagnostics), MarketOverview())
        self.assertEqual(diagnostics.codes(), [JSON_DECODE_FAILED])

    def test_array_instead_of_object(self):
        diagnostics = DiagnosticLog()
        self.assertEqual(parse_market_overview("[]", diagnostics), MarketOverview())
        self.assertEqual(diagnostics.codes(), [JSON_SHAPE_INVALID])


class TestParseEarnings(unittest.TestCase):
    """Test earnings calendar decoding."""

    def test_items(self):
        text = """```json
        [
          {"symbol": "TCS", "name": "Tata Consultancy Services", "expectation": "Q3 Results"},
          {"symbol": "INFY", "name": "Infosys"}
        ]
        ```"""
        items = parse_earnings(text)
        self.assertEqual(items, (
            EarningsItem("TCS", "Tata Consultancy Services", "Q3 Results"),
            EarningsItem("INFY", "Infosys", ""),
        ))

    def test_empty_list_is_valid(self):
        """Nobody reporting is a normal, event-free answer."""
        diagnostics = DiagnosticLog()
        self.assertEqual(parse_earnings("[]", diagnostics), ())
        self.assertEqual(diagnostics.events, [])

    def test_object_instead_of_array(self):
        diagnostics = DiagnosticLog()
        self.assertEqual(parse_earnings('{"symbol": "TCS"}', diagnostics), ())
        self.assertEqual(diagnostics.codes(), [JSON_SHAPE_INVALID])

    def test_garbage(self):
        self.assertEqual(parse_earnings("No results today."), ())

    def test_non_object_entries_dropped(self):
        items = parse_earnings('["TCS", {"symbol": "WIPRO", "name": "Wipro", "expectation": "Dividend"}]')
        self.assertEqual([item.symbol for item in items], ["WIPRO"])


if __name__ == "__main__":
    unittest.main()
