import math
import unittest

from market_core.formatting import (
    PLACEHOLDER,
    coerce_number,
    format_metric,
    format_money,
    format_number,
    format_percent,
    format_range_or_value,
    is_ambiguous_percent,
    normalise_percent,
    parse_range,
)


class TestCoerceNumber(unittest.TestCase):
    """Textual and numeric inputs coerced to plain numbers"""

    def test_numbers_pass_through_unchanged(self):
        for n in (0, 7, -3, 7.5, 1234.56, 1e9):
            self.assertEqual(coerce_number(n), n)
        self.assertIs(coerce_number(42), 42)

    def test_decimal_comma(self):
        self.assertEqual(coerce_number("7,5"), 7.5)

    def test_european_thousands_and_decimal(self):
        self.assertAlmostEqual(coerce_number("1.234,56"), 1234.56)

    def test_currency_and_percent_symbols(self):
        self.assertEqual(coerce_number("€17,25"), 17.25)
        self.assertEqual(coerce_number("8,2%"), 8.2)
        self.assertEqual(coerce_number(" 12.5 € "), 12.5)

    def test_empty_and_placeholder_values(self):
        self.assertIsNone(coerce_number(""))
        self.assertIsNone(coerce_number("   "))
        self.assertIsNone(coerce_number(None))
        self.assertIsNone(coerce_number(PLACEHOLDER))

    def test_unparseable_text_returns_none(self):
        self.assertIsNone(coerce_number("n/a"))
        self.assertIsNone(coerce_number("abc"))

    def test_leading_number_is_used(self):
        self.assertEqual(coerce_number("150 - 200"), 150)
        self.assertEqual(coerce_number("12 months"), 12)

    def test_booleans_are_not_numbers(self):
        self.assertIsNone(coerce_number(True))


class TestNormalisePercent(unittest.TestCase):
    def test_fraction_is_scaled(self):
        for v in (0.01, 0.075, 0.5, 1.0):
            self.assertAlmostEqual(normalise_percent(v), v * 100)

    def test_whole_percent_unchanged(self):
        for v in (1.5, 7.5, 12, 99.9):
            self.assertEqual(normalise_percent(v), v)

    def test_text_inputs(self):
        self.assertAlmostEqual(normalise_percent("0.075"), 7.5)
        self.assertAlmostEqual(normalise_percent("7,5%"), 7.5)
        self.assertIsNone(normalise_percent(""))

    def test_both_representations_render_the_same(self):
        self.assertEqual(format_percent(normalise_percent("0.075")), "7.50%")
        self.assertEqual(format_percent(normalise_percent("7.5")), "7.50%")

    def test_boundary_values_are_flagged_ambiguous(self):
        # 1.0 is read as a fraction (100%) although it may mean 1%
        self.assertEqual(normalise_percent(1.0), 100.0)
        self.assertTrue(is_ambiguous_percent(1.0))
        self.assertTrue(is_ambiguous_percent(1.004))
        self.assertTrue(is_ambiguous_percent("0,998"))
        self.assertFalse(is_ambiguous_percent(0.075))
        self.assertFalse(is_ambiguous_percent(7.5))
        self.assertFalse(is_ambiguous_percent(None))


class TestParseRange(unittest.TestCase):
    def test_separators(self):
        self.assertEqual(parse_range("150 - 200"), (150.0, 200.0))
        self.assertEqual(parse_range("150–200"), (150.0, 200.0))
        self.assertEqual(parse_range("3 to 6"), (3.0, 6.0))
        self.assertEqual(parse_range("1,5 - 2,5"), (1.5, 2.5))

    def test_single_values_are_not_ranges(self):
        self.assertIsNone(parse_range("-5"))
        self.assertIsNone(parse_range("1.234,56"))
        self.assertIsNone(parse_range(12))
        self.assertIsNone(parse_range(None))

    def test_each_side_formatted_independently(self):
        self.assertEqual(format_range_or_value("150 - 200"), "150.00 – 200.00")
        self.assertEqual(format_range_or_value("4,2"), "4.20")
        self.assertEqual(format_range_or_value(None), PLACEHOLDER)


class TestFormatters(unittest.TestCase):
    def test_placeholder_for_missing(self):
        for fmt in (format_number, format_money, format_percent):
            self.assertEqual(fmt(None), PLACEHOLDER)
            self.assertEqual(fmt(math.nan), PLACEHOLDER)
            self.assertEqual(fmt("abc"), PLACEHOLDER)

    def test_format_number(self):
        self.assertEqual(format_number(3800000), "3,800,000")
        self.assertEqual(format_number(1234.56), "1,235")
        self.assertEqual(format_number(12.5), "12.5")
        self.assertEqual(format_number(36), "36")
        self.assertEqual(format_number(0), "0")

    def test_format_money(self):
        self.assertEqual(format_money(27.5), "27.50")
        self.assertEqual(format_money(1234.5), "1,234.50")

    def test_format_percent_does_not_rescale(self):
        self.assertEqual(format_percent(7.9), "7.90%")
        self.assertEqual(format_percent(0.5), "0.50%")

    def test_format_metric_by_kind(self):
        self.assertEqual(format_metric("vacancy_rate", 0.079), "7.90%")
        self.assertEqual(format_metric("prime_yield", "5,0"), "5.00%")
        self.assertEqual(format_metric("prime_rent", "27,50"), "27.50")
        self.assertEqual(format_metric("total_stock", 3800000), "3,800,000")
        self.assertEqual(format_metric("vacancy", "n/a"), PLACEHOLDER)
        self.assertEqual(format_metric("service_charge", "150 - 200", allow_range=True), "150.00 – 200.00")


if __name__ == "__main__":
    unittest.main()
