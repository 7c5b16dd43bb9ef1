"""
Unit tests for result set comparison
"""

import unittest
from decimal import Decimal

from sqlquest.duckdb_sandbox import Cell, CellKind, TabularResult
from sqlquest.result_comparator import ResultComparator


def table(columns, *rows):
    return TabularResult.from_rows(columns, list(rows))


class TestCell(unittest.TestCase):
    """Test value canonicalization"""

    def test_kinds(self):
        self.assertEqual(Cell.from_value(None).kind, CellKind.NULL)
        self.assertEqual(Cell.from_value(True), Cell(CellKind.INTEGER, 1))
        self.assertEqual(Cell.from_value(3), Cell(CellKind.INTEGER, 3))
        self.assertEqual(Cell.from_value(Decimal("1.50")), Cell(CellKind.REAL, 1.5))
        self.assertEqual(Cell.from_value("x"), Cell(CellKind.TEXT, "x"))
        self.assertEqual(Cell.from_value(b"\x00\x01"), Cell(CellKind.BLOB, b"\x00\x01"))

    def test_other_values_become_text(self):
        import datetime
        cell = Cell.from_value(datetime.date(2024, 1, 2))
        self.assertEqual(cell, Cell(CellKind.TEXT, "2024-01-02"))


class TestResultComparator(unittest.TestCase):
    """Test ResultComparator"""

    def test_equal_results(self):
        first = table(["a", "b"], (1, "x"), (2, None))
        second = table(["a", "b"], (1, "x"), (2, None))
        self.assertTrue(ResultComparator.equal(first, second))
        self.assertIsNone(ResultComparator.describe_difference(first, second))

    def test_column_names_ignored(self):
        self.assertTrue(ResultComparator.equal(table(["a"], (1,)), table(["total"], (1,))))

    def test_row_order_matters(self):
        first = table(["a"], (1,), (2,))
        second = table(["a"], (2,), (1,))
        self.assertFalse(ResultComparator.equal(first, second))
        self.assertEqual(ResultComparator.describe_difference(first, second),
                         "Row 1 does not match the expected values")

    def test_row_count_mismatch(self):
        first = table(["a"], (1,))
        second = table(["a"], (1,), (2,))
        self.assertFalse(ResultComparator.equal(first, second))
        self.assertEqual(ResultComparator.describe_difference(first, second),
                         "Expected 2 row(s), got 1")

    def test_column_count_mismatch(self):
        first = table(["a", "b"], (1, 2))
        second = table(["a"], (1,))
        self.assertFalse(ResultComparator.equal(first, second))
        self.assertEqual(ResultComparator.describe_difference(first, second),
                         "Expected 1 column(s), got 2")

    def test_null_is_not_zero_or_empty(self):
        self.assertFalse(ResultComparator.equal(table(["a"], (None,)), table(["a"], (0,))))
        self.assertFalse(ResultComparator.equal(table(["a"], (None,)), table(["a"], ("",))))
        self.assertTrue(ResultComparator.equal(table(["a"], (None,)), table(["a"], (None,))))

    def test_integer_and_real_differ(self):
        self.assertFalse(ResultComparator.equal(table(["a"], (1,)), table(["a"], (1.0,))))

    def test_symmetric(self):
        pairs = [
            (table(["a"], (1,)), table(["a"], (1,), (2,))),
            (table(["a"], ("x",)), table(["a"], ("y",))),
            (table(["a"], (None,)), table(["a"], (None,))),
        ]
        for first, second in pairs:
            self.assertEqual(ResultComparator.equal(first, second),
                             ResultComparator.equal(second, first))

    def test_empty_results_equal(self):
        self.assertTrue(ResultComparator.equal(table(["a"]), table(["b"])))


if __name__ == '__main__':
    unittest.main()
