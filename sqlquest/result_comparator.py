"""
Result Set Comparator
=====================
Positional equality of two tabular results. Column names are ignored;
row order and column order both matter.
"""

from typing import Optional

from .duckdb_sandbox import Cell, TabularResult


class ResultComparator:
    """Structural comparison of query results"""

    @staticmethod
    def cells_equal(left: Cell, right: Cell) -> bool:
        if left.is_null and right.is_null:
            return True
        if left.is_null or right.is_null:
            return False
        if left.kind is not right.kind:
            return False
        return left.value == right.value

    @classmethod
    def equal(cls, first: TabularResult, second: TabularResult) -> bool:
        """True when both results have the same shape and the same cell values in order"""
        if first.row_count != second.row_count:
            return False
        if first.column_count != second.column_count:
            return False

        for first_row, second_row in zip(first.rows, second.rows):
            for first_cell, second_cell in zip(first_row, second_row):
                if not cls.cells_equal(first_cell, second_cell):
                    return False

        return True

    @classmethod
    def describe_difference(cls, actual: TabularResult, expected: TabularResult) -> Optional[str]:
        """Short learner-facing hint about the first mismatch, None when equal"""
        if actual.row_count != expected.row_count:
            return f"Expected {expected.row_count} row(s), got {actual.row_count}"
        if actual.column_count != expected.column_count:
            return f"Expected {expected.column_count} column(s), got {actual.column_count}"

        for index, (actual_row, expected_row) in enumerate(zip(actual.rows, expected.rows), start=1):
            for actual_cell, expected_cell in zip(actual_row, expected_row):
                if not cls.cells_equal(actual_cell, expected_cell):
                    return f"Row {index} does not match the expected values"

        return None
