"""
Unit tests for the grading protocol
"""

import unittest
from unittest.mock import AsyncMock, Mock

from sqlquest.duckdb_sandbox import SandboxRunner
from sqlquest.exceptions import InfrastructureError
from sqlquest.grading import ExerciseGradingConfig, SolutionGrader, join_statements
from sqlquest.models import CheckType

SCHEMA = "CREATE TABLE t (x INTEGER);"
FIXTURE = "INSERT INTO t VALUES (2), (1), (3);"


class TestJoinStatements(unittest.TestCase):

    def test_skips_blanks_and_terminates(self):
        self.assertEqual(join_statements("INSERT INTO t VALUES (1);", "", "  ", "SELECT 1"),
                         "INSERT INTO t VALUES (1);\nSELECT 1;")


class TestCompareCheck(unittest.IsolatedAsyncioTestCase):
    """Compare: submission and solution run against the same seeded data"""

    def setUp(self):
        self.grader = SolutionGrader(runner=SandboxRunner(timeout_seconds=5))
        self.exercise = ExerciseGradingConfig(
            schema=SCHEMA,
            check_type=CheckType.COMPARE,
            check_query_insert=FIXTURE,
            solution_query="SELECT x FROM t ORDER BY x"
        )

    async def test_textual_match_skips_execution(self):
        runner = Mock()
        runner.execute_async = AsyncMock()
        grader = SolutionGrader(runner=runner)
        exercise = ExerciseGradingConfig(schema="", solution_query="SELECT 1")

        self.assertTrue(await grader.grade(exercise, "select 1;"))
        runner.execute_async.assert_not_called()

    async def test_equivalent_query_is_correct(self):
        self.assertTrue(await self.grader.grade(self.exercise, "SELECT x AS value FROM t ORDER BY 1"))

    async def test_wrong_order_is_incorrect(self):
        verdict = await self.grader.evaluate(self.exercise, "SELECT x FROM t ORDER BY x DESC")
        self.assertFalse(verdict.is_correct)
        self.assertEqual(verdict.feedback, "Row 1 does not match the expected values")

    async def test_wrong_row_count_feedback(self):
        verdict = await self.grader.evaluate(self.exercise, "SELECT x FROM t WHERE x > 1 ORDER BY x")
        self.assertFalse(verdict.is_correct)
        self.assertEqual(verdict.feedback, "Expected 3 row(s), got 2")

    async def test_syntax_error_is_incorrect(self):
        verdict = await self.grader.evaluate(self.exercise, "SELEC x FROM t")
        self.assertFalse(verdict.is_correct)
        self.assertEqual(verdict.error, "ExecutionError")
        self.assertTrue(verdict.feedback.startswith("Your query could not be executed"))

    async def test_missing_solution_is_incorrect(self):
        self.exercise.solution_query = ""
        verdict = await self.grader.evaluate(self.exercise, "SELECT x FROM t")
        self.assertFalse(verdict.is_correct)
        self.assertEqual(verdict.error, "ConfigurationError")

    async def test_broken_reference_is_configuration_error(self):
        self.exercise.solution_query = "SELECT missing_column FROM t"
        verdict = await self.grader.evaluate(self.exercise, "SELECT x FROM t")
        self.assertFalse(verdict.is_correct)
        self.assertEqual(verdict.error, "ConfigurationError")

    async def test_timeout_is_incorrect(self):
        grader = SolutionGrader(runner=SandboxRunner(timeout_seconds=1))
        verdict = await grader.evaluate(self.exercise, "SELECT SUM(i * 2) FROM range(1000000000000) t(i)")
        self.assertFalse(verdict.is_correct)
        self.assertEqual(verdict.feedback, "Your query took too long to run")

    async def test_check_by_execution(self):
        self.assertTrue(await self.grader.check_by_execution(
            "SELECT x FROM t ORDER BY x", "SELECT x FROM t ORDER BY 1", SCHEMA, FIXTURE))
        self.assertFalse(await self.grader.check_by_execution(
            "SELECT nope", "SELECT x FROM t", SCHEMA, FIXTURE))


class TestSelectCheck(unittest.IsolatedAsyncioTestCase):
    """Select: submission result against the check select, both on the bare schema"""

    def setUp(self):
        self.grader = SolutionGrader(runner=SandboxRunner(timeout_seconds=5))
        self.exercise = ExerciseGradingConfig(
            schema="CREATE TABLE t (x INTEGER); INSERT INTO t VALUES (1), (2);",
            check_type=CheckType.SELECT,
            check_query_select="SELECT COUNT(*) FROM t",
            solution_query="INSERT INTO t VALUES (10), (20)"
        )

    async def test_insert_matching_count_is_correct(self):
        self.assertTrue(await self.grader.grade(self.exercise, "INSERT INTO t VALUES (7), (8)"))

    async def test_insert_wrong_count_is_incorrect(self):
        self.assertFalse(await self.grader.grade(self.exercise, "INSERT INTO t VALUES (7)"))

    async def test_missing_check_select(self):
        self.exercise.check_query_select = ""
        verdict = await self.grader.evaluate(self.exercise, "INSERT INTO t VALUES (7), (8)")
        self.assertFalse(verdict.is_correct)
        self.assertEqual(verdict.error, "ConfigurationError")

    async def test_timeout_is_incorrect(self):
        grader = SolutionGrader(runner=SandboxRunner(timeout_seconds=1))
        verdict = await grader.evaluate(
            self.exercise, "INSERT INTO t SELECT SUM(i * 2)::INTEGER FROM range(1000000000000) r(i)")
        self.assertFalse(verdict.is_correct)
        self.assertEqual(verdict.feedback, "Your query took too long to run")


class TestInsertAndSelectCheck(unittest.IsolatedAsyncioTestCase):
    """InsertAndSelect: the check select runs after each side's statement"""

    def setUp(self):
        self.grader = SolutionGrader(runner=SandboxRunner(timeout_seconds=5))
        self.exercise = ExerciseGradingConfig(
            schema="CREATE TABLE t (x INTEGER, name VARCHAR);",
            check_type=CheckType.INSERT_AND_SELECT,
            check_query_insert="INSERT INTO t VALUES (1, 'a');",
            check_query_select="SELECT x, name FROM t ORDER BY x",
            solution_query="INSERT INTO t VALUES (2, 'b');"
        )

    async def test_matching_insert_is_correct(self):
        self.assertTrue(await self.grader.grade(self.exercise, "INSERT INTO t (name, x) VALUES ('b', 2)"))

    async def test_different_insert_is_incorrect(self):
        verdict = await self.grader.evaluate(self.exercise, "INSERT INTO t VALUES (2, 'c')")
        self.assertFalse(verdict.is_correct)
        self.assertEqual(verdict.feedback, "Row 2 does not match the expected values")

    async def test_failing_statement_is_incorrect(self):
        verdict = await self.grader.evaluate(self.exercise, "INSERT INTO nowhere VALUES (1)")
        self.assertFalse(verdict.is_correct)
        self.assertTrue(verdict.feedback.startswith("Your statement could not be applied"))

    async def test_missing_solution(self):
        self.exercise.solution_query = ""
        self.assertFalse(await self.grader.grade(self.exercise, "INSERT INTO t VALUES (2, 'b')"))

    async def test_timeout_is_incorrect(self):
        grader = SolutionGrader(runner=SandboxRunner(timeout_seconds=1))
        verdict = await grader.evaluate(
            self.exercise, "INSERT INTO t SELECT SUM(i * 2)::INTEGER, 'z' FROM range(1000000000000) r(i)")
        self.assertFalse(verdict.is_correct)
        self.assertEqual(verdict.error, "ExecutionError")
        self.assertEqual(verdict.feedback, "Your query took too long to run")


class TestDispatch(unittest.IsolatedAsyncioTestCase):

    async def test_unknown_check_type_is_incorrect(self):
        grader = SolutionGrader(runner=SandboxRunner(timeout_seconds=5))
        exercise = ExerciseGradingConfig(schema=SCHEMA, check_type="Mystery",
                                         solution_query="SELECT 1")

        verdict = await grader.evaluate(exercise, "SELECT 2")
        self.assertFalse(verdict.is_correct)
        self.assertEqual(verdict.error, "UnsupportedCheckType")

    async def test_from_exercise_keeps_unknown_type(self):
        exercise = Mock(schema=None, check_type="Mystery", check_query_insert=None,
                        check_query_select=None, solution_query="SELECT 1")
        config = ExerciseGradingConfig.from_exercise(exercise)
        self.assertEqual(config.check_type, "Mystery")
        self.assertEqual(config.schema, "")

    async def test_infrastructure_error_propagates(self):
        runner = Mock()
        runner.execute_async = AsyncMock(side_effect=InfrastructureError("no sandbox"))
        grader = SolutionGrader(runner=runner)
        exercise = ExerciseGradingConfig(schema=SCHEMA, solution_query="SELECT x FROM t")

        with self.assertRaises(InfrastructureError):
            await grader.evaluate(exercise, "SELECT 1")


if __name__ == '__main__':
    unittest.main()
