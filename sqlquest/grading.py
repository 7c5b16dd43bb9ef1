"""
Solution Grading Protocol
=========================
Decides whether a submitted query is correct for an exercise. A cheap
normalized-text comparison runs first; otherwise both the submission and a
reference query run in separate sandboxes and their results are compared.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import NamedTuple, Optional, Tuple, Union

from .duckdb_sandbox import SandboxRunner, TabularResult, sandbox_runner
from .exceptions import ConfigurationError, ExecutionError
from .models import CheckType, Exercise
from .query_normalizer import queries_match
from .result_comparator import ResultComparator

logger = logging.getLogger(__name__)


@dataclass
class ExerciseGradingConfig:
    """The subset of an exercise that drives grading"""
    schema: str = ""
    check_type: Union[CheckType, str] = CheckType.COMPARE
    check_query_insert: str = ""
    check_query_select: str = ""
    solution_query: str = ""

    @classmethod
    def from_exercise(cls, exercise: Exercise) -> "ExerciseGradingConfig":
        try:
            check_type = CheckType(exercise.check_type)
        except ValueError:
            # Unknown strategies fall through to the defensive default
            check_type = exercise.check_type
        return cls(
            schema=exercise.schema or "",
            check_type=check_type,
            check_query_insert=exercise.check_query_insert or "",
            check_query_select=exercise.check_query_select or "",
            solution_query=exercise.solution_query or ""
        )


@dataclass
class GradingVerdict:
    is_correct: bool
    feedback: Optional[str] = None
    error: Optional[str] = None


class QueryRun(NamedTuple):
    """One sandbox execution: the query plus what the sandbox is seeded with"""
    query: str
    schema: str = ""
    fixture_insert: str = ""


def join_statements(*statements: str) -> str:
    """Concatenate SQL batches, skipping blanks and terminating each with a semicolon"""
    parts = []
    for statement in statements:
        if statement and statement.strip():
            parts.append(statement.strip().rstrip(";") + ";")
    return "\n".join(parts)


class SolutionGrader:
    """Grades submissions by text comparison or by sandboxed execution"""

    def __init__(self, runner: Optional[SandboxRunner] = None,
                 comparator: Optional[ResultComparator] = None):
        self.runner = runner or sandbox_runner
        self.comparator = comparator or ResultComparator()

    def check_by_string_comparison(self, user_query: str, solution_query: str) -> bool:
        return queries_match(user_query, solution_query)

    async def check_by_execution(self, user_query: str, solution_query: str,
                                 schema_definition: str, insert_query: str = "") -> bool:
        """Run both queries against identically seeded sandboxes and compare results"""
        try:
            user_result, solution_result = await self._run_pair(
                QueryRun(user_query, schema_definition, insert_query),
                QueryRun(solution_query, schema_definition, insert_query)
            )
        except ExecutionError as e:
            logger.info(f"Execution check failed at {e.stage}: {e} | query: {e.query}")
            return False
        except ConfigurationError:
            return False
        return self.comparator.equal(user_result, solution_result)

    async def grade(self, exercise: ExerciseGradingConfig, submitted_query: str) -> bool:
        verdict = await self.evaluate(exercise, submitted_query)
        return verdict.is_correct

    async def evaluate(self, exercise: ExerciseGradingConfig, submitted_query: str) -> GradingVerdict:
        """
        Grade a submission and explain the outcome.

        SQL and configuration problems become an incorrect verdict with
        feedback. InfrastructureError is left to the caller.
        """
        if self.check_by_string_comparison(submitted_query, exercise.solution_query):
            return GradingVerdict(is_correct=True)

        try:
            runs = self._plan_runs(exercise, submitted_query)
            if runs is None:
                logger.warning(f"Unsupported check type: {exercise.check_type}")
                return GradingVerdict(
                    is_correct=False,
                    feedback="This exercise cannot be checked automatically",
                    error="UnsupportedCheckType"
                )

            submitted_result, reference_result = await self._run_pair(*runs)

        except ConfigurationError as e:
            logger.error(f"Exercise grading configuration invalid: {e}")
            return GradingVerdict(is_correct=False, feedback=str(e), error="ConfigurationError")

        except ExecutionError as e:
            logger.info(f"Submission failed at {e.stage}: {e} | query: {e.query}")
            return GradingVerdict(is_correct=False, feedback=self._execution_feedback(e),
                                  error="ExecutionError")

        difference = self.comparator.describe_difference(submitted_result, reference_result)
        if difference is None:
            return GradingVerdict(is_correct=True)
        return GradingVerdict(is_correct=False, feedback=difference)

    def _plan_runs(self, exercise: ExerciseGradingConfig,
                   submitted_query: str) -> Optional[tuple]:
        """The (submitted, reference) sandbox runs for the exercise's check type"""
        check_type = exercise.check_type

        if check_type == CheckType.COMPARE:
            if not exercise.solution_query.strip():
                raise ConfigurationError("Exercise has no solution query to compare against")
            return (
                QueryRun(submitted_query, exercise.schema, exercise.check_query_insert),
                QueryRun(exercise.solution_query, exercise.schema, exercise.check_query_insert)
            )

        if check_type == CheckType.SELECT:
            if not exercise.check_query_select.strip():
                raise ConfigurationError("Exercise has no check select query")
            return (
                QueryRun(submitted_query, exercise.schema),
                QueryRun(exercise.check_query_select, exercise.schema)
            )

        if check_type == CheckType.INSERT_AND_SELECT:
            if not exercise.check_query_select.strip():
                raise ConfigurationError("Exercise has no check select query")
            if not exercise.solution_query.strip():
                raise ConfigurationError("Exercise has no reference statement to seed from")
            # Same select both times; only the seeding statement differs
            return (
                QueryRun(exercise.check_query_select, exercise.schema,
                         join_statements(exercise.check_query_insert, submitted_query)),
                QueryRun(exercise.check_query_select, exercise.schema,
                         join_statements(exercise.check_query_insert, exercise.solution_query))
            )

        return None

    async def _run_pair(self, submitted: QueryRun,
                        reference: QueryRun) -> Tuple[TabularResult, TabularResult]:
        """
        Execute both runs concurrently, each in its own sandbox.

        A failing submitted run raises ExecutionError. A failing reference
        run means the exercise itself is broken and raises ConfigurationError.
        """
        submitted_result, reference_result = await asyncio.gather(
            self.runner.execute_async(*submitted),
            self.runner.execute_async(*reference),
            return_exceptions=True
        )

        for outcome in (submitted_result, reference_result):
            if isinstance(outcome, BaseException) and not isinstance(outcome, ExecutionError):
                raise outcome

        if isinstance(submitted_result, ExecutionError):
            raise submitted_result
        if isinstance(reference_result, ExecutionError):
            logger.error(f"Reference query failed at {reference_result.stage}: {reference_result} "
                         f"| query: {reference_result.query}")
            raise ConfigurationError(f"Reference query failed: {reference_result}") from reference_result

        return submitted_result, reference_result

    @staticmethod
    def _execution_feedback(error: ExecutionError) -> str:
        if error.stage == "timeout":
            return "Your query took too long to run"
        if error.stage == "schema":
            return "The exercise schema could not be created"
        if error.stage == "fixture":
            return f"Your statement could not be applied: {error}"
        return f"Your query could not be executed: {error}"


# Global grader instance
solution_grader = SolutionGrader()
