"""
Solution Submission Service
===========================
Wraps grading with attempt bookkeeping: every submission is appended to the
attempt log, and exercise/user counters are updated afterwards.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from . import crud
from .exceptions import InfrastructureError, NotFoundError
from .grading import ExerciseGradingConfig, SolutionGrader, solution_grader
from .models import Exercise
from .schemas import SolutionResultResponse, UserExerciseStatsResponse

logger = logging.getLogger(__name__)


class SubmissionService:
    """Grades submissions and keeps attempt and solve statistics"""

    def __init__(self, grader: Optional[SolutionGrader] = None):
        self.grader = grader or solution_grader

    async def submit_solution(self, exercise_id: str, user_id: str, query: str,
                              db: Session) -> SolutionResultResponse:
        """
        Grade a submission and record it.

        Raises NotFoundError for unknown exercise or user ids. Every other
        failure is reported as an incorrect result with feedback.
        """
        try:
            exercise = crud.get_exercise(db, exercise_id)
            if not exercise:
                raise NotFoundError("Exercise", exercise_id)

            user = crud.get_user(db, user_id)
            if not user:
                raise NotFoundError("User", user_id)

            # STEP 1: Grade
            try:
                verdict = await self.grader.evaluate(ExerciseGradingConfig.from_exercise(exercise), query)
            except InfrastructureError as e:
                logger.error(f"Sandbox unavailable while grading exercise {exercise_id}: {e}")
                return SolutionResultResponse(
                    is_correct=False,
                    exercise_id=exercise_id,
                    user_id=user_id,
                    feedback="The checking service is temporarily unavailable. Please retry."
                )

            # STEP 2: Attempt numbering and prior solve state, read before the new row exists
            attempt_count = crud.count_attempts(db, user_id, exercise_id) + 1
            already_solved = crud.has_correct_attempt(db, user_id, exercise_id)

            # STEP 3: Durable attempt record before any counter moves
            crud.add_attempt(db, user_id, exercise_id, query, verdict.is_correct, attempt_count)

            # STEP 4: First solve, guarded by the unique solved marker
            first_solve = False
            if verdict.is_correct and not already_solved:
                first_solve = crud.record_first_solve(db, user_id, exercise_id)

            # STEP 5: Counters
            crud.increment_exercise_counters(db, exercise_id, solved=first_solve)
            crud.increment_user_counters(db, user_id, solved=first_solve)

            logger.info(f"Submission for exercise {exercise_id} by user {user_id}: "
                        f"correct={verdict.is_correct} attempt={attempt_count} first_solve={first_solve}")

            return SolutionResultResponse(
                is_correct=verdict.is_correct,
                attempt_count=attempt_count,
                exercise_id=exercise_id,
                user_id=user_id,
                feedback=verdict.feedback
            )

        except NotFoundError:
            raise

        except Exception as e:
            logger.exception(f"Error submitting solution for exercise {exercise_id} by user {user_id}")
            db.rollback()
            return SolutionResultResponse(
                is_correct=False,
                exercise_id=exercise_id,
                user_id=user_id,
                feedback=f"Error processing solution: {e}"
            )

    async def check_solution(self, exercise_id: str, user_id: str, query: str,
                             db: Session) -> bool:
        """Grade without recording an attempt"""
        try:
            exercise = crud.get_exercise(db, exercise_id)
            if not exercise:
                raise NotFoundError("Exercise", exercise_id)

            return await self.grader.grade(ExerciseGradingConfig.from_exercise(exercise), query)
        except Exception as e:
            logger.error(f"Error checking solution for exercise {exercise_id} by user {user_id}: {e}")
            return False

    def get_user_exercise_stats(self, user_id: str, db: Session) -> UserExerciseStatsResponse:
        user = crud.get_user(db, user_id)
        if not user:
            raise NotFoundError("User", user_id)

        return UserExerciseStatsResponse(
            user_id=user.id,
            username=user.username,
            total_exercises=len(crud.list_exercises(db)),
            solved_exercises=user.solved_exercises_count,
            total_attempts=user.total_attempts_count
        )

    def get_solved_exercises(self, user_id: str, db: Session) -> List[Exercise]:
        solved_ids = crud.get_solved_exercise_ids(db, user_id)
        exercises = []
        for exercise_id in solved_ids:
            exercise = crud.get_exercise(db, exercise_id)
            if exercise:
                exercises.append(exercise)
        return exercises

    def get_unsolved_exercises(self, user_id: str, db: Session) -> List[Exercise]:
        solved_ids = set(crud.get_solved_exercise_ids(db, user_id))
        return [e for e in crud.list_exercises(db) if e.id not in solved_ids]


# Global submission service instance
submission_service = SubmissionService()
