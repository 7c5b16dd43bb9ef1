"""
Exercise solution API routes
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from .database import get_db
from .exceptions import NotFoundError
from .schemas import (CheckSolutionResponse, ExerciseResponse, SolutionResultResponse,
                      SubmitSolutionRequest, UserExerciseStatsResponse)
from .submission_service import submission_service


# Create router
exercise_router = APIRouter(prefix="/api/exercise-solutions", tags=["exercise-solutions"])


@exercise_router.post("/{exercise_id}", response_model=SolutionResultResponse)
async def submit_solution(
    exercise_id: str,
    request: SubmitSolutionRequest,
    db: Session = Depends(get_db)
):
    """Grade a submission and record the attempt"""
    try:
        return await submission_service.submit_solution(
            exercise_id, request.user_id, request.submitted_query, db
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@exercise_router.post("/{exercise_id}/check", response_model=CheckSolutionResponse)
async def check_solution(
    exercise_id: str,
    request: SubmitSolutionRequest,
    db: Session = Depends(get_db)
):
    """Grade a submission without recording it"""
    is_correct = await submission_service.check_solution(
        exercise_id, request.user_id, request.submitted_query, db
    )
    return CheckSolutionResponse(is_correct=is_correct)


@exercise_router.get("/stats/{user_id}", response_model=UserExerciseStatsResponse)
def get_user_stats(user_id: str, db: Session = Depends(get_db)):
    try:
        return submission_service.get_user_exercise_stats(user_id, db)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@exercise_router.get("/solved/{user_id}", response_model=List[ExerciseResponse])
def get_solved_exercises(user_id: str, db: Session = Depends(get_db)):
    exercises = submission_service.get_solved_exercises(user_id, db)
    return [ExerciseResponse.model_validate(exercise) for exercise in exercises]


@exercise_router.get("/unsolved/{user_id}", response_model=List[ExerciseResponse])
def get_unsolved_exercises(user_id: str, db: Session = Depends(get_db)):
    exercises = submission_service.get_unsolved_exercises(user_id, db)
    return [ExerciseResponse.model_validate(exercise) for exercise in exercises]
