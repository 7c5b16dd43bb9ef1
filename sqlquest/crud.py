"""
Persistence helpers for exercises, users and the attempt log
"""
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .models import Exercise, SolvedExercise, User, UserSolution


def get_exercise(db: Session, exercise_id: str) -> Optional[Exercise]:
    return db.query(Exercise).filter(Exercise.id == exercise_id).first()


def get_user(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def list_exercises(db: Session) -> List[Exercise]:
    return db.query(Exercise).order_by(Exercise.created_at).all()


def count_attempts(db: Session, user_id: str, exercise_id: str) -> int:
    return db.query(UserSolution).filter(
        UserSolution.user_id == user_id,
        UserSolution.exercise_id == exercise_id
    ).count()


def has_correct_attempt(db: Session, user_id: str, exercise_id: str) -> bool:
    return db.query(UserSolution.id).filter(
        UserSolution.user_id == user_id,
        UserSolution.exercise_id == exercise_id,
        UserSolution.is_correct == True
    ).first() is not None


def add_attempt(db: Session, user_id: str, exercise_id: str, submitted_query: str,
                is_correct: bool, attempt_count: int) -> UserSolution:
    """Append an attempt and commit it"""
    attempt = UserSolution(
        user_id=user_id,
        exercise_id=exercise_id,
        submitted_query=submitted_query,
        is_correct=is_correct,
        attempt_count=attempt_count
    )

    db.add(attempt)
    db.commit()
    db.refresh(attempt)

    return attempt


def record_first_solve(db: Session, user_id: str, exercise_id: str) -> bool:
    """
    Insert the solved marker for (user, exercise).

    Returns False when the pair was already marked, which the unique
    constraint reports even when two requests race.
    """
    db.add(SolvedExercise(user_id=user_id, exercise_id=exercise_id))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        return False
    return True


def increment_exercise_counters(db: Session, exercise_id: str, solved: bool = False):
    values = {Exercise.attempts_count: Exercise.attempts_count + 1}
    if solved:
        values[Exercise.solved_count] = Exercise.solved_count + 1

    db.query(Exercise).filter(Exercise.id == exercise_id).update(values, synchronize_session=False)
    db.commit()


def increment_user_counters(db: Session, user_id: str, solved: bool = False):
    values = {User.total_attempts_count: User.total_attempts_count + 1}
    if solved:
        values[User.solved_exercises_count] = User.solved_exercises_count + 1

    db.query(User).filter(User.id == user_id).update(values, synchronize_session=False)
    db.commit()


def get_correct_solutions_by_user(db: Session, user_id: str) -> List[UserSolution]:
    return db.query(UserSolution).filter(
        UserSolution.user_id == user_id,
        UserSolution.is_correct == True
    ).order_by(UserSolution.submitted_at.desc()).all()


def get_solved_exercise_ids(db: Session, user_id: str) -> List[str]:
    """Distinct solved exercise ids, most recently solved first"""
    solved_ids = []
    for solution in get_correct_solutions_by_user(db, user_id):
        if solution.exercise_id not in solved_ids:
            solved_ids.append(solution.exercise_id)
    return solved_ids
