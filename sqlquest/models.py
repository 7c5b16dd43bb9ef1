"""
SQLAlchemy models for the application database
"""
from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func
import uuid
import enum

Base = declarative_base()


class CheckType(str, enum.Enum):
    """Grading strategy for an exercise"""
    COMPARE = "Compare"
    SELECT = "Select"
    INSERT_AND_SELECT = "InsertAndSelect"


class Difficulty(str, enum.Enum):
    EASY = "Easy"
    NORMAL = "Normal"
    HARD = "Hard"
    ULTRA_HARD = "UltraHard"


class ExerciseType(str, enum.Enum):
    SELECT_ANSWER = "SelectAnswer"
    FILL_MISSING_WORDS = "FillMissingWords"
    CONSTRUCT_QUERY = "ConstructQuery"
    SIMPLE_QUERY = "SimpleQuery"
    COMPLEX_QUERY = "ComplexQuery"


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(50), unique=True, nullable=False)
    full_name = Column(String(100), nullable=False, default="")
    is_active = Column(Boolean, nullable=False, default=True)
    solved_exercises_count = Column(Integer, default=0, nullable=False)
    total_attempts_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    solutions = relationship("UserSolution", back_populates="user")


class Unit(Base):
    __tablename__ = "units"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, default=func.now(), nullable=False)

    exercises = relationship("Exercise", back_populates="unit")


class Exercise(Base):
    __tablename__ = "exercises"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    unit_id = Column(String, ForeignKey("units.id", ondelete="CASCADE"), nullable=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    is_active = Column(Boolean, nullable=False, default=True)
    difficulty = Column(String(20), nullable=False, default=Difficulty.NORMAL.value)
    type = Column(String(32), nullable=False, default=ExerciseType.SIMPLE_QUERY.value)

    # Grading configuration
    schema = Column(Text, nullable=False, default="")  # DDL applied to every sandbox
    check_type = Column(String(32), nullable=False, default=CheckType.COMPARE.value)
    check_query_insert = Column(Text, nullable=False, default="")  # fixture data
    check_query_select = Column(Text, nullable=False, default="")  # reference select
    solution_query = Column(Text, nullable=False, default="")

    solved_count = Column(Integer, default=0, nullable=False)
    attempts_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    unit = relationship("Unit", back_populates="exercises")
    solutions = relationship("UserSolution", back_populates="exercise")

    __table_args__ = (
        Index('idx_exercises_unit_id', 'unit_id'),
    )


class UserSolution(Base):
    """Append-only attempt log"""
    __tablename__ = "user_solutions"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    exercise_id = Column(String, ForeignKey("exercises.id", ondelete="CASCADE"), nullable=False)
    submitted_query = Column(Text, nullable=False)
    is_correct = Column(Boolean, nullable=False)
    attempt_count = Column(Integer, nullable=False)
    submitted_at = Column(DateTime, default=func.now(), nullable=False)

    user = relationship("User", back_populates="solutions")
    exercise = relationship("Exercise", back_populates="solutions")

    __table_args__ = (
        Index('idx_user_solutions_user_exercise', 'user_id', 'exercise_id'),
    )


class SolvedExercise(Base):
    """One row per (user, exercise) pair, written on the first correct attempt"""
    __tablename__ = "solved_exercises"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    exercise_id = Column(String, ForeignKey("exercises.id", ondelete="CASCADE"), nullable=False)
    solved_at = Column(DateTime, default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint('user_id', 'exercise_id', name='uq_solved_exercises_user_exercise'),
    )
