"""
Pydantic schemas for request/response validation
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel


# Base model for camelCase aliasing
class CamelCaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True
    )


# Submission schemas
class SubmitSolutionRequest(CamelCaseModel):
    user_id: str
    submitted_query: str = Field(..., max_length=10000)


class SolutionResultResponse(CamelCaseModel):
    is_correct: bool
    attempt_count: int = 0
    exercise_id: str
    user_id: str
    feedback: Optional[str] = None


class CheckSolutionResponse(CamelCaseModel):
    is_correct: bool


# Exercise schemas
class ExerciseResponse(CamelCaseModel):
    id: str
    unit_id: Optional[str] = None
    title: str
    description: str
    difficulty: str
    type: str
    schema_definition: str = Field(validation_alias="schema", serialization_alias="schema")
    check_type: str
    solved_count: int
    attempts_count: int
    created_at: datetime


# Statistics schemas
class UserExerciseStatsResponse(CamelCaseModel):
    user_id: str
    username: str
    total_exercises: int
    solved_exercises: int
    total_attempts: int

    @computed_field
    @property
    def completion_percentage(self) -> float:
        if self.total_exercises <= 0:
            return 0.0
        return round(self.solved_exercises / self.total_exercises * 100, 2)
