"""
Error taxonomy for solution checking
"""
from typing import Optional


class SolutionCheckError(Exception):
    """Base class for solution-checking failures"""
    pass


class ConfigurationError(SolutionCheckError):
    """Raised when an exercise's grading configuration cannot be used"""
    pass


class ExecutionError(SolutionCheckError):
    """Raised when SQL fails to apply or run inside a sandbox"""

    def __init__(self, message: str, stage: str = "query", query: Optional[str] = None):
        super().__init__(message)
        self.stage = stage
        self.query = query


class InfrastructureError(SolutionCheckError):
    """Raised when a sandbox instance cannot be allocated at all"""
    pass


class NotFoundError(SolutionCheckError):
    """Raised when an exercise or user id does not resolve"""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} with ID {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id
