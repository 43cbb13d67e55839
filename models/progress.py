import uuid
from typing import Optional

from pydantic import Field

from .base import RecordModel

class Outcome(RecordModel):
    is_correct: Optional[bool] = None
    is_completed: bool = True

class ProgressRecord(RecordModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    problem_id: str
    file_set_id: Optional[str] = None
    is_completed: bool = False
    # None: never attempted
    is_correct: Optional[bool] = None
    wrong_count: int = 0
    last_attempted_at: Optional[str] = None
    completed_at: Optional[str] = None
