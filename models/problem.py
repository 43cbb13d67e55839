import uuid
from typing import List, Optional

from pydantic import Field, field_validator

from .base import RecordModel

CALCULATION_MARKER = "[계산]"

class ProblemBase(RecordModel):
    description: str
    answer: str
    hint: Optional[str] = None
    explanation: Optional[str] = None
    choices: List[str] = Field(default_factory=list)

    @field_validator("choices", mode="before")
    @classmethod
    def coerce_choices(cls, v):
        if v is None:
            return []
        return [str(choice) for choice in v]

class ProblemRecord(ProblemBase):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    file_set_id: Optional[str] = None
    sequence_number: int = 0
    created_at: Optional[str] = None

    @property
    def is_calculation(self) -> bool:
        return CALCULATION_MARKER in (self.description or "")

class ImportedProblem(ProblemRecord):
    """Problem decoded from a tabular row, still carrying its progress columns."""
    is_completed: bool = False
    wrong_count: int = 0

    def to_record(self, file_set_id: str) -> ProblemRecord:
        data = self.model_dump(exclude={"is_completed", "wrong_count"})
        data["file_set_id"] = file_set_id
        return ProblemRecord(**data)

class DistractorEntry(RecordModel):
    answer: str
    category_flag: bool = False
