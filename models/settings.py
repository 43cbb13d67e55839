from enum import Enum
from typing import Dict

from pydantic import Field

from .base import RecordModel

UNMAPPED = -1

class OrderMode(str, Enum):
    SEQUENTIAL = "sequential"
    RANDOM = "random"

class ColumnMapping(RecordModel):
    description: int = 0
    answer: int = 1
    hint: int = UNMAPPED
    explanation: int = UNMAPPED
    is_completed: int = UNMAPPED
    wrong_count: int = UNMAPPED

    def mapped(self) -> Dict[str, int]:
        """Field name -> column index for every mapped field, in declaration order."""
        return {field: idx for field, idx in self.model_dump().items() if idx != UNMAPPED}

def default_export_mapping() -> ColumnMapping:
    return ColumnMapping(hint=2, explanation=3, is_completed=4, wrong_count=5)

class Settings(RecordModel):
    mode: str = "problem"
    order_mode: OrderMode = OrderMode.RANDOM
    repeat_mode: bool = False
    question_type: str = "multiple"
    card_front: str = "explanation"
    has_header_row: bool = True
    parser_mapping: ColumnMapping = Field(default_factory=ColumnMapping)
    export_mapping: ColumnMapping = Field(default_factory=default_export_mapping)
    theme: str = "light"
    font_size: int = 5
    card_color: str = "indigo"
    card_saturation: int = 70
    card_lightness: int = 60
