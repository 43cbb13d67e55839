import uuid
from typing import Optional

from pydantic import Field

from .base import RecordModel, utc_now_iso

class FileBase(RecordModel):
    original_filename: str
    file_type: str

class FileRecord(FileBase):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    # Cached count; the problems store is authoritative.
    total_problems: int = 0
    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)
    deleted_at: Optional[str] = None

    @property
    def is_trashed(self) -> bool:
        return self.deleted_at is not None
