import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ResumeRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    name: str  # Original file name
    size: int = Field(ge=0)  # Bytes
    upload_date: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), alias="uploadDate"
    )
    candidate: Optional[str] = None
    skills: list[str] = []
    experience: Optional[str] = None  # e.g. "5 years"


class UploadedFile(BaseModel):
    """File metadata as received from the upload form."""

    name: str
    size: int = Field(ge=0)
