from datetime import datetime
from uuid import UUID, uuid4
from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field
from videoai.core.formatting import utc_now
from typing import Optional

class Job(SQLModel, table=True):
    __tablename__ = "jobs"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    rq_job_id: Optional[str] = Field(default=None, nullable=True, index=True)  # redis queue job id
    job_type: str = Field(index=True)  # "remote_download", "process", "generate_clips"
    status: str = Field(default="queued", index=True)  # "queued", "running", "completed", "failed"
    owner_id: Optional[UUID] = Field(default=None, nullable=True, index=True)
    video_id: Optional[UUID] = Field(default=None, nullable=True, index=True)
    params: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    progress_percent: int = Field(default=0)
    error_message: Optional[str] = Field(default=None, nullable=True)
    started_at: Optional[datetime] = Field(default=None, nullable=True)
    finished_at: Optional[datetime] = Field(default=None, nullable=True)
    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def is_finished(self) -> bool:
        return self.status in ("completed", "failed")
