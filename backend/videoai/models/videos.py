from datetime import datetime
from uuid import UUID, uuid4
from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field
from typing import Optional
from videoai.core.formatting import format_size_mb, format_duration, format_date, utc_now

class Video(SQLModel, table=True):
    __tablename__ = "videos"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    owner_id: UUID = Field(foreign_key="users.id", index=True)
    name: str
    platform: str = Field(default="Unknown", index=True)  # source platform label
    status: str = Field(default="completed", index=True)  # completed, processing, failed
    source_url: Optional[str] = Field(default=None, nullable=True)  # set for remote imports
    stored_path: Optional[str] = Field(default=None, nullable=True)
    processed_path: Optional[str] = Field(default=None, nullable=True)
    thumbnail_path: Optional[str] = Field(default=None, nullable=True)
    duration_ms: int = Field(default=0)
    size_bytes: int = Field(default=0)
    width: int = Field(default=0)
    height: int = Field(default=0)
    detected_subjects: Optional[list] = Field(default=None, sa_column=Column(JSON))
    engagement_metrics: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now)

    def to_record(self) -> dict:
        """wire shape shared with the client VideoRecord"""
        record = {
            "id": str(self.id),
            "name": self.name,
            "platform": self.platform,
            "date": format_date(self.created_at),
            "status": self.status,
            "thumbnail": f"/api/videos/{self.id}/thumbnail" if self.thumbnail_path else "",
            "duration": format_duration(self.duration_ms),
            "size": format_size_mb(self.size_bytes),
        }
        if self.stored_path:
            record["url"] = f"/api/videos/{self.id}/stream"
        if self.detected_subjects is not None:
            record["detectedSubjects"] = self.detected_subjects
        if self.engagement_metrics is not None:
            record["engagementMetrics"] = self.engagement_metrics
        return record
