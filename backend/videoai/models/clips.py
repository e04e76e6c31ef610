from datetime import datetime
from uuid import UUID, uuid4
from sqlmodel import SQLModel, Field
from videoai.core.formatting import utc_now
from typing import Optional

class Clip(SQLModel, table=True):
    __tablename__ = "clips"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    video_id: UUID = Field(foreign_key="videos.id", index=True)
    job_id: Optional[UUID] = Field(default=None, nullable=True, index=True)
    title: str
    platform: str = Field(index=True)
    start_ms: int
    end_ms: int
    status: str = Field(default="completed", index=True)
    stored_path: Optional[str] = Field(default=None, nullable=True)
    thumbnail_path: Optional[str] = Field(default=None, nullable=True)
    created_at: datetime = Field(default_factory=utc_now)

    def to_record(self) -> dict:
        return {
            "id": str(self.id),
            "title": self.title,
            "platform": self.platform,
            "duration": (self.end_ms - self.start_ms) // 1000,
            "thumbnail": f"/api/clips/{self.id}/thumbnail" if self.thumbnail_path else "",
            "status": self.status,
            "url": f"/api/clips/{self.id}/stream" if self.stored_path else "",
        }
