from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4
from sqlmodel import SQLModel, Field
from videoai.core.formatting import utc_now

class Caption(SQLModel, table=True):
    __tablename__ = "captions"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    owner_id: Optional[UUID] = Field(default=None, foreign_key="users.id", index=True)
    video_id: str = Field(index=True)  # client-side ids are not always server uuids
    text: str
    font: str = Field(default="Inter")
    font_size: int = Field(default=24)
    color: str = Field(default="#ffffff")
    background_color: str = Field(default="transparent")
    position: str = Field(default="bottom")
    alignment: str = Field(default="center")
    start_time: float
    end_time: float
    outline: bool = Field(default=False)
    outline_color: str = Field(default="#000000")
    shadow: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def to_record(self) -> dict:
        return {
            "id": str(self.id),
            "videoId": self.video_id,
            "text": self.text,
            "font": self.font,
            "fontSize": self.font_size,
            "color": self.color,
            "backgroundColor": self.background_color,
            "position": self.position,
            "alignment": self.alignment,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "outline": self.outline,
            "outlineColor": self.outline_color,
            "shadow": self.shadow,
        }
