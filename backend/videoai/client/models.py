"""
records exchanged with the api server.

field names are snake_case in python and camelCase on the wire.
"""
from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Literal, Optional

VideoStatus = Literal["completed", "processing", "failed"]


class Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class BoundingBox(Record):
    x: float
    y: float
    width: float
    height: float


class TrackingPoint(BoundingBox):
    time: float


class DetectedSubject(Record):
    id: str
    type: Literal["face", "person", "object", "text"]
    confidence: float
    bounding_box: BoundingBox
    tracking_path: Optional[List[TrackingPoint]] = None


class EngagingSegment(Record):
    start_time: float
    end_time: float
    score: float


class EngagementMetrics(Record):
    engaging_segments: List[EngagingSegment]
    overall_score: float


class VideoRecord(Record):
    id: str
    name: str = ""
    platform: str = ""
    date: str = ""
    status: VideoStatus = "completed"
    thumbnail: str = ""
    duration: str = ""
    size: str = ""
    url: Optional[str] = None
    detected_subjects: Optional[List[DetectedSubject]] = None
    engagement_metrics: Optional[EngagementMetrics] = None


class ClipRecord(Record):
    id: str
    title: str
    platform: str
    duration: float
    thumbnail: str = ""
    status: VideoStatus = "completed"
    url: str = ""


class CaptionRecord(Record):
    id: Optional[str] = None
    video_id: str
    text: str
    font: str = "Inter"
    font_size: int = 24
    color: str = "#ffffff"
    background_color: str = "transparent"
    position: str = "bottom"
    alignment: str = "center"
    start_time: float
    end_time: float
    outline: bool = False
    outline_color: str = "#000000"
    shadow: bool = False

    @model_validator(mode="after")
    def check_times(self):
        if self.end_time <= self.start_time:
            raise ValueError("Caption end time must be after its start time")
        return self


class ProcessingSettings(Record):
    model_config = ConfigDict(extra="allow")

    platform: str
    aspect_ratio: str
    resolution: str
    quality: int = 80
    smart_crop: Optional[bool] = None
    face_tracking: Optional[bool] = None
    subject_detection: Optional[bool] = None


class ClipSettings(Record):
    model_config = ConfigDict(extra="allow")

    platforms: List[str]
    clip_count: int = 3
    min_duration: int = 15
    max_duration: int = 60


class PlatformSettings(Record):
    """export settings the dashboard keeps per target platform"""
    aspect_ratio: str
    resolution: str
    quality: int
    auto_caption: bool = False
    ai_optimization: bool = True
    optimization_preset: str = "engagement"
    custom_settings: Dict[str, Any] = {}


class JobStatus(Record):
    """payload of GET /api/jobs/{id}/progress"""
    job_id: str = ""
    status: str = "processing"
    progress: float = 0
    completed: bool = False
    failed: bool = False
    error: Optional[str] = None
    video_data: Optional[VideoRecord] = None
