"""
in-process stand-in for the api server, used when it is unreachable or when
the client runs in mock mode. timings are configurable so tests can run with
zero delays.
"""
import logging
import math
import random
import threading
import time
from datetime import datetime
from typing import Callable, List, Optional
from uuid import uuid4

from videoai.client.base import VideoTransferProvider
from videoai.client.config import ClientConfig
from videoai.client.envelope import ApiResponse
from videoai.client.jobs import JobHandle
from videoai.client.models import (
    ClipRecord,
    ClipSettings,
    DetectedSubject,
    EngagementMetrics,
    ProcessingSettings,
    VideoRecord,
)
from videoai.client.progress import MonotonicProgress, ProgressCallback
from videoai.client.transfer import UploadSource, describe_source
from videoai.core.formatting import format_date, format_size_mb
from videoai.core.validation import extract_remote_video_id

logger = logging.getLogger(__name__)

DEMO_THUMBNAIL = "https://images.unsplash.com/photo-1611162616475-46b635cb6868?w=120&q=80"

DEMO_VIDEOS = [
    {"id": "1", "name": "Product Demo.mp4", "platform": "YouTube", "date": "2023-06-15",
     "status": "completed", "thumbnail": DEMO_THUMBNAIL, "duration": "2:15", "size": "24.5 MB"},
    {"id": "2", "name": "Tutorial Video.mp4", "platform": "Instagram", "date": "2023-06-14",
     "status": "processing",
     "thumbnail": "https://images.unsplash.com/photo-1626379953822-baec19c3accd?w=120&q=80",
     "duration": "1:30", "size": "18.2 MB"},
    {"id": "3", "name": "Marketing Clip.mp4", "platform": "TikTok", "date": "2023-06-13",
     "status": "failed",
     "thumbnail": "https://images.unsplash.com/photo-1536240478700-b869070f9279?w=120&q=80",
     "duration": "0:45", "size": "8.7 MB"},
]


def canned_subjects() -> List[DetectedSubject]:
    face_path = [
        {"time": i * 2, "x": 20 + math.sin(i * 0.5) * 5, "y": 15 + math.cos(i * 0.5) * 3, "width": 30, "height": 40}
        for i in range(10)
    ]
    person_path = [
        {"time": i * 2, "x": 60 + i * 0.5, "y": 25, "width": 25, "height": 60}
        for i in range(10)
    ]
    subjects = [
        {"id": "subject-1", "type": "face", "confidence": 0.95,
         "boundingBox": {"x": 20, "y": 15, "width": 30, "height": 40}, "trackingPath": face_path},
        {"id": "subject-2", "type": "person", "confidence": 0.88,
         "boundingBox": {"x": 60, "y": 25, "width": 25, "height": 60}, "trackingPath": person_path},
        {"id": "subject-3", "type": "object", "confidence": 0.75,
         "boundingBox": {"x": 40, "y": 60, "width": 20, "height": 15}},
    ]
    return [DetectedSubject.model_validate(subject) for subject in subjects]

def canned_engagement() -> EngagementMetrics:
    return EngagementMetrics.model_validate({
        "engagingSegments": [
            {"startTime": 5, "endTime": 15, "score": 0.92},
            {"startTime": 32, "endTime": 48, "score": 0.85},
            {"startTime": 67, "endTime": 78, "score": 0.78},
        ],
        "overallScore": 0.76,
    })


class InMemoryVideoStore:
    """video records held by the mock provider, newest first"""

    def __init__(self, records: Optional[List[VideoRecord]] = None):
        self._lock = threading.Lock()
        self._records = list(records or [])

    @classmethod
    def with_demo_records(cls) -> "InMemoryVideoStore":
        return cls([VideoRecord.model_validate(video) for video in DEMO_VIDEOS])

    def all(self) -> List[VideoRecord]:
        with self._lock:
            return [record.model_copy(deep=True) for record in self._records]

    def get(self, video_id: str) -> Optional[VideoRecord]:
        with self._lock:
            for record in self._records:
                if record.id == video_id:
                    return record.model_copy(deep=True)
        return None

    def add(self, record: VideoRecord):
        with self._lock:
            self._records.insert(0, record.model_copy(deep=True))

    def update(self, video_id: str, **changes) -> Optional[VideoRecord]:
        with self._lock:
            for index, record in enumerate(self._records):
                if record.id == video_id:
                    self._records[index] = record.model_copy(update=changes, deep=True)
                    return self._records[index].model_copy(deep=True)
        return None

    def remove(self, video_id: str) -> bool:
        with self._lock:
            before = len(self._records)
            self._records = [record for record in self._records if record.id != video_id]
            return len(self._records) != before

    def __len__(self):
        with self._lock:
            return len(self._records)


class SimulatedJob:
    """
    a job that advances on its own timer the way a worker would.
    `work` runs once progress reaches 100 and produces the job result.
    """

    def __init__(self, tick: float, step: int, settle: float, work: Callable[[], ApiResponse]):
        self.job_id = uuid4().hex
        self._tick = tick
        self._step = step
        self._settle = settle
        self._work = work
        self._lock = threading.Lock()
        self.progress = 0
        self.outcome: Optional[ApiResponse] = None
        self._thread = threading.Thread(target=self._run, name=f"mock-job-{self.job_id}", daemon=True)
        self._thread.start()

    def _run(self):
        while True:
            time.sleep(self._tick)
            with self._lock:
                self.progress = min(100, self.progress + self._step)
                if self.progress >= 100:
                    break
        time.sleep(self._settle)
        try:
            outcome = self._work()
        except Exception as e:
            logger.exception(f"mock job {self.job_id} failed")
            outcome = ApiResponse.failure(str(e))
        with self._lock:
            self.outcome = outcome

    def status(self) -> ApiResponse:
        with self._lock:
            finished = self.outcome is not None
            payload = {
                "jobId": self.job_id,
                "status": "processing",
                "progress": self.progress,
                "completed": finished and self.outcome.ok,
                "failed": finished and not self.outcome.ok,
            }
            if finished:
                payload["status"] = "completed" if self.outcome.ok else "failed"
                if not self.outcome.ok:
                    payload["error"] = self.outcome.error
        return ApiResponse.success(payload)

    def result(self) -> ApiResponse:
        with self._lock:
            return self.outcome or ApiResponse.failure(f"Job {self.job_id} is not finished yet")

    def handle(self, parse=None, interval: float = 0.2, max_polls: int = 0) -> JobHandle:
        return JobHandle(
            self.job_id,
            fetch_status=self.status,
            fetch_result=self.result,
            parse=parse,
            interval=interval,
            max_polls=max_polls,
        )


class MockVideoProvider(VideoTransferProvider):
    def __init__(self, config: ClientConfig, store: Optional[InMemoryVideoStore] = None):
        self.config = config
        self.store = store if store is not None else InMemoryVideoStore.with_demo_records()

    def _simulate_transfer(self, progress: MonotonicProgress):
        value = 0
        while value < 100:
            time.sleep(self.config.mock_tick)
            value = min(100, value + self.config.mock_step)
            progress(value)

    def _job(self, tick: float, step: int, work: Callable[[], ApiResponse], parse=None) -> JobHandle:
        job = SimulatedJob(tick, step, self.config.mock_settle, work)
        return job.handle(parse=parse, interval=tick, max_polls=self.config.max_polls)

    def upload_video(self, source: UploadSource, on_progress: Optional[ProgressCallback] = None) -> ApiResponse:
        filename, size = describe_source(source)
        progress = on_progress if isinstance(on_progress, MonotonicProgress) else MonotonicProgress(on_progress, strict=True)
        self._simulate_transfer(progress)
        time.sleep(self.config.mock_settle)

        record = VideoRecord(
            id=uuid4().hex[:7],
            name=filename,
            platform="Unknown",
            date=format_date(),
            status="completed",
            thumbnail=DEMO_THUMBNAIL,
            duration="1:30",
            size=format_size_mb(size),
        )
        self.store.add(record)
        logger.info(f"mock upload stored {filename} as {record.id}")
        return ApiResponse.success(record)

    def submit_remote_import(self, url: str, quality: str) -> ApiResponse:
        remote_id = extract_remote_video_id(url)
        if not remote_id:
            return ApiResponse.failure("Invalid YouTube URL")

        def work() -> ApiResponse:
            record = VideoRecord(
                id=f"yt-{remote_id}",
                name=f"YouTube Import - {datetime.now().strftime('%H:%M:%S')}",
                platform="YouTube",
                date=format_date(),
                status="completed",
                thumbnail=f"https://img.youtube.com/vi/{remote_id}/mqdefault.jpg",
                duration="3:45",
                size="32.7 MB",
                url=f"https://www.youtube.com/watch?v={remote_id}",
            )
            self.store.add(record)
            return ApiResponse.success(record)

        return ApiResponse.success(
            self._job(self.config.mock_tick, self.config.mock_step, work, parse=VideoRecord.model_validate)
        )

    def submit_processing(self, video_id: str, settings: ProcessingSettings) -> ApiResponse:
        if self.store.update(video_id, status="processing", platform=settings.platform or "YouTube") is None:
            return ApiResponse.failure("Video not found")

        def work() -> ApiResponse:
            record = self.store.update(video_id, status="completed")
            if record is None:
                return ApiResponse.failure("Video not found")
            return ApiResponse.success(record)

        return ApiResponse.success(
            self._job(self.config.mock_process_tick, self.config.mock_process_step, work, parse=VideoRecord.model_validate)
        )

    def submit_clip_generation(self, video_id: str, settings: ClipSettings) -> ApiResponse:
        platforms = settings.platforms or ["youtube"]
        stamp = int(time.time() * 1000)

        def work() -> ApiResponse:
            clips = [
                ClipRecord(
                    id=f"clip-{stamp}-{i}",
                    title=f"Auto-generated clip {i + 1}",
                    platform=platforms[i % len(platforms)],
                    duration=random.randint(settings.min_duration, max(settings.min_duration, settings.max_duration)),
                    thumbnail=f"https://images.unsplash.com/photo-{1570000000000 + i}?w=400&q=80",
                    status="completed",
                    url="#",
                )
                for i in range(settings.clip_count)
            ]
            return ApiResponse.success(clips)

        return ApiResponse.success(
            self._job(self.config.mock_process_tick, self.config.mock_process_step, work)
        )

    def list_videos(self) -> ApiResponse:
        time.sleep(self.config.mock_settle)
        return ApiResponse.success(self.store.all())

    def get_video(self, video_id: str) -> ApiResponse:
        record = self.store.get(video_id)
        if record is None:
            return ApiResponse.failure("Video not found")
        return ApiResponse.success(record)

    def delete_video(self, video_id: str) -> ApiResponse:
        deleted = self.store.remove(video_id)
        return ApiResponse.success({"id": video_id, "deleted": deleted})

    def detect_subjects(self, video_id: str, options: Optional[dict] = None) -> ApiResponse:
        subjects = canned_subjects()
        record = self.store.update(video_id, detected_subjects=subjects)
        return ApiResponse.success(record or VideoRecord(id=video_id, detected_subjects=subjects))

    def analyze_engagement(self, video_id: str, options: Optional[dict] = None) -> ApiResponse:
        metrics = canned_engagement()
        record = self.store.update(video_id, engagement_metrics=metrics)
        return ApiResponse.success(record or VideoRecord(id=video_id, engagement_metrics=metrics))
