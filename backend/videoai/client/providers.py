"""
provider selection.

RemoteVideoProvider talks to the api server. FallbackVideoProvider retries
the operations that have an offline equivalent on the mock when the server
cannot be reached; a server that answers with an error is never masked.
"""
import logging
from enum import Enum
from typing import List, Optional

from videoai.client.base import VideoTransferProvider
from videoai.client.config import ClientConfig
from videoai.client.envelope import ApiResponse
from videoai.client.http import ApiTransport
from videoai.client.jobs import JobPoller
from videoai.client.mock import InMemoryVideoStore, MockVideoProvider
from videoai.client.models import ClipRecord, ClipSettings, ProcessingSettings, VideoRecord
from videoai.client.progress import ProgressCallback
from videoai.client.transfer import UploadSource, rewinder, upload_file
from videoai.core.errors import TransportError

logger = logging.getLogger(__name__)


class TransferMode(str, Enum):
    REMOTE = "remote"
    MOCK = "mock"
    FALLBACK = "fallback"


def parse_clips(data) -> List[ClipRecord]:
    return [ClipRecord.model_validate(clip) for clip in data or []]


class RemoteVideoProvider(VideoTransferProvider):
    def __init__(self, transport: ApiTransport, poller: JobPoller):
        self.transport = transport
        self.poller = poller

    def _track(self, response: ApiResponse, **kwargs) -> ApiResponse:
        """wrap a job submission response into an unstarted handle"""
        if not response.ok:
            return response
        job_id = response.data.get("jobId") if isinstance(response.data, dict) else None
        if not job_id:
            return ApiResponse.failure("Server did not return a job id")
        return ApiResponse.success(self.poller.track(job_id, **kwargs))

    def upload_video(self, source: UploadSource, on_progress: Optional[ProgressCallback] = None) -> ApiResponse:
        return upload_file(self.transport, source, on_progress).map(VideoRecord.model_validate)

    def submit_remote_import(self, url: str, quality: str) -> ApiResponse:
        response = self.transport.request("POST", "/api/videos/youtube/download", json={"url": url, "quality": quality})
        return self._track(response, inline_key="videoData", parse=VideoRecord.model_validate)

    def submit_processing(self, video_id: str, settings: ProcessingSettings) -> ApiResponse:
        response = self.transport.request("POST", f"/api/videos/{video_id}/process", json=settings.to_wire())
        return self._track(response, result_path=f"/api/videos/{video_id}", parse=VideoRecord.model_validate)

    def submit_clip_generation(self, video_id: str, settings: ClipSettings) -> ApiResponse:
        response = self.transport.request("POST", f"/api/videos/{video_id}/clips/generate", json=settings.to_wire())
        # only the clips this job produced
        return self._track(response, parse=parse_clips)

    def list_videos(self) -> ApiResponse:
        return self.transport.request("GET", "/api/videos").map(
            lambda videos: [VideoRecord.model_validate(video) for video in videos]
        )

    def get_video(self, video_id: str) -> ApiResponse:
        return self.transport.request("GET", f"/api/videos/{video_id}").map(VideoRecord.model_validate)

    def delete_video(self, video_id: str) -> ApiResponse:
        return self.transport.request("DELETE", f"/api/videos/{video_id}")

    def detect_subjects(self, video_id: str, options: Optional[dict] = None) -> ApiResponse:
        body = options or {"detectFaces": True, "detectPeople": True, "detectObjects": True, "trackMovement": True}
        return self.transport.request("POST", f"/api/videos/{video_id}/detect-subjects", json=body).map(
            VideoRecord.model_validate
        )

    def analyze_engagement(self, video_id: str, options: Optional[dict] = None) -> ApiResponse:
        body = options or {"segmentLength": 5, "analysisDepth": "advanced"}
        return self.transport.request("POST", f"/api/videos/{video_id}/analyze-engagement", json=body).map(
            VideoRecord.model_validate
        )


class FallbackVideoProvider(VideoTransferProvider):
    def __init__(self, primary: VideoTransferProvider, secondary: VideoTransferProvider):
        self.primary = primary
        self.secondary = secondary

    def _with_fallback(self, operation: str, *args, before_retry=None) -> ApiResponse:
        try:
            return getattr(self.primary, operation)(*args)
        except TransportError as e:
            logger.warning(f"Backend API not available, using mock implementation for {operation}: {e}")
            if before_retry is not None:
                before_retry()
            return getattr(self.secondary, operation)(*args)

    def upload_video(self, source, on_progress=None):
        # the failed attempt may have consumed part of an open file
        return self._with_fallback("upload_video", source, on_progress, before_retry=rewinder(source))

    def submit_remote_import(self, url, quality):
        return self._with_fallback("submit_remote_import", url, quality)

    def detect_subjects(self, video_id, options=None):
        return self._with_fallback("detect_subjects", video_id, options)

    def analyze_engagement(self, video_id, options=None):
        return self._with_fallback("analyze_engagement", video_id, options)

    def submit_processing(self, video_id, settings):
        return self.primary.submit_processing(video_id, settings)

    def submit_clip_generation(self, video_id, settings):
        return self.primary.submit_clip_generation(video_id, settings)

    def list_videos(self):
        return self.primary.list_videos()

    def get_video(self, video_id):
        return self.primary.get_video(video_id)

    def delete_video(self, video_id):
        return self.primary.delete_video(video_id)


def build_provider(
    config: ClientConfig,
    transport: ApiTransport,
    poller: JobPoller,
    store: Optional[InMemoryVideoStore] = None
) -> VideoTransferProvider:
    mode = TransferMode(config.transfer_mode)
    if mode == TransferMode.MOCK:
        return MockVideoProvider(config, store)
    remote = RemoteVideoProvider(transport, poller)
    if mode == TransferMode.REMOTE:
        return remote
    return FallbackVideoProvider(remote, MockVideoProvider(config, store))
