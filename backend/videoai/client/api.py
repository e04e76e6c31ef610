"""
dashboard-facing api client.

every public method returns an ApiResponse. validation problems, error
responses and an unreachable server come back as the envelope's error;
only programming errors and malformed successful payloads raise.
"""
import logging
from typing import Optional, Union

import requests

from videoai.client.auth import TokenStore
from videoai.client.base import VideoTransferProvider
from videoai.client.config import ClientConfig
from videoai.client.envelope import ApiResponse
from videoai.client.http import ApiTransport
from videoai.client.jobs import JobHandle, JobPoller
from videoai.client.mock import InMemoryVideoStore
from videoai.client.models import CaptionRecord, ClipSettings, ProcessingSettings, VideoRecord
from videoai.client.progress import MonotonicProgress, ProgressCallback
from videoai.client.providers import build_provider
from videoai.client.transfer import UploadSource, describe_source
from videoai.core.errors import TransportError, VideoValidationError
from videoai.core.validation import DEFAULT_QUALITY, extract_remote_video_id, validate_quality, validate_video_file

logger = logging.getLogger(__name__)

TIME_RANGES = ("24h", "7d", "30d", "90d")


class ApiClient:
    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        session: Optional[requests.Session] = None,
        store: Optional[InMemoryVideoStore] = None,
        provider: Optional[VideoTransferProvider] = None
    ):
        self.config = config or ClientConfig()
        self.tokens = TokenStore(self.config.token_path)
        self.transport = ApiTransport(self.config, self.tokens, session)
        self.poller = JobPoller(
            self.transport,
            interval=self.config.poll_interval,
            max_failures=self.config.max_poll_failures,
            max_polls=self.config.max_polls,
        )
        self.provider = provider or build_provider(self.config, self.transport, self.poller, store)

    def close(self):
        self.transport.close()

    def _call(self, func, *args, **kwargs) -> ApiResponse:
        try:
            return func(*args, **kwargs)
        except TransportError as e:
            logger.error(f"{getattr(func, '__name__', 'request')} failed: {e}")
            return ApiResponse.failure(str(e))

    def _should_await(self, await_completion: Optional[bool], on_progress) -> bool:
        if await_completion is not None:
            return await_completion
        if self.config.await_completion is not None:
            return self.config.await_completion
        return on_progress is not None

    # auth

    def login(self, email: str, password: str) -> ApiResponse:
        response = self._call(
            self.transport.request,
            "POST",
            "/api/auth/login",
            json={"email": email, "password": password},
            authenticated=False,
        )
        if response.ok and isinstance(response.data, dict) and response.data.get("token"):
            self.tokens.save(response.data["token"], response.data.get("user"))
        return response

    def signup(self, name: str, email: str, password: str) -> ApiResponse:
        return self._call(
            self.transport.request,
            "POST",
            "/api/auth/signup",
            json={"email": email, "password": password, "name": name},
            authenticated=False,
        )

    def logout(self) -> ApiResponse:
        """the local session is dropped even when the server call fails"""
        response = self._call(self.transport.request, "POST", "/api/auth/logout")
        self.tokens.clear()
        return response

    @property
    def current_user(self) -> Optional[dict]:
        return self.tokens.user

    # videos

    def upload_video(self, source: UploadSource, on_progress: Optional[ProgressCallback] = None) -> ApiResponse:
        filename, size = describe_source(source)
        try:
            validate_video_file(filename, size, self.config.supported_formats, self.config.max_upload_size_mb)
        except VideoValidationError as e:
            return ApiResponse.failure(str(e))
        progress = MonotonicProgress(on_progress, strict=True)
        logger.info(f"uploading {filename} ({size} bytes)")
        return self._call(self.provider.upload_video, source, progress)

    def start_remote_download(
        self,
        url: str,
        quality: str = DEFAULT_QUALITY,
        on_progress: Optional[ProgressCallback] = None
    ) -> ApiResponse:
        """submit a remote import and poll it in the background; data is the JobHandle"""
        submitted = self._submit_remote(url, quality)
        return submitted.map(lambda handle: handle.start(on_progress))

    def upload_remote_video(
        self,
        url: str,
        on_progress: Optional[ProgressCallback] = None,
        quality: str = DEFAULT_QUALITY,
        await_completion: Optional[bool] = None
    ) -> ApiResponse:
        invalid = self._check_remote(url, quality)
        if invalid is not None:
            return invalid
        progress = MonotonicProgress(on_progress)
        if on_progress:
            progress(5)

        submitted = self._submit_remote(url, quality)
        if not submitted.ok:
            return submitted
        handle: JobHandle = submitted.data
        if not self._should_await(await_completion, on_progress):
            return ApiResponse.success(VideoRecord(id=handle.job_id, status="processing"))

        if on_progress:
            progress(10)
        return self._call(handle.run, progress)

    def _check_remote(self, url: str, quality: str) -> Optional[ApiResponse]:
        if not extract_remote_video_id(url):
            return ApiResponse.failure("Invalid YouTube URL")
        try:
            validate_quality(quality)
        except VideoValidationError as e:
            return ApiResponse.failure(str(e))
        return None

    def _submit_remote(self, url: str, quality: str) -> ApiResponse:
        invalid = self._check_remote(url, quality)
        if invalid is not None:
            return invalid
        return self._call(self.provider.submit_remote_import, url, quality)

    def process_video(
        self,
        video_id: str,
        settings: Union[ProcessingSettings, dict],
        on_progress: Optional[ProgressCallback] = None,
        await_completion: Optional[bool] = None
    ) -> ApiResponse:
        submitted = self.start_processing(video_id, settings, start=False)
        if not submitted.ok:
            return submitted
        if not self._should_await(await_completion, on_progress):
            return ApiResponse.success(VideoRecord(id=video_id, status="processing"))
        return self._call(submitted.data.run, on_progress)

    def start_processing(
        self,
        video_id: str,
        settings: Union[ProcessingSettings, dict],
        on_progress: Optional[ProgressCallback] = None,
        start: bool = True
    ) -> ApiResponse:
        settings = ProcessingSettings.model_validate(settings)
        submitted = self._call(self.provider.submit_processing, video_id, settings)
        if start:
            return submitted.map(lambda handle: handle.start(on_progress))
        return submitted

    def generate_clips(
        self,
        video_id: str,
        settings: Union[ClipSettings, dict],
        on_progress: Optional[ProgressCallback] = None,
        await_completion: Optional[bool] = None
    ) -> ApiResponse:
        submitted = self.start_clip_generation(video_id, settings, start=False)
        if not submitted.ok:
            return submitted
        if not self._should_await(await_completion, on_progress):
            return ApiResponse.success([])
        return self._call(submitted.data.run, on_progress)

    def start_clip_generation(
        self,
        video_id: str,
        settings: Union[ClipSettings, dict],
        on_progress: Optional[ProgressCallback] = None,
        start: bool = True
    ) -> ApiResponse:
        settings = ClipSettings.model_validate(settings)
        if settings.clip_count < 1:
            return ApiResponse.failure("At least one clip is required")
        if settings.min_duration > settings.max_duration:
            return ApiResponse.failure("Minimum clip duration cannot exceed the maximum")
        submitted = self._call(self.provider.submit_clip_generation, video_id, settings)
        if start:
            return submitted.map(lambda handle: handle.start(on_progress))
        return submitted

    def list_videos(self) -> ApiResponse:
        return self._call(self.provider.list_videos)

    def get_video(self, video_id: str) -> ApiResponse:
        return self._call(self.provider.get_video, video_id)

    def delete_video(self, video_id: str) -> ApiResponse:
        return self._call(self.provider.delete_video, video_id)

    def detect_subjects(self, video_id: str, options: Optional[dict] = None) -> ApiResponse:
        return self._call(self.provider.detect_subjects, video_id, options)

    def analyze_engagement(self, video_id: str, options: Optional[dict] = None) -> ApiResponse:
        return self._call(self.provider.analyze_engagement, video_id, options)

    # captions

    def save_caption(self, caption: Union[CaptionRecord, dict]) -> ApiResponse:
        """create the caption when it has no id yet, otherwise update it"""
        caption = CaptionRecord.model_validate(caption)
        if caption.id:
            response = self._call(
                self.transport.request, "PUT", f"/api/captions/{caption.id}", json=caption.to_wire()
            )
        else:
            response = self._call(self.transport.request, "POST", "/api/captions", json=caption.to_wire())
        return response.map(CaptionRecord.model_validate)

    def get_captions(self, video_id: str) -> ApiResponse:
        response = self._call(self.transport.request, "GET", f"/api/videos/{video_id}/captions")
        return response.map(lambda captions: [CaptionRecord.model_validate(c) for c in captions])

    # analytics

    def get_video_analytics(self, time_range: str = "7d") -> ApiResponse:
        if time_range not in TIME_RANGES:
            return ApiResponse.failure(f"Unsupported time range: {time_range}. Please use: {', '.join(TIME_RANGES)}")
        return self._call(self.transport.request, "GET", "/api/analytics/videos", params={"timeRange": time_range})

    def get_feature_analytics(self) -> ApiResponse:
        return self._call(self.transport.request, "GET", "/api/analytics/features")

    def get_platform_analytics(self) -> ApiResponse:
        return self._call(self.transport.request, "GET", "/api/analytics/platforms")
