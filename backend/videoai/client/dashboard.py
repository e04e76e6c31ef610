"""
dashboard state: the video being edited, transfer progress, the target
platform and its export settings. methods wire user actions to the api client.
"""
import logging
from typing import Dict, List, Optional

from videoai.client.api import ApiClient
from videoai.client.envelope import ApiResponse
from videoai.client.models import ClipRecord, ClipSettings, PlatformSettings, ProcessingSettings, VideoRecord
from videoai.client.transfer import UploadSource
from videoai.core.validation import DEFAULT_QUALITY

logger = logging.getLogger(__name__)

PLATFORM_DEFAULTS = {
    "youtube": {
        "aspect_ratio": "16:9",
        "resolution": "1920x1080",
        "quality": 80,
        "auto_caption": False,
        "optimization_preset": "engagement",
        "custom_settings": {"endScreen": True, "annotations": False},
    },
    "instagram": {
        "aspect_ratio": "1:1",
        "resolution": "1080x1080",
        "quality": 70,
        "auto_caption": True,
        "optimization_preset": "aesthetic",
        "custom_settings": {"filter": "normal", "boomerang": False},
    },
    "tiktok": {
        "aspect_ratio": "9:16",
        "resolution": "1080x1920",
        "quality": 75,
        "auto_caption": True,
        "optimization_preset": "trending",
        "custom_settings": {"addMusic": True, "effects": "none"},
    },
}

PLATFORM_NAMES = {
    "youtube": "YouTube Short",
    "instagram": "Instagram Reel",
    "tiktok": "TikTok",
}


def default_platform_settings() -> Dict[str, PlatformSettings]:
    return {name: PlatformSettings(**values) for name, values in PLATFORM_DEFAULTS.items()}

def platform_name(platform: str) -> str:
    return PLATFORM_NAMES.get(platform.lower(), platform)


class Dashboard:
    def __init__(self, client: ApiClient):
        self.client = client

        self.current_video: Optional[VideoRecord] = None
        self.current_video_url = ""
        self.current_thumbnail_url = ""
        self.current_video_name = ""
        self.is_video_uploaded = False

        self.is_uploading = False
        self.upload_progress = 0
        self.is_processing = False
        self.processing_progress = 0
        self.is_generating_shorts = False
        self.generation_progress = 0

        self.selected_platform = "youtube"
        self.platform_settings = default_platform_settings()
        self.generated_clips: List[ClipRecord] = []
        self.last_error: Optional[str] = None

    @property
    def settings(self) -> PlatformSettings:
        return self.platform_settings[self.selected_platform]

    def _on_upload_progress(self, percent: int):
        self.upload_progress = percent

    def _on_processing_progress(self, percent: int):
        self.processing_progress = percent

    def _on_generation_progress(self, percent: int):
        self.generation_progress = percent

    def _record_outcome(self, response: ApiResponse) -> ApiResponse:
        self.last_error = response.error
        if response.error:
            logger.error(f"dashboard action failed: {response.error}")
        return response

    def _adopt(self, video: VideoRecord):
        self.current_video = video
        self.select_video(video.url or "", video.thumbnail, video.name)

    def upload(self, source: UploadSource) -> ApiResponse:
        self.is_uploading = True
        self.upload_progress = 0
        try:
            response = self.client.upload_video(source, on_progress=self._on_upload_progress)
        finally:
            self.is_uploading = False
        if response.ok:
            self._adopt(response.data)
        return self._record_outcome(response)

    def import_remote(self, url: str, quality: str = DEFAULT_QUALITY) -> ApiResponse:
        self.is_uploading = True
        self.upload_progress = 0
        try:
            response = self.client.upload_remote_video(
                url, on_progress=self._on_upload_progress, quality=quality, await_completion=True
            )
        finally:
            self.is_uploading = False
        if response.ok:
            self._adopt(response.data)
        return self._record_outcome(response)

    def select_video(self, video_url: str, thumbnail_url: str, video_name: str):
        self.current_video_url = video_url
        self.current_thumbnail_url = thumbnail_url
        self.current_video_name = video_name
        self.is_video_uploaded = True

    def change_platform(self, platform: str):
        if platform not in self.platform_settings:
            raise ValueError(f"Unknown platform: {platform}")
        self.selected_platform = platform

    def update_settings(self, **changes) -> PlatformSettings:
        """merge changes into the selected platform's settings"""
        updated = self.settings.model_copy(update=changes)
        self.platform_settings[self.selected_platform] = PlatformSettings.model_validate(updated.model_dump())
        return self.settings

    def processing_settings(self) -> ProcessingSettings:
        settings = self.settings
        return ProcessingSettings(
            platform=self.selected_platform,
            aspect_ratio=settings.aspect_ratio,
            resolution=settings.resolution,
            quality=settings.quality,
            autoCaption=settings.auto_caption,
            aiOptimization=settings.ai_optimization,
            optimizationPreset=settings.optimization_preset,
            customSettings=dict(settings.custom_settings),
        )

    def process_current(self) -> ApiResponse:
        if not self.is_video_uploaded or self.current_video is None:
            return self._record_outcome(ApiResponse.failure("Upload or select a video first"))
        self.is_processing = True
        self.processing_progress = 0
        try:
            response = self.client.process_video(
                self.current_video.id,
                self.processing_settings(),
                on_progress=self._on_processing_progress,
                await_completion=True,
            )
        finally:
            self.is_processing = False
        if response.ok:
            self.current_video = response.data
        return self._record_outcome(response)

    def generate_shorts(
        self,
        clip_count: int = 3,
        platforms: Optional[List[str]] = None,
        min_duration: int = 15,
        max_duration: int = 60
    ) -> ApiResponse:
        if self.current_video is None:
            return self._record_outcome(ApiResponse.failure("Upload or select a video first"))
        settings = ClipSettings(
            platforms=platforms or [self.selected_platform],
            clip_count=clip_count,
            min_duration=min_duration,
            max_duration=max_duration,
        )
        self.is_generating_shorts = True
        self.generation_progress = 0
        try:
            response = self.client.generate_clips(
                self.current_video.id,
                settings,
                on_progress=self._on_generation_progress,
                await_completion=True,
            )
        finally:
            self.is_generating_shorts = False
        if response.ok:
            self.generated_clips = list(response.data)
            logger.info(f"generated {len(self.generated_clips)} clips for {platform_name(self.selected_platform)}")
        return self._record_outcome(response)
