from abc import ABC, abstractmethod
from typing import Optional

from videoai.client.envelope import ApiResponse
from videoai.client.models import ClipSettings, ProcessingSettings
from videoai.client.progress import ProgressCallback
from videoai.client.transfer import UploadSource


class VideoTransferProvider(ABC):
    """
    where video operations are carried out: the api server or the in-memory mock.
    submit_* calls return an ApiResponse wrapping an unstarted JobHandle.
    """

    @abstractmethod
    def upload_video(self, source: UploadSource, on_progress: Optional[ProgressCallback] = None) -> ApiResponse:
        ...

    @abstractmethod
    def submit_remote_import(self, url: str, quality: str) -> ApiResponse:
        ...

    @abstractmethod
    def submit_processing(self, video_id: str, settings: ProcessingSettings) -> ApiResponse:
        ...

    @abstractmethod
    def submit_clip_generation(self, video_id: str, settings: ClipSettings) -> ApiResponse:
        ...

    @abstractmethod
    def list_videos(self) -> ApiResponse:
        ...

    @abstractmethod
    def get_video(self, video_id: str) -> ApiResponse:
        ...

    @abstractmethod
    def delete_video(self, video_id: str) -> ApiResponse:
        ...

    @abstractmethod
    def detect_subjects(self, video_id: str, options: Optional[dict] = None) -> ApiResponse:
        ...

    @abstractmethod
    def analyze_engagement(self, video_id: str, options: Optional[dict] = None) -> ApiResponse:
        ...
