from .api import ApiClient
from .config import ClientConfig
from .dashboard import Dashboard
from .envelope import ApiResponse, handle_response
from .jobs import JobHandle, JobPoller, JobState
from .mock import InMemoryVideoStore, MockVideoProvider
from .models import CaptionRecord, ClipRecord, ClipSettings, ProcessingSettings, VideoRecord
from .providers import FallbackVideoProvider, RemoteVideoProvider, build_provider
