from pydantic import BaseModel
from typing import Literal, Optional, Tuple
import os

from videoai.core.validation import DEFAULT_FORMATS


def _env_flag(name: str) -> Optional[bool]:
    value = os.getenv(name)
    if value is None or value == "":
        return None
    return value.lower() in ("1", "true", "yes")


class ClientConfig(BaseModel):
    """configuration for the dashboard api client"""

    api_url: str = os.getenv("VIDEOAI_API_URL", "http://localhost:5000")
    # empty path keeps the session in memory only
    token_path: str = os.getenv(
        "VIDEOAI_TOKEN_PATH",
        os.path.join(os.path.expanduser("~"), ".videoai", "session.json")
    )

    # remote: server only, mock: in-memory only, fallback: mock when the server is unreachable
    transfer_mode: Literal["remote", "mock", "fallback"] = os.getenv("VIDEOAI_TRANSFER_MODE", "fallback")

    request_timeout: float = float(os.getenv("VIDEOAI_REQUEST_TIMEOUT", "30"))
    upload_timeout: float = float(os.getenv("VIDEOAI_UPLOAD_TIMEOUT", "600"))

    # job polling
    poll_interval: float = float(os.getenv("VIDEOAI_POLL_INTERVAL", "1.0"))
    max_poll_failures: int = int(os.getenv("VIDEOAI_MAX_POLL_FAILURES", "30"))  # 0 = retry forever
    max_polls: int = int(os.getenv("VIDEOAI_MAX_POLLS", "0"))  # 0 = no budget
    # None: wait for a job only when a progress callback is given
    await_completion: Optional[bool] = _env_flag("VIDEOAI_AWAIT_COMPLETION")

    # upload validation
    max_upload_size_mb: int = int(os.getenv("VIDEOAI_MAX_UPLOAD_SIZE_MB", "500"))
    supported_formats: Tuple[str, ...] = DEFAULT_FORMATS

    # mock simulation timing
    mock_tick: float = 0.2
    mock_step: int = 5
    mock_settle: float = 0.5
    mock_process_tick: float = 0.3
    mock_process_step: int = 10
