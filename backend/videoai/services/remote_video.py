"""
remote video import via yt-dlp.

the quality tiers mirror the dashboard's selector; each maps to a height cap
so the downloader picks the best stream at or below it.
"""
import logging
import os
from typing import Callable, Optional

import yt_dlp

from videoai.core.errors import retry_with_backoff, VideoProcessingError
from videoai.core.validation import DEFAULT_QUALITY

logger = logging.getLogger(__name__)

QUALITY_HEIGHTS = {
    "360p": 360,
    "480p": 480,
    "720p": 720,
    "1080p": 1080,
}

def format_selector(quality: str) -> str:
    height = QUALITY_HEIGHTS.get(quality, QUALITY_HEIGHTS[DEFAULT_QUALITY])
    return (
        f"bestvideo[height<={height}][ext=mp4]+bestaudio[ext=m4a]/"
        f"bestvideo[height<={height}]+bestaudio/"
        f"best[height<={height}]/best"
    )

@retry_with_backoff(max_retries=3, initial_delay=2.0)
def download_remote_video(
    url: str,
    output_dir: str,
    basename: str,
    quality: str = DEFAULT_QUALITY,
    on_progress: Optional[Callable[[int], None]] = None
) -> dict:
    """
    download url into output_dir/basename.mp4.
    returns {"path", "title", "duration_ms"}.
    """
    os.makedirs(output_dir, exist_ok=True)

    def _hook(status: dict):
        if status.get("status") != "downloading" or not on_progress:
            return
        total = status.get("total_bytes") or status.get("total_bytes_estimate")
        if total:
            on_progress(int(status.get("downloaded_bytes", 0) / total * 100))

    ydl_opts = {
        'format': format_selector(quality),
        'outtmpl': os.path.join(output_dir, f'{basename}.%(ext)s'),
        'merge_output_format': 'mp4',
        'quiet': True,
        'no_warnings': True,
        'overwrites': True,
        'noplaylist': True,
        'progress_hooks': [_hook],
    }

    logger.info(f"downloading {url} at {quality}")
    with yt_dlp.YoutubeDL(ydl_opts) as ydl:
        info = ydl.extract_info(url, download=True)

    path = os.path.join(output_dir, f'{basename}.mp4')
    if not os.path.exists(path):
        # merge may keep the source container when mp4 is unavailable
        for name in os.listdir(output_dir):
            if name.startswith(basename):
                path = os.path.join(output_dir, name)
                break
        else:
            raise VideoProcessingError(f"download finished but no file found for {url}")

    return {
        "path": path,
        "title": info.get("title") or "Remote video",
        "duration_ms": int(float(info.get("duration") or 0) * 1000),
    }
