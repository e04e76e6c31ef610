import os
import re
from typing import Iterable, Optional

from videoai.core.errors import VideoValidationError

# ascending tiers offered by the quality selector; the third is the default
QUALITY_OPTIONS = ("360p", "480p", "720p", "1080p")
DEFAULT_QUALITY = QUALITY_OPTIONS[2]

DEFAULT_FORMATS = (".mp4", ".mov", ".avi", ".mkv", ".webm")

# watch?v=, youtu.be/, /v/, /u/x/, embed/ forms; group 7 holds the video id
REMOTE_VIDEO_PATTERN = re.compile(
    r"^.*((youtu\.be/)|(v/)|(/u/\w/)|(embed/)|(watch\?))\??v?=?([^#&?]*).*"
)
REMOTE_VIDEO_ID_LENGTH = 11


def file_extension(filename: str) -> str:
    return os.path.splitext(filename)[1].lower()

def validate_video_file(
    filename: str,
    size_bytes: int,
    supported_formats: Iterable[str] = DEFAULT_FORMATS,
    max_size_mb: int = 500
):
    """reject unsupported extensions and oversized files before any transfer"""
    supported_formats = tuple(supported_formats)
    extension = file_extension(filename)
    if extension not in supported_formats:
        raise VideoValidationError(
            f"Unsupported file format: {extension or filename}. Please use: {', '.join(supported_formats)}"
        )
    if size_bytes > max_size_mb * 1024 * 1024:
        raise VideoValidationError(f"File too large: {filename}. Maximum size is {max_size_mb}MB")

def extract_remote_video_id(url: str) -> Optional[str]:
    """11-character video id for a recognised short-video url, else None"""
    match = REMOTE_VIDEO_PATTERN.match(url or "")
    if match and len(match.group(7)) == REMOTE_VIDEO_ID_LENGTH:
        return match.group(7)
    return None

def validate_quality(quality: str) -> str:
    if quality not in QUALITY_OPTIONS:
        raise VideoValidationError(
            f"Unsupported quality: {quality}. Please use: {', '.join(QUALITY_OPTIONS)}"
        )
    return quality
