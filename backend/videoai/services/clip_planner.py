from typing import List, Tuple

# frame sizes from the dashboard's per-platform defaults
PLATFORM_RESOLUTIONS = {
    "youtube": "1920x1080",
    "instagram": "1080x1080",
    "tiktok": "1080x1920",
}

def plan_clip_windows(duration_ms: int, clip_count: int, min_duration: int, max_duration: int) -> List[Tuple[int, int]]:
    """
    split a video into clip_count evenly spaced windows.
    each window is as long as its share of the video, clamped to
    [min_duration, max_duration] seconds and never past the end.
    """
    if duration_ms <= 0 or clip_count <= 0:
        return []

    share_ms = duration_ms / clip_count
    length_ms = int(min(max_duration * 1000, max(min_duration * 1000, share_ms)))
    length_ms = min(length_ms, duration_ms)

    windows = []
    for i in range(clip_count):
        start = int(i * share_ms + max(0.0, (share_ms - length_ms) / 2))
        start = max(0, min(start, duration_ms - length_ms))
        windows.append((start, start + length_ms))
    return windows

def assign_platforms(count: int, platforms: List[str]) -> List[str]:
    """round-robin the requested platforms over the clips"""
    if not platforms:
        platforms = ["youtube"]
    return [platforms[i % len(platforms)] for i in range(count)]
