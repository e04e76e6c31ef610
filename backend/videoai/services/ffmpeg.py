import subprocess
import json
import logging
from math import gcd
from typing import Callable, Optional

logger = logging.getLogger(__name__)

def get_video_metadata(file_path: str) -> dict:
    """
    Extracts metadata from a video file using ffprobe.
    Returns a dict with: duration_ms, fps, width, height, aspect_ratio, resolution_label
    """
    cmd = [
        "ffprobe",
        "-v", "quiet",
        "-print_format", "json",
        "-show_format",
        "-show_streams",
        file_path
    ]

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=True)
        data = json.loads(result.stdout)

        video_stream = next((s for s in data["streams"] if s["codec_type"] == "video"), None)
        if not video_stream:
            raise ValueError("No video stream found")

        avg_frame_rate = video_stream.get("avg_frame_rate", "0/0")
        num, den = map(int, avg_frame_rate.split("/"))
        fps = num / den if den != 0 else 0.0

        duration_sec = float(data["format"].get("duration", 0))

        width = int(video_stream.get("width", 0))
        height = int(video_stream.get("height", 0))

        if width and height:
            gcd_val = gcd(width, height)
            aspect_ratio = f"{width // gcd_val}:{height // gcd_val}"
        else:
            aspect_ratio = "unknown"

        if height >= 2160:
            res_label = "4K"
        elif height >= 1080:
            res_label = "1080p"
        elif height >= 720:
            res_label = "720p"
        else:
            res_label = f"{height}p"

        return {
            "duration_ms": int(duration_sec * 1000),
            "fps": fps,
            "width": width,
            "height": height,
            "aspect_ratio": aspect_ratio,
            "resolution_label": res_label,
        }
    except Exception as e:
        logger.error(f"Error probing file {file_path}: {e}")
        raise e

def parse_resolution(resolution: str) -> tuple:
    """'1080x1920' -> (1080, 1920)"""
    width, height = resolution.lower().split("x", 1)
    return int(width), int(height)

def fit_filter(resolution: str) -> str:
    """scale into the target frame keeping aspect ratio, then letterbox to exact size"""
    width, height = parse_resolution(resolution)
    return (
        f"scale={width}:{height}:force_original_aspect_ratio=decrease,"
        f"pad={width}:{height}:(ow-iw)/2:(oh-ih)/2,setsar=1"
    )

def extract_thumbnail(input_path: str, output_path: str, at_ms: int = 1000) -> str:
    """grab a single frame as jpeg"""
    cmd = [
        "ffmpeg", "-y",
        "-ss", f"{at_ms / 1000:.3f}",
        "-i", input_path,
        "-frames:v", "1",
        "-vf", "scale=480:-2",
        output_path
    ]
    subprocess.run(cmd, capture_output=True, check=True)
    return output_path

def render_for_platform(
    input_path: str,
    output_path: str,
    resolution: str,
    duration_ms: int,
    quality: int = 80,
    on_progress: Optional[Callable[[int], None]] = None
) -> str:
    """
    re-encode a video into the platform frame size.
    quality is the dashboard's 0-100 slider, mapped onto x264 crf 28..18.
    progress is read from ffmpeg's -progress key=value stream.
    """
    crf = round(28 - (max(0, min(quality, 100)) / 100) * 10)
    cmd = [
        "ffmpeg", "-y",
        "-i", input_path,
        "-vf", fit_filter(resolution),
        "-c:v", "libx264", "-preset", "fast", "-crf", str(crf),
        "-c:a", "aac", "-b:a", "128k",
        "-movflags", "+faststart",
        "-progress", "pipe:1", "-nostats",
        output_path
    ]

    process = subprocess.Popen(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True)
    for line in process.stdout:
        # out_time_ms is reported in microseconds despite the name
        if on_progress and duration_ms and line.startswith("out_time_ms="):
            value = line.split("=", 1)[1].strip()
            if value.isdigit():
                on_progress(min(99, int(int(value) / 1000 / duration_ms * 100)))
    _, stderr = process.communicate()

    if process.returncode != 0:
        raise subprocess.CalledProcessError(process.returncode, cmd, stderr=stderr)
    return output_path

def cut_clip(input_path: str, output_path: str, start_ms: int, end_ms: int, resolution: Optional[str] = None) -> str:
    """cut [start_ms, end_ms) into its own file, optionally refitting the frame"""
    cmd = [
        "ffmpeg", "-y",
        "-ss", f"{start_ms / 1000:.3f}",
        "-i", input_path,
        "-t", f"{(end_ms - start_ms) / 1000:.3f}",
    ]
    if resolution:
        cmd += ["-vf", fit_filter(resolution)]
    cmd += [
        "-c:v", "libx264", "-preset", "fast", "-crf", "23",
        "-c:a", "aac", "-b:a", "128k",
        "-movflags", "+faststart",
        output_path
    ]
    subprocess.run(cmd, capture_output=True, check=True)
    return output_path
