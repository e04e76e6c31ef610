from datetime import datetime, timezone
from typing import Optional

def utc_now() -> datetime:
    """timezone-aware current time in utc"""
    return datetime.now(timezone.utc)

def as_utc(value: datetime) -> datetime:
    """attach utc to timestamps sqlite hands back without an offset"""
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

def format_size_mb(size_bytes: int) -> str:
    """bytes -> '10.00 MB'"""
    return f"{size_bytes / (1024 * 1024):.2f} MB"

def format_duration(duration_ms: int) -> str:
    """milliseconds -> 'm:ss'"""
    total_seconds = int(duration_ms // 1000)
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes}:{seconds:02d}"

def format_date(value: Optional[datetime] = None) -> str:
    """iso calendar date used on video records"""
    return (value or utc_now()).strftime("%Y-%m-%d")
