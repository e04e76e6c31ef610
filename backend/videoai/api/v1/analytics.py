from collections import Counter
from datetime import timedelta
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select
from videoai.core.db import get_session
from videoai.core.formatting import utc_now
from videoai.models import Video, Job, Clip, User
from videoai.services.security import get_current_user

router = APIRouter()

TIME_RANGES = {
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
    "90d": timedelta(days=90),
}

@router.get("/videos")
def video_analytics(
    timeRange: str = "7d",
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user)
):
    """uploads and imports in the window, by platform and status"""
    if timeRange not in TIME_RANGES:
        raise HTTPException(status_code=400, detail=f"Unsupported timeRange: {timeRange}")

    since = utc_now() - TIME_RANGES[timeRange]
    videos = session.exec(
        select(Video).where(Video.owner_id == user.id, Video.created_at >= since)
    ).all()

    per_day = Counter(video.created_at.strftime("%Y-%m-%d") for video in videos)
    return {
        "timeRange": timeRange,
        "total": len(videos),
        "byPlatform": dict(Counter(video.platform for video in videos)),
        "byStatus": dict(Counter(video.status for video in videos)),
        "perDay": [{"date": day, "count": per_day[day]} for day in sorted(per_day)],
        "totalSizeBytes": sum(video.size_bytes for video in videos),
    }

@router.get("/features")
def feature_analytics(session: Session = Depends(get_session), user: User = Depends(get_current_user)):
    """how often each job type was used and how it ended"""
    jobs = session.exec(select(Job).where(Job.owner_id == user.id)).all()

    features = {}
    for job in jobs:
        entry = features.setdefault(job.job_type, {"total": 0, "completed": 0, "failed": 0})
        entry["total"] += 1
        if job.status in ("completed", "failed"):
            entry[job.status] += 1
    return {"features": features, "totalJobs": len(jobs)}

@router.get("/platforms")
def platform_analytics(session: Session = Depends(get_session), user: User = Depends(get_current_user)):
    """generated clips per target platform"""
    clips = session.exec(
        select(Clip).join(Video, Clip.video_id == Video.id).where(Video.owner_id == user.id)
    ).all()
    counts = Counter(clip.platform for clip in clips)
    return {
        "platforms": [
            {"platform": platform, "clips": count}
            for platform, count in counts.most_common()
        ],
        "totalClips": len(clips),
    }
