from fastapi import APIRouter, Depends
from sqlmodel import Session, select
from videoai.core.db import get_session
from videoai.core.formatting import utc_now
from videoai.services.queue import redis_conn
from videoai.models import Video, Job, Clip

router = APIRouter()

@router.get("/")
def health_check():
    """basic liveness check"""
    return {
        "status": "healthy",
        "timestamp": utc_now().isoformat(),
        "service": "videoai-backend"
    }

@router.get("/ready")
def readiness_check(session: Session = Depends(get_session)):
    """readiness check - verifies database and job queue"""
    checks = {}
    all_healthy = True

    try:
        session.exec(select(Video).limit(1))
        checks["database"] = {"status": "healthy", "message": "connected"}
    except Exception as e:
        checks["database"] = {"status": "unhealthy", "message": str(e)}
        all_healthy = False

    # a missing queue only stops background jobs, uploads keep working
    try:
        redis_conn.ping()
        checks["redis"] = {"status": "healthy", "message": "connected"}
    except Exception as e:
        checks["redis"] = {"status": "warning", "message": str(e)}

    return {
        "status": "healthy" if all_healthy else "unhealthy",
        "timestamp": utc_now().isoformat(),
        "checks": checks
    }

@router.get("/metrics")
def get_metrics(session: Session = Depends(get_session)):
    """entity and job counters"""
    jobs = session.exec(select(Job)).all()
    videos = session.exec(select(Video)).all()

    def count(items, status):
        return sum(1 for item in items if item.status == status)

    return {
        "timestamp": utc_now().isoformat(),
        "videos": {
            "total": len(videos),
            "processing": count(videos, "processing"),
            "completed": count(videos, "completed"),
            "failed": count(videos, "failed"),
        },
        "clips": {
            "total": len(session.exec(select(Clip)).all()),
        },
        "jobs": {
            "running": count(jobs, "running"),
            "queued": count(jobs, "queued"),
            "completed": count(jobs, "completed"),
            "failed": count(jobs, "failed"),
        }
    }
