from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session, select
from videoai.core.db import get_session
from videoai.core.formatting import as_utc, utc_now
from videoai.models import Job as JobModel, Video, Clip, User
from videoai.services.queue import redis_conn
from videoai.services.security import get_current_user
from rq.job import Job
from datetime import timedelta
from typing import Optional
from uuid import UUID
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

# rq is only consulted for jobs whose row has not moved for this long
STALE_AFTER = timedelta(minutes=2)

def sync_with_queue(session: Session, db_job: JobModel):
    """
    catch jobs that were killed or failed without updating the DB.
    a worker that dies mid-job would otherwise leave the row running forever.
    """
    if db_job.is_finished or not db_job.rq_job_id:
        return
    if utc_now() - as_utc(db_job.updated_at) < STALE_AFTER:
        return

    try:
        rq_job = Job.fetch(db_job.rq_job_id, connection=redis_conn)
        if rq_job.is_failed:
            error_msg = str(rq_job.exc_info) if rq_job.exc_info else "worker killed or job timeout exceeded"
            db_job.status = "failed"
            db_job.error_message = error_msg[:500]
            db_job.finished_at = utc_now()
            session.add(db_job)
            session.commit()
            logger.warning(f"synced failed job: {db_job.id}")
    except Exception as e:
        logger.warning(f"could not sync job {db_job.id} with rq: {e}")

def get_owned_job(job_id: UUID, session: Session, user: User) -> JobModel:
    db_job = session.get(JobModel, job_id)
    if not db_job or db_job.owner_id != user.id:
        raise HTTPException(status_code=404, detail="Job not found")
    return db_job

def job_result(session: Session, db_job: JobModel):
    """final payload of a completed job"""
    if db_job.job_type == "generate_clips":
        clips = session.exec(select(Clip).where(Clip.job_id == db_job.id).order_by(Clip.created_at)).all()
        return [clip.to_record() for clip in clips]

    video = session.get(Video, db_job.video_id) if db_job.video_id else None
    if not video:
        raise HTTPException(status_code=404, detail="Job result no longer exists")
    return video.to_record()

@router.get("")
def get_jobs(
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
    status: Optional[str] = None,
    limit: int = Query(default=50, le=200)
):
    """recent jobs of the current user grouped by status"""
    query = select(JobModel).where(JobModel.owner_id == user.id).order_by(JobModel.created_at.desc()).limit(limit)
    if status:
        query = query.where(JobModel.status == status)

    grouped = {"running": [], "queued": [], "completed": [], "failed": []}
    for db_job in session.exec(query).all():
        sync_with_queue(session, db_job)
        grouped.setdefault(db_job.status, []).append({
            "id": str(db_job.id),
            "job_type": db_job.job_type,
            "status": db_job.status,
            "video_id": str(db_job.video_id) if db_job.video_id else None,
            "progress_percent": db_job.progress_percent,
            "error_message": db_job.error_message,
            "started_at": db_job.started_at.isoformat() if db_job.started_at else None,
            "finished_at": db_job.finished_at.isoformat() if db_job.finished_at else None,
            "created_at": db_job.created_at.isoformat() if db_job.created_at else None,
        })

    return {
        **grouped,
        "summary": {f"{key}_count": len(value) for key, value in grouped.items()},
    }

@router.get("/{job_id}/progress")
def get_job_progress(job_id: UUID, session: Session = Depends(get_session), user: User = Depends(get_current_user)):
    db_job = get_owned_job(job_id, session, user)
    sync_with_queue(session, db_job)

    payload = {
        "jobId": str(db_job.id),
        "status": db_job.status,
        "progress": db_job.progress_percent,
        "completed": db_job.status == "completed",
        "failed": db_job.status == "failed",
    }
    if db_job.status == "failed":
        payload["error"] = db_job.error_message or "Job failed"
    if db_job.status == "completed" and db_job.job_type == "remote_download":
        video = session.get(Video, db_job.video_id) if db_job.video_id else None
        if video:
            payload["videoData"] = video.to_record()
    return payload

@router.get("/{job_id}/result")
def get_job_result(job_id: UUID, session: Session = Depends(get_session), user: User = Depends(get_current_user)):
    db_job = get_owned_job(job_id, session, user)
    if db_job.status == "failed":
        raise HTTPException(status_code=422, detail=db_job.error_message or "Job failed")
    if db_job.status != "completed":
        raise HTTPException(status_code=409, detail="Job is not finished yet")
    return job_result(session, db_job)
