from sqlmodel import Session
from videoai.core.db import engine
from videoai.core.formatting import utc_now
from videoai.models import Job
from uuid import UUID
from typing import Optional

def _load(session: Session, job_id: str) -> Optional[Job]:
    return session.get(Job, UUID(str(job_id)))

def start_job(job_id: str, rq_job_id: Optional[str] = None):
    """mark a job as started"""
    with Session(engine) as session:
        job = _load(session, job_id)
        if job:
            job.status = "running"
            if rq_job_id:
                job.rq_job_id = rq_job_id
            job.started_at = utc_now()
            job.updated_at = utc_now()
            session.add(job)
            session.commit()

def update_job_progress(job_id: str, progress_percent: int):
    """update job progress, never moving it backwards"""
    with Session(engine) as session:
        job = _load(session, job_id)
        if job and not job.is_finished:
            job.progress_percent = max(job.progress_percent, min(int(progress_percent), 99))
            job.updated_at = utc_now()
            session.add(job)
            session.commit()

def complete_job(job_id: str, video_id: Optional[UUID] = None):
    """mark a job as completed, optionally pointing it at the video it produced"""
    with Session(engine) as session:
        job = _load(session, job_id)
        if job:
            job.status = "completed"
            if video_id is not None:
                job.video_id = video_id
            job.finished_at = utc_now()
            job.progress_percent = 100
            job.updated_at = utc_now()
            session.add(job)
            session.commit()

def fail_job(job_id: str, error_message: str):
    """mark a job as failed"""
    with Session(engine) as session:
        job = _load(session, job_id)
        if job:
            job.status = "failed"
            job.finished_at = utc_now()
            job.error_message = error_message[:500]
            job.updated_at = utc_now()
            session.add(job)
            session.commit()
