from redis import Redis
from rq import Queue
from sqlmodel import Session
from videoai.core.config import settings
from videoai.models import Job
from typing import Optional
from uuid import UUID

redis_conn = Redis.from_url(settings.REDIS_URL)
queue = Queue(connection=redis_conn)

def enqueue_job(
    session: Session,
    func,
    job_type: str,
    *args,
    owner_id: Optional[UUID] = None,
    video_id: Optional[UUID] = None,
    params: Optional[dict] = None,
    **kwargs
) -> Job:
    """
    create the tracking record, then enqueue func(job_id, *args).
    the row is committed before the rq job exists.
    """
    job = Job(job_type=job_type, status="queued", owner_id=owner_id, video_id=video_id, params=params)
    session.add(job)
    session.commit()
    session.refresh(job)

    rq_job = queue.enqueue(func, str(job.id), *args, **kwargs)

    job.rq_job_id = rq_job.id
    session.add(job)
    session.commit()
    session.refresh(job)
    return job
