from fastapi import APIRouter, UploadFile, File, HTTPException, Depends
from fastapi.responses import FileResponse
from pydantic import BaseModel, ConfigDict
from sqlmodel import Session, select
from typing import List, Optional
from uuid import UUID
from videoai.core.config import settings
from videoai.core.db import get_session
from videoai.core.errors import VideoValidationError
from videoai.core.validation import validate_video_file, extract_remote_video_id, validate_quality, DEFAULT_QUALITY
from videoai.models import Video, Clip, Caption, User
from videoai.services import ffmpeg
from videoai.services.queue import enqueue_job
from videoai.services.security import get_current_user
from videoai.api.v1.captions import check_video_access
from videoai import worker
import logging
import os

logger = logging.getLogger(__name__)

router = APIRouter()

COPY_CHUNK = 1024 * 1024

class RemoteDownloadRequest(BaseModel):
    url: str
    quality: str = DEFAULT_QUALITY

class ProcessRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    platform: str
    aspectRatio: str
    resolution: str
    quality: int = 80
    smartCrop: Optional[bool] = None
    faceTracking: Optional[bool] = None
    subjectDetection: Optional[bool] = None

class ClipGenerateRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    platforms: List[str]
    clipCount: int = 3
    minDuration: int = 15
    maxDuration: int = 60

def get_owned_video(video_id: UUID, session: Session, user: User) -> Video:
    video = session.get(Video, video_id)
    if not video or video.owner_id != user.id:
        raise HTTPException(status_code=404, detail="Video not found")
    return video

@router.post("/upload")
def upload_video(
    video: UploadFile = File(...),
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user)
):
    filename = os.path.basename(video.filename or "upload.mp4")
    try:
        validate_video_file(filename, 0, settings.SUPPORTED_FORMATS, settings.MAX_UPLOAD_SIZE_MB)
    except VideoValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    record = Video(owner_id=user.id, name=filename, platform="Unknown", status="processing")
    os.makedirs(settings.UPLOADS_DIR, exist_ok=True)
    stored_path = os.path.join(settings.UPLOADS_DIR, f"{record.id}{os.path.splitext(filename)[1].lower()}")

    # copy in chunks so oversized uploads are cut off early
    max_bytes = settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024
    size = 0
    with open(stored_path, "wb") as buffer:
        for chunk in iter(lambda: video.file.read(COPY_CHUNK), b""):
            size += len(chunk)
            if size > max_bytes:
                break
            buffer.write(chunk)
    if size > max_bytes:
        os.remove(stored_path)
        raise HTTPException(
            status_code=413,
            detail=f"File too large: {filename}. Maximum size is {settings.MAX_UPLOAD_SIZE_MB}MB"
        )

    try:
        meta = ffmpeg.get_video_metadata(stored_path)
    except Exception as e:
        os.remove(stored_path)
        raise HTTPException(status_code=400, detail=f"Invalid video file: {str(e)}")

    record.stored_path = stored_path
    record.size_bytes = size
    record.duration_ms = meta["duration_ms"]
    record.width = meta.get("width", 0)
    record.height = meta.get("height", 0)

    os.makedirs(settings.THUMBNAILS_DIR, exist_ok=True)
    thumb_path = os.path.join(settings.THUMBNAILS_DIR, f"{record.id}.jpg")
    try:
        ffmpeg.extract_thumbnail(stored_path, thumb_path, at_ms=min(1000, record.duration_ms // 2))
        record.thumbnail_path = thumb_path
    except Exception as e:
        logger.warning(f"thumbnail extraction failed for {filename}: {e}")

    record.status = "completed"
    session.add(record)
    session.commit()
    session.refresh(record)
    logger.info(f"stored upload {filename} as {record.id} ({size} bytes)")
    return record.to_record()

@router.get("")
def list_videos(session: Session = Depends(get_session), user: User = Depends(get_current_user)):
    videos = session.exec(
        select(Video).where(Video.owner_id == user.id).order_by(Video.created_at.desc())
    ).all()
    return [video.to_record() for video in videos]

@router.post("/youtube/download")
def download_remote(
    req: RemoteDownloadRequest,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user)
):
    """queue a remote import; progress is polled through /api/jobs"""
    if not extract_remote_video_id(req.url):
        raise HTTPException(status_code=400, detail="Invalid YouTube URL")
    try:
        quality = validate_quality(req.quality)
    except VideoValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    job = enqueue_job(
        session,
        worker.import_remote_video,
        "remote_download",
        str(user.id),
        req.url,
        quality,
        owner_id=user.id,
        params={"url": req.url, "quality": quality},
        job_timeout="2h"
    )
    return {"jobId": str(job.id)}

@router.get("/{video_id}")
def get_video(video_id: UUID, session: Session = Depends(get_session), user: User = Depends(get_current_user)):
    return get_owned_video(video_id, session, user).to_record()

@router.delete("/{video_id}")
def delete_video(video_id: UUID, session: Session = Depends(get_session), user: User = Depends(get_current_user)):
    video = get_owned_video(video_id, session, user)

    clips = session.exec(select(Clip).where(Clip.video_id == video.id)).all()
    paths = [video.stored_path, video.processed_path, video.thumbnail_path]
    for clip in clips:
        paths += [clip.stored_path, clip.thumbnail_path]
        session.delete(clip)
    for caption in session.exec(select(Caption).where(Caption.video_id == str(video.id))).all():
        session.delete(caption)
    session.delete(video)
    session.commit()

    for path in paths:
        if path and os.path.exists(path):
            os.remove(path)
    return {"id": str(video_id), "deleted": True}

@router.get("/{video_id}/stream")
def stream_video(video_id: UUID, session: Session = Depends(get_session), user: User = Depends(get_current_user)):
    video = get_owned_video(video_id, session, user)
    path = video.processed_path or video.stored_path
    if not path or not os.path.exists(path):
        raise HTTPException(status_code=404, detail="File not found on disk")
    return FileResponse(path, media_type="video/mp4", filename=video.name)

@router.get("/{video_id}/thumbnail")
def video_thumbnail(video_id: UUID, session: Session = Depends(get_session), user: User = Depends(get_current_user)):
    video = get_owned_video(video_id, session, user)
    if not video.thumbnail_path or not os.path.exists(video.thumbnail_path):
        raise HTTPException(status_code=404, detail="Thumbnail not available")
    return FileResponse(video.thumbnail_path, media_type="image/jpeg")

@router.post("/{video_id}/process")
def process_video(
    video_id: UUID,
    req: ProcessRequest,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user)
):
    video = get_owned_video(video_id, session, user)
    if video.status == "processing":
        raise HTTPException(status_code=409, detail="Video is already being processed")

    params = req.model_dump()
    job = enqueue_job(
        session,
        worker.process_video,
        "process",
        str(video.id),
        params,
        owner_id=user.id,
        video_id=video.id,
        params=params,
        job_timeout="2h"
    )
    video.status = "processing"
    session.add(video)
    session.commit()
    return {"jobId": str(job.id)}

@router.post("/{video_id}/clips/generate")
def generate_clips(
    video_id: UUID,
    req: ClipGenerateRequest,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user)
):
    video = get_owned_video(video_id, session, user)
    if req.clipCount < 1:
        raise HTTPException(status_code=400, detail="clipCount must be at least 1")
    if req.maxDuration < req.minDuration:
        raise HTTPException(status_code=400, detail="maxDuration must not be shorter than minDuration")

    params = req.model_dump()
    job = enqueue_job(
        session,
        worker.generate_clips,
        "generate_clips",
        str(video.id),
        params,
        owner_id=user.id,
        video_id=video.id,
        params=params,
        job_timeout="2h"
    )
    return {"jobId": str(job.id)}

@router.get("/{video_id}/clips")
def list_clips(video_id: UUID, session: Session = Depends(get_session), user: User = Depends(get_current_user)):
    video = get_owned_video(video_id, session, user)
    clips = session.exec(select(Clip).where(Clip.video_id == video.id).order_by(Clip.created_at)).all()
    return [clip.to_record() for clip in clips]

@router.get("/{video_id}/captions")
def list_captions(video_id: str, session: Session = Depends(get_session), user: User = Depends(get_current_user)):
    check_video_access(session, video_id, user)
    captions = session.exec(
        select(Caption)
        .where(Caption.video_id == video_id, Caption.owner_id == user.id)
        .order_by(Caption.start_time)
    ).all()
    return [caption.to_record() for caption in captions]

@router.post("/{video_id}/detect-subjects", status_code=501)
def detect_subjects(video_id: UUID, user: User = Depends(get_current_user)):
    raise HTTPException(status_code=501, detail="Subject detection is not available on this server")

@router.post("/{video_id}/analyze-engagement", status_code=501)
def analyze_engagement(video_id: UUID, user: User = Depends(get_current_user)):
    raise HTTPException(status_code=501, detail="Engagement analysis is not available on this server")
