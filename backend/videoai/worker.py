import os
from uuid import UUID

from rq import get_current_job
from sqlmodel import Session

from videoai.core.config import settings
from videoai.core.db import engine
from videoai.core.errors import handle_worker_error
from videoai.core.formatting import utc_now
from videoai.core.logging_config import get_logger
from videoai.models import Video, Clip
from videoai.services import ffmpeg
from videoai.services.clip_planner import plan_clip_windows, assign_platforms, PLATFORM_RESOLUTIONS
from videoai.services.job_tracker import start_job, complete_job, fail_job, update_job_progress
from videoai.services.remote_video import download_remote_video

logger = get_logger(__name__)

def _scaled(job_id: str, low: int, high: int):
    """progress callback mapping a stage's 0-100 onto [low, high] of the job"""
    def report(percent: int):
        update_job_progress(job_id, low + int((high - low) * max(0, min(percent, 100)) / 100))
    return report

def _rq_id():
    current_job = get_current_job()
    return current_job.id if current_job else None

def _try_thumbnail(video: Video, source_path: str):
    os.makedirs(settings.THUMBNAILS_DIR, exist_ok=True)
    thumb_path = os.path.join(settings.THUMBNAILS_DIR, f"{video.id}.jpg")
    try:
        ffmpeg.extract_thumbnail(source_path, thumb_path, at_ms=min(1000, video.duration_ms // 2))
        video.thumbnail_path = thumb_path
    except Exception as e:
        logger.warning(f"thumbnail extraction failed for {video.id}: {e}")

def import_remote_video(job_id: str, owner_id: str, url: str, quality: str):
    """download a remote video and register it as a completed Video"""
    start_job(job_id, _rq_id())
    logger.info(f"[IMPORT] job {job_id}: {url} ({quality})")

    try:
        with Session(engine) as session:
            video = Video(
                owner_id=UUID(owner_id),
                name="Remote import",
                platform="YouTube",
                status="processing",
                source_url=url
            )
            session.add(video)
            session.commit()
            session.refresh(video)

            update_job_progress(job_id, 5)
            downloaded = download_remote_video(
                url,
                settings.UPLOADS_DIR,
                str(video.id),
                quality=quality,
                on_progress=_scaled(job_id, 5, 90)
            )

            meta = ffmpeg.get_video_metadata(downloaded["path"])
            video.name = downloaded["title"]
            video.stored_path = downloaded["path"]
            video.size_bytes = os.path.getsize(downloaded["path"])
            video.duration_ms = meta["duration_ms"] or downloaded["duration_ms"]
            video.width = meta["width"]
            video.height = meta["height"]
            update_job_progress(job_id, 95)

            _try_thumbnail(video, downloaded["path"])
            video.status = "completed"
            video.updated_at = utc_now()
            session.add(video)
            session.commit()

            complete_job(job_id, video_id=video.id)
            logger.info(f"[IMPORT] ✅ job {job_id} produced video {video.id}")
    except Exception as e:
        handle_worker_error(job_id, e)
        fail_job(job_id, f"Remote import failed: {e}")
        raise

def process_video(job_id: str, video_id: str, processing_settings: dict):
    """re-encode a video into the selected platform's frame"""
    start_job(job_id, _rq_id())

    with Session(engine) as session:
        video = session.get(Video, UUID(video_id))
        if not video or not video.stored_path:
            fail_job(job_id, "Video not found")
            return

        try:
            video.status = "processing"
            video.platform = processing_settings.get("platform") or video.platform
            session.add(video)
            session.commit()

            os.makedirs(settings.PROCESSED_DIR, exist_ok=True)
            output_path = os.path.join(settings.PROCESSED_DIR, f"{video.id}_{video.platform.lower()}.mp4")
            resolution = processing_settings.get("resolution") or PLATFORM_RESOLUTIONS.get(video.platform.lower(), "1920x1080")

            logger.info(f"[PROCESS] job {job_id}: {video.name} -> {resolution}")
            ffmpeg.render_for_platform(
                video.stored_path,
                output_path,
                resolution,
                video.duration_ms,
                quality=int(processing_settings.get("quality", 80)),
                on_progress=_scaled(job_id, 0, 95)
            )

            video.processed_path = output_path
            video.status = "completed"
            video.updated_at = utc_now()
            session.add(video)
            session.commit()
            complete_job(job_id, video_id=video.id)
        except Exception as e:
            handle_worker_error(job_id, e)
            video.status = "failed"
            session.add(video)
            session.commit()
            fail_job(job_id, f"Processing failed: {e}")
            raise

def generate_clips(job_id: str, video_id: str, clip_settings: dict):
    """cut evenly spaced clips and register one Clip row per window"""
    start_job(job_id, _rq_id())

    with Session(engine) as session:
        video = session.get(Video, UUID(video_id))
        if not video or not video.stored_path:
            fail_job(job_id, "Video not found")
            return

        try:
            windows = plan_clip_windows(
                video.duration_ms,
                int(clip_settings.get("clipCount", 3)),
                int(clip_settings.get("minDuration", 15)),
                int(clip_settings.get("maxDuration", 60))
            )
            platforms = assign_platforms(len(windows), clip_settings.get("platforms") or [])
            os.makedirs(settings.CLIPS_DIR, exist_ok=True)

            for index, ((start_ms, end_ms), platform) in enumerate(zip(windows, platforms)):
                clip = Clip(
                    video_id=video.id,
                    job_id=UUID(job_id),
                    title=f"{video.name} - clip {index + 1}",
                    platform=platform,
                    start_ms=start_ms,
                    end_ms=end_ms,
                    status="processing"
                )
                clip_path = os.path.join(settings.CLIPS_DIR, f"{clip.id}.mp4")
                ffmpeg.cut_clip(video.stored_path, clip_path, start_ms, end_ms, PLATFORM_RESOLUTIONS.get(platform))
                clip.stored_path = clip_path

                thumb_path = os.path.join(settings.CLIPS_DIR, f"{clip.id}.jpg")
                try:
                    ffmpeg.extract_thumbnail(clip_path, thumb_path, at_ms=0)
                    clip.thumbnail_path = thumb_path
                except Exception as e:
                    logger.warning(f"clip thumbnail failed for {clip.id}: {e}")

                clip.status = "completed"
                session.add(clip)
                session.commit()
                update_job_progress(job_id, int((index + 1) / len(windows) * 100))

            complete_job(job_id, video_id=video.id)
            logger.info(f"[CLIPS] ✅ job {job_id}: {len(windows)} clips for {video.id}")
        except Exception as e:
            handle_worker_error(job_id, e)
            fail_job(job_id, f"Clip generation failed: {e}")
            raise
