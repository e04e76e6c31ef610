from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse
from sqlmodel import Session
from uuid import UUID
from videoai.core.db import get_session
from videoai.models import Clip, Video, User
from videoai.services.security import get_current_user
import os

router = APIRouter()

def get_owned_clip(clip_id: UUID, session: Session, user: User) -> Clip:
    clip = session.get(Clip, clip_id)
    video = session.get(Video, clip.video_id) if clip else None
    if not clip or not video or video.owner_id != user.id:
        raise HTTPException(status_code=404, detail="Clip not found")
    return clip

@router.get("/{clip_id}")
def get_clip(clip_id: UUID, session: Session = Depends(get_session), user: User = Depends(get_current_user)):
    return get_owned_clip(clip_id, session, user).to_record()

@router.get("/{clip_id}/stream")
def stream_clip(clip_id: UUID, session: Session = Depends(get_session), user: User = Depends(get_current_user)):
    """serve the cut clip for playback and download"""
    clip = get_owned_clip(clip_id, session, user)
    if not clip.stored_path or not os.path.exists(clip.stored_path):
        raise HTTPException(status_code=404, detail="Clip file not found on disk")
    return FileResponse(clip.stored_path, media_type="video/mp4", filename=f"{clip.title}.mp4")

@router.get("/{clip_id}/thumbnail")
def clip_thumbnail(clip_id: UUID, session: Session = Depends(get_session), user: User = Depends(get_current_user)):
    clip = get_owned_clip(clip_id, session, user)
    if not clip.thumbnail_path or not os.path.exists(clip.thumbnail_path):
        raise HTTPException(status_code=404, detail="Thumbnail not available")
    return FileResponse(clip.thumbnail_path, media_type="image/jpeg")
