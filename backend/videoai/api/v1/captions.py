from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, model_validator
from sqlmodel import Session
from typing import Optional
from uuid import UUID
from videoai.core.db import get_session
from videoai.core.formatting import utc_now
from videoai.models import Caption, User, Video
from videoai.services.security import get_current_user

router = APIRouter()

class CaptionPayload(BaseModel):
    # the client echoes the id on updates; the path id wins
    id: Optional[str] = None
    videoId: str
    text: str
    font: str = "Inter"
    fontSize: int = 24
    color: str = "#ffffff"
    backgroundColor: str = "transparent"
    position: str = "bottom"
    alignment: str = "center"
    startTime: float
    endTime: float
    outline: bool = False
    outlineColor: str = "#000000"
    shadow: bool = False

    @model_validator(mode="after")
    def check_times(self):
        if self.endTime <= self.startTime:
            raise ValueError("endTime must be after startTime")
        return self

def check_video_access(session: Session, video_id: str, user: User):
    """404 when the id names a server video that belongs to someone else"""
    try:
        video = session.get(Video, UUID(video_id))
    except ValueError:
        return
    if video and video.owner_id != user.id:
        raise HTTPException(status_code=404, detail="Video not found")

def get_owned_caption(caption_id: UUID, session: Session, user: User) -> Caption:
    caption = session.get(Caption, caption_id)
    if not caption or caption.owner_id != user.id:
        raise HTTPException(status_code=404, detail="Caption not found")
    return caption

def apply_payload(caption: Caption, payload: CaptionPayload) -> Caption:
    caption.video_id = payload.videoId
    caption.text = payload.text
    caption.font = payload.font
    caption.font_size = payload.fontSize
    caption.color = payload.color
    caption.background_color = payload.backgroundColor
    caption.position = payload.position
    caption.alignment = payload.alignment
    caption.start_time = payload.startTime
    caption.end_time = payload.endTime
    caption.outline = payload.outline
    caption.outline_color = payload.outlineColor
    caption.shadow = payload.shadow
    caption.updated_at = utc_now()
    return caption

@router.post("", status_code=201)
def create_caption(payload: CaptionPayload, session: Session = Depends(get_session), user: User = Depends(get_current_user)):
    check_video_access(session, payload.videoId, user)
    caption = apply_payload(
        Caption(owner_id=user.id, video_id=payload.videoId, text=payload.text, start_time=payload.startTime, end_time=payload.endTime),
        payload
    )
    session.add(caption)
    session.commit()
    session.refresh(caption)
    return caption.to_record()

@router.put("/{caption_id}")
def update_caption(
    caption_id: UUID,
    payload: CaptionPayload,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user)
):
    caption = get_owned_caption(caption_id, session, user)
    check_video_access(session, payload.videoId, user)
    apply_payload(caption, payload)
    session.add(caption)
    session.commit()
    session.refresh(caption)
    return caption.to_record()
