"""Like routes.

Each toggle flips the viewer's like on one target and reports whether the
like is now active.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vidshare.api.deps import get_db
from vidshare.auth.middleware import Viewer, get_viewer
from vidshare.responses import success_response
from vidshare.schemas.common import to_jsonable
from vidshare.schemas.engagement import ToggleOut
from vidshare.services import likes as likes_service

router = APIRouter()


def _toggle_message(result: ToggleOut, noun: str) -> str:
    return f"{noun} liked" if result.active else f"{noun} unliked"


@router.post("/likes/toggle/v/{video_id}")
def toggle_video_like(
    video_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = likes_service.toggle_video_like(db, viewer.user_id, video_id)
    return success_response(result.to_json(), _toggle_message(result, "Video"))


@router.post("/likes/toggle/c/{comment_id}")
def toggle_comment_like(
    comment_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = likes_service.toggle_comment_like(db, viewer.user_id, comment_id)
    return success_response(result.to_json(), _toggle_message(result, "Comment"))


@router.post("/likes/toggle/t/{tweet_id}")
def toggle_tweet_like(
    tweet_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = likes_service.toggle_tweet_like(db, viewer.user_id, tweet_id)
    return success_response(result.to_json(), _toggle_message(result, "Tweet"))


@router.get("/likes/videos")
def list_liked_videos(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = likes_service.list_liked_videos(db, viewer.user_id)
    return success_response(to_jsonable(result), "Liked videos fetched successfully")


@router.get("/likes/video/{video_id}")
def get_video_likes(
    video_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = likes_service.get_video_likes(db, viewer.user_id, video_id)
    return success_response(result.to_json(), "Video likes fetched successfully")
