"""Channel dashboard routes for the authenticated user."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vidshare.api.deps import get_db
from vidshare.auth.middleware import Viewer, get_viewer
from vidshare.responses import success_response
from vidshare.schemas.common import to_jsonable
from vidshare.services import dashboard as dashboard_service

router = APIRouter()


@router.get("/dashboard/stats")
def get_channel_stats(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = dashboard_service.get_channel_stats(db, viewer.user_id)
    return success_response(result.to_json(), "Channel stats fetched successfully")


@router.get("/dashboard/videos")
def list_channel_videos(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = dashboard_service.list_channel_videos(db, viewer.user_id)
    return success_response(to_jsonable(result), "Channel videos fetched successfully")
