"""Comment routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vidshare.api.deps import get_db
from vidshare.auth.middleware import Viewer, get_viewer
from vidshare.responses import success_response
from vidshare.schemas.common import to_jsonable
from vidshare.schemas.social import ContentRequest
from vidshare.services import comments as comments_service

router = APIRouter()


@router.get("/comments/{video_id}")
def list_video_comments(
    video_id: str,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    page: str | None = None,
    limit: str | None = None,
) -> dict:
    result = comments_service.list_video_comments(db, viewer.user_id, video_id, page, limit)
    return success_response(to_jsonable(result), "Comments fetched successfully")


@router.post("/comments/{video_id}", status_code=201)
def add_comment(
    video_id: UUID,
    body: ContentRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = comments_service.add_comment(db, viewer.user_id, video_id, body.content)
    return success_response(result.to_json(), "Comment added successfully", 201)


@router.patch("/comments/c/{comment_id}")
def update_comment(
    comment_id: UUID,
    body: ContentRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = comments_service.update_comment(db, viewer.user_id, comment_id, body.content)
    return success_response(result.to_json(), "Comment updated successfully")


@router.delete("/comments/c/{comment_id}")
def delete_comment(
    comment_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    comments_service.delete_comment(db, viewer.user_id, comment_id)
    return success_response({}, "Comment deleted successfully")
