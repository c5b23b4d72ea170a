"""Video routes.

Routes are transport-only and call exactly one service function.

Static routes (/videos/recommended, /videos/u/..., /videos/toggle/...) are
registered before /videos/{video_id} so they are not captured as ids.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from vidshare.api.deps import get_db, get_media_relay
from vidshare.api.uploads import UploadStash, get_upload_stash
from vidshare.auth.middleware import Viewer, get_viewer
from vidshare.responses import success_response
from vidshare.schemas.common import to_jsonable
from vidshare.schemas.videos import PublishVideoParams, UpdateVideoParams
from vidshare.services import videos as videos_service
from vidshare.storage.media import MediaRelayBase

router = APIRouter()


@router.get("/videos")
def list_videos(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    page: str | None = None,
    limit: str | None = None,
    query: str | None = None,
    sort_by: Annotated[str, Query(alias="sortBy")] = "created_at",
    sort_type: Annotated[str, Query(alias="sortType")] = "desc",
    user_id: Annotated[UUID | None, Query(alias="userId")] = None,
) -> dict:
    """Search published videos. page/limit fall back to 1/10 when invalid."""
    result = videos_service.list_videos(
        db,
        viewer.user_id,
        query=query,
        user_id=user_id,
        sort_by=sort_by,  # type: ignore[arg-type]
        sort_type=sort_type,
        page=page,
        limit=limit,
    )
    return success_response(result.to_json(), "Videos fetched successfully")


@router.post("/videos", status_code=201)
def publish_video(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    relay: Annotated[MediaRelayBase, Depends(get_media_relay)],
    stash: Annotated[UploadStash, Depends(get_upload_stash)],
    title: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = None,
    video_file: Annotated[UploadFile | None, File(alias="videoFile")] = None,
    thumbnail: UploadFile | None = None,
) -> dict:
    params = PublishVideoParams(
        title=title or "",
        description=description or "",
        video_file=stash.save(video_file),
        thumbnail=stash.save(thumbnail),
    )
    result = videos_service.publish_video(db, relay, viewer.user_id, params)
    return success_response(result.to_json(), "Video has been published successfully", 201)


@router.get("/videos/recommended")
def list_recommended_videos(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = videos_service.list_recommended_videos(db)
    return success_response(to_jsonable(result), "Recommended videos fetched successfully")


@router.get("/videos/u/{username}")
def list_channel_public_videos(
    username: str,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = videos_service.list_channel_public_videos(db, username)
    return success_response(to_jsonable(result), "User's videos fetched successfully")


@router.patch("/videos/toggle/publish/{video_id}")
def toggle_publish_status(
    video_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = videos_service.toggle_publish_status(db, viewer.user_id, video_id)
    return success_response(result.to_json(), "Publish status toggled")


@router.get("/videos/{video_id}")
def get_video(
    video_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Fetch a video. Counts a view unless the viewer owns it."""
    result = videos_service.get_video(db, viewer.user_id, video_id)
    return success_response(result.to_json(), "Video fetched successfully")


@router.post("/videos/{video_id}/views")
def record_view(
    video_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = videos_service.record_view(db, viewer.user_id, video_id)
    message = "Video view recorded" if result.incremented else "Owner views are not counted"
    return success_response(result.to_json(), message)


@router.patch("/videos/{video_id}")
def update_video(
    video_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    relay: Annotated[MediaRelayBase, Depends(get_media_relay)],
    stash: Annotated[UploadStash, Depends(get_upload_stash)],
    title: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = None,
    thumbnail: UploadFile | None = None,
) -> dict:
    params = UpdateVideoParams(
        title=title, description=description, thumbnail=stash.save(thumbnail)
    )
    result = videos_service.update_video(db, relay, viewer.user_id, video_id, params)
    return success_response(result.to_json(), "Video updated successfully")


@router.delete("/videos/{video_id}")
def delete_video(
    video_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    relay: Annotated[MediaRelayBase, Depends(get_media_relay)],
) -> dict:
    videos_service.delete_video(db, relay, viewer.user_id, video_id)
    return success_response({}, "Video deleted successfully")
