"""Playlist routes.

Membership changes use /playlists/add|remove/{video_id}/{playlist_id} and
are restricted to the playlist owner.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Form, UploadFile
from sqlalchemy.orm import Session

from vidshare.api.deps import get_db, get_media_relay
from vidshare.api.uploads import UploadStash, get_upload_stash
from vidshare.auth.middleware import Viewer, get_viewer
from vidshare.responses import success_response
from vidshare.schemas.common import to_jsonable
from vidshare.schemas.social import CreatePlaylistParams, UpdatePlaylistRequest
from vidshare.services import playlists as playlists_service
from vidshare.storage.media import MediaRelayBase

router = APIRouter()


@router.post("/playlists", status_code=201)
def create_playlist(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    relay: Annotated[MediaRelayBase, Depends(get_media_relay)],
    stash: Annotated[UploadStash, Depends(get_upload_stash)],
    name: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = None,
    thumbnail: UploadFile | None = None,
) -> dict:
    params = CreatePlaylistParams(
        name=name or "",
        description=description or "",
        thumbnail=stash.save(thumbnail),
    )
    result = playlists_service.create_playlist(db, relay, viewer.user_id, params)
    return success_response(result.to_json(), "Playlist created successfully", 201)


@router.get("/playlists/user/{user_id}")
def list_user_playlists(
    user_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = playlists_service.list_user_playlists(db, user_id)
    return success_response(to_jsonable(result), "Playlists fetched successfully")


@router.patch("/playlists/add/{video_id}/{playlist_id}")
def add_video_to_playlist(
    video_id: UUID,
    playlist_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = playlists_service.add_video_to_playlist(db, viewer.user_id, video_id, playlist_id)
    return success_response(result.to_json(), "Video added to playlist")


@router.patch("/playlists/remove/{video_id}/{playlist_id}")
def remove_video_from_playlist(
    video_id: UUID,
    playlist_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = playlists_service.remove_video_from_playlist(
        db, viewer.user_id, video_id, playlist_id
    )
    return success_response(result.to_json(), "Video removed from playlist")


@router.get("/playlists/{playlist_id}")
def get_playlist(
    playlist_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = playlists_service.get_playlist(db, viewer.user_id, playlist_id)
    return success_response(result.to_json(), "Playlist fetched successfully")


@router.patch("/playlists/{playlist_id}")
def update_playlist(
    playlist_id: UUID,
    body: UpdatePlaylistRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = playlists_service.update_playlist(
        db, viewer.user_id, playlist_id, name=body.name, description=body.description
    )
    return success_response(result.to_json(), "Playlist updated successfully")


@router.delete("/playlists/{playlist_id}")
def delete_playlist(
    playlist_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    relay: Annotated[MediaRelayBase, Depends(get_media_relay)],
) -> dict:
    playlists_service.delete_playlist(db, relay, viewer.user_id, playlist_id)
    return success_response({}, "Playlist deleted successfully")
