"""User, session and channel routes.

Routes are transport-only:
- Extract viewer from request.state
- Call exactly one service function
- Return success_response(...) or raise ApiError

Login and refresh also set the accessToken/refreshToken HttpOnly cookies;
logout clears them.
"""

from typing import Annotated

from fastapi import APIRouter, Cookie, Depends, File, Form, Response, UploadFile
from sqlalchemy.orm import Session

from vidshare.api.deps import get_db, get_media_relay, get_token_service
from vidshare.api.uploads import UploadStash, get_upload_stash
from vidshare.auth.middleware import ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE, Viewer, get_viewer
from vidshare.auth.tokens import TokenService
from vidshare.config import get_settings
from vidshare.responses import success_response
from vidshare.schemas.common import to_jsonable
from vidshare.schemas.users import (
    ChangePasswordRequest,
    LoginRequest,
    RefreshTokenRequest,
    RegisterParams,
    UpdateAccountRequest,
)
from vidshare.services import users as users_service
from vidshare.storage.media import MediaRelayBase

router = APIRouter()


def _set_auth_cookies(response: Response, access_token: str, refresh_token: str) -> None:
    settings = get_settings()
    for name, value, max_age in (
        (ACCESS_TOKEN_COOKIE, access_token, settings.access_token_expire_s),
        (REFRESH_TOKEN_COOKIE, refresh_token, settings.refresh_token_expire_s),
    ):
        response.set_cookie(
            name,
            value,
            max_age=max_age,
            httponly=True,
            secure=settings.cookie_secure,
            samesite="lax",
        )


# =============================================================================
# Public routes
# =============================================================================


@router.post("/users/register", status_code=201)
def register_user(
    db: Annotated[Session, Depends(get_db)],
    relay: Annotated[MediaRelayBase, Depends(get_media_relay)],
    stash: Annotated[UploadStash, Depends(get_upload_stash)],
    username: Annotated[str | None, Form()] = None,
    email: Annotated[str | None, Form()] = None,
    full_name: Annotated[str | None, Form(alias="fullName")] = None,
    password: Annotated[str | None, Form()] = None,
    avatar: UploadFile | None = None,
    cover_image: Annotated[UploadFile | None, File(alias="coverImage")] = None,
) -> dict:
    """Create an account (multipart: avatar required, coverImage optional)."""
    params = RegisterParams(
        username=username or "",
        email=email or "",
        full_name=full_name or "",
        password=password or "",
        avatar=stash.save(avatar),
        cover_image=stash.save(cover_image),
    )
    result = users_service.register_user(db, relay, params)
    return success_response(to_jsonable(result), "User registered successfully", 201)


@router.post("/users/login")
def login_user(
    body: LoginRequest,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> dict:
    result = users_service.login_user(db, tokens, body.identifier, body.password)
    _set_auth_cookies(response, result.access_token, result.refresh_token)
    return success_response(result.to_json(), "User logged in successfully")


@router.post("/users/refresh-token")
def refresh_access_token(
    response: Response,
    db: Annotated[Session, Depends(get_db)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
    body: RefreshTokenRequest | None = None,
    refresh_cookie: Annotated[str | None, Cookie(alias=REFRESH_TOKEN_COOKIE)] = None,
) -> dict:
    """Rotate the token pair. The body token wins over the cookie."""
    incoming = (body.refresh_token if body else None) or refresh_cookie
    result = users_service.refresh_tokens(db, tokens, incoming)
    _set_auth_cookies(response, result.access_token, result.refresh_token)
    return success_response(result.to_json(), "Access token refreshed")


# =============================================================================
# Authenticated routes
# =============================================================================


@router.post("/users/logout")
def logout_user(
    response: Response,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    users_service.logout_user(db, viewer.user_id)
    response.delete_cookie(ACCESS_TOKEN_COOKIE)
    response.delete_cookie(REFRESH_TOKEN_COOKIE)
    return success_response({}, "User logged out")


@router.post("/users/change-password")
def change_password(
    body: ChangePasswordRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    users_service.change_password(db, viewer.user_id, body.old_password, body.new_password)
    return success_response({}, "Password changed successfully")


@router.get("/users/current-user")
def get_current_user(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = users_service.get_current_user(db, viewer.user_id)
    return success_response(to_jsonable(result), "Current user fetched successfully")


@router.patch("/users/update-account")
def update_account(
    body: UpdateAccountRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = users_service.update_account(db, viewer.user_id, body.full_name, body.email)
    return success_response(to_jsonable(result), "Account details updated successfully")


@router.patch("/users/avatar")
def update_avatar(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    relay: Annotated[MediaRelayBase, Depends(get_media_relay)],
    stash: Annotated[UploadStash, Depends(get_upload_stash)],
    avatar: UploadFile | None = None,
) -> dict:
    result = users_service.update_avatar(db, relay, viewer.user_id, stash.save(avatar))
    return success_response(to_jsonable(result), "Avatar updated successfully")


@router.patch("/users/cover-image")
def update_cover_image(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    relay: Annotated[MediaRelayBase, Depends(get_media_relay)],
    stash: Annotated[UploadStash, Depends(get_upload_stash)],
    cover_image: Annotated[UploadFile | None, File(alias="coverImage")] = None,
) -> dict:
    result = users_service.update_cover_image(db, relay, viewer.user_id, stash.save(cover_image))
    return success_response(to_jsonable(result), "Cover image updated successfully")


@router.get("/users/c/{username}")
def get_channel_profile(
    username: str,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = users_service.get_channel_profile(db, viewer.user_id, username)
    return success_response(result.to_json(), "User channel fetched successfully")


@router.get("/users/history")
def get_watch_history(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = users_service.get_watch_history(db, viewer.user_id)
    return success_response(to_jsonable(result), "Watch history fetched successfully")
