"""User, session and channel service layer.

Service functions correspond 1:1 with route handlers.
Routes are transport-only and call exactly one service function.

Users are returned through the public user view, so password and
refresh-token hashes never leave this module.
"""

import logging
from pathlib import Path
from typing import Any
from uuid import UUID

from sqlalchemy import exists, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from vidshare.auth.passwords import hash_password, verify_password
from vidshare.auth.tokens import TokenService, hash_refresh_token
from vidshare.config import get_settings
from vidshare.db.models import Subscription, User, Video, WatchHistoryEntry
from vidshare.db.session import transaction
from vidshare.errors import (
    ApiErrorCode,
    InvalidRequestError,
    NotFoundError,
    UnauthenticatedError,
)
from vidshare.schemas.users import ChannelProfileOut, LoginOut, RegisterParams, TokensOut
from vidshare.schemas.videos import VideoOut
from vidshare.services.user_views import WATCH_HISTORY_OWNER, public_user_view
from vidshare.services.videos import video_to_out
from vidshare.storage.cleanup import release_media
from vidshare.storage.media import MediaRelayBase

logger = logging.getLogger(__name__)


# =============================================================================
# Shared Helpers
# =============================================================================


def get_user_or_404(
    db: Session, user_id: UUID, code: ApiErrorCode = ApiErrorCode.E_USER_NOT_FOUND
) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError(code, "User not found")
    return user


def load_username(db: Session, user_id: UUID) -> str | None:
    """Username for a live user id, or None if the user is gone."""
    return db.scalar(select(User.username).where(User.id == user_id))


def _required(value: str | None, field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise InvalidRequestError(ApiErrorCode.E_FIELD_REQUIRED, f"{field} is required")
    return value


def _hash(password: str) -> str:
    return hash_password(password, rounds=get_settings().bcrypt_rounds)


def _issue_tokens(db: Session, tokens: TokenService, user: User) -> TokensOut:
    """Issue a fresh pair and store the refresh-token hash (rotation)."""
    pair = tokens.issue_pair(user.id, user.username, user.email, user.full_name)
    with transaction(db):
        user.refresh_token_hash = hash_refresh_token(pair.refresh_token)
    return TokensOut(access_token=pair.access_token, refresh_token=pair.refresh_token)


# =============================================================================
# Registration and sessions
# =============================================================================


def register_user(db: Session, relay: MediaRelayBase, params: RegisterParams) -> dict[str, Any]:
    """Create an account.

    Username and email are stored lowercase. The avatar is required and is
    uploaded before the row is written; the cover image is optional.

    Raises:
        InvalidRequestError(E_FIELD_REQUIRED): A text field is empty.
        InvalidRequestError(E_USER_EXISTS): Username or email already taken.
        InvalidRequestError(E_FILE_REQUIRED): Avatar missing.
        UploadError: The media host rejected an upload.
    """
    username = _required(params.username, "Username").lower()
    email = _required(params.email, "Email").lower()
    full_name = _required(params.full_name, "Full name")
    password = params.password or ""
    if not password.strip():
        raise InvalidRequestError(ApiErrorCode.E_FIELD_REQUIRED, "Password is required")

    taken = db.scalar(
        select(exists().where(or_(User.username == username, User.email == email)))
    )
    if taken:
        raise InvalidRequestError(
            ApiErrorCode.E_USER_EXISTS, "User with this username or email already exists"
        )

    if params.avatar is None:
        raise InvalidRequestError(ApiErrorCode.E_FILE_REQUIRED, "Avatar file is required")

    avatar_url = relay.upload(params.avatar).url
    cover_url = None
    try:
        if params.cover_image is not None:
            cover_url = relay.upload(params.cover_image).url

        user = User(
            username=username,
            email=email,
            full_name=full_name,
            avatar=avatar_url,
            cover_image=cover_url,
            password_hash=_hash(password),
        )
        with transaction(db):
            db.add(user)
    except IntegrityError as e:
        release_media(relay, avatar_url, cover_url)
        raise InvalidRequestError(
            ApiErrorCode.E_USER_EXISTS, "User with this username or email already exists"
        ) from e
    except Exception:
        release_media(relay, avatar_url, cover_url)
        raise

    logger.info("user_registered", extra={"user_id": str(user.id)})
    return public_user_view(user)


def login_user(db: Session, tokens: TokenService, identifier: str, password: str) -> LoginOut:
    """Authenticate by username or email and issue a token pair.

    Raises:
        NotFoundError(E_USER_NOT_FOUND): No such user.
        UnauthenticatedError(E_INVALID_CREDENTIALS): Wrong password.
    """
    identifier = identifier.strip().lower()
    user = db.scalar(
        select(User).where(or_(User.username == identifier, User.email == identifier))
    )
    if user is None:
        raise NotFoundError(ApiErrorCode.E_USER_NOT_FOUND, "User does not exist")

    if not verify_password(password, user.password_hash):
        logger.warning("login_failed", extra={"user_id": str(user.id)})
        raise UnauthenticatedError(ApiErrorCode.E_INVALID_CREDENTIALS, "Invalid user credentials")

    issued = _issue_tokens(db, tokens, user)
    logger.info("user_logged_in", extra={"user_id": str(user.id)})
    return LoginOut(
        user=public_user_view(user),
        access_token=issued.access_token,
        refresh_token=issued.refresh_token,
    )


def logout_user(db: Session, viewer_id: UUID) -> None:
    """Invalidate the stored refresh token."""
    user = get_user_or_404(db, viewer_id)
    with transaction(db):
        user.refresh_token_hash = None


def refresh_tokens(db: Session, tokens: TokenService, refresh_token: str | None) -> TokensOut:
    """Exchange a refresh token for a new pair.

    Refresh tokens are single-use: the stored hash must match, and it is
    replaced by the new token's hash.

    Raises:
        UnauthenticatedError(E_REFRESH_TOKEN_INVALID): Missing, invalid,
            expired, already used, or the user is gone.
    """
    if not refresh_token:
        raise UnauthenticatedError(ApiErrorCode.E_REFRESH_TOKEN_INVALID, "Refresh token required")

    claims = tokens.verify_refresh(refresh_token)
    user = db.get(User, UUID(claims["sub"]))
    if user is None or user.refresh_token_hash != hash_refresh_token(refresh_token):
        logger.warning("refresh_token_rejected", extra={"sub": claims["sub"]})
        raise UnauthenticatedError(
            ApiErrorCode.E_REFRESH_TOKEN_INVALID, "Refresh token is expired or used"
        )

    return _issue_tokens(db, tokens, user)


# =============================================================================
# Account
# =============================================================================


def change_password(db: Session, viewer_id: UUID, old_password: str, new_password: str) -> None:
    """Replace the password after checking the old one.

    Raises:
        InvalidRequestError(E_INVALID_PASSWORD): Old password wrong.
        InvalidRequestError(E_FIELD_REQUIRED): New password empty.
    """
    user = get_user_or_404(db, viewer_id)
    if not verify_password(old_password, user.password_hash):
        raise InvalidRequestError(ApiErrorCode.E_INVALID_PASSWORD, "Invalid old password")
    if not (new_password or "").strip():
        raise InvalidRequestError(ApiErrorCode.E_FIELD_REQUIRED, "New password is required")

    with transaction(db):
        user.password_hash = _hash(new_password)


def get_current_user(db: Session, viewer_id: UUID) -> dict[str, Any]:
    return public_user_view(get_user_or_404(db, viewer_id))


def update_account(db: Session, viewer_id: UUID, full_name: str, email: str) -> dict[str, Any]:
    """Update full name and email.

    Raises:
        InvalidRequestError(E_FIELD_REQUIRED): Either field empty.
        InvalidRequestError(E_USER_EXISTS): Email belongs to another user.
    """
    full_name = _required(full_name, "Full name")
    email = _required(email, "Email").lower()

    user = get_user_or_404(db, viewer_id)
    taken = db.scalar(select(exists().where(User.email == email, User.id != viewer_id)))
    if taken:
        raise InvalidRequestError(ApiErrorCode.E_USER_EXISTS, "Email is already in use")

    try:
        with transaction(db):
            user.full_name = full_name
            user.email = email
    except IntegrityError as e:
        raise InvalidRequestError(ApiErrorCode.E_USER_EXISTS, "Email is already in use") from e

    return public_user_view(user)


def _replace_image(
    db: Session,
    relay: MediaRelayBase,
    viewer_id: UUID,
    local_path: Path | None,
    attribute: str,
    label: str,
) -> dict[str, Any]:
    if local_path is None:
        raise InvalidRequestError(ApiErrorCode.E_FILE_REQUIRED, f"{label} file is required")

    user = get_user_or_404(db, viewer_id)
    new_url = relay.upload(local_path).url

    with transaction(db):
        old_url = getattr(user, attribute)
        setattr(user, attribute, new_url)

    release_media(relay, old_url)
    return public_user_view(user)


def update_avatar(
    db: Session, relay: MediaRelayBase, viewer_id: UUID, avatar: Path | None
) -> dict[str, Any]:
    """Upload a new avatar; the old one is released best-effort."""
    return _replace_image(db, relay, viewer_id, avatar, "avatar", "Avatar")


def update_cover_image(
    db: Session, relay: MediaRelayBase, viewer_id: UUID, cover_image: Path | None
) -> dict[str, Any]:
    """Upload a new cover image; the old one is released best-effort."""
    return _replace_image(db, relay, viewer_id, cover_image, "cover_image", "Cover image")


# =============================================================================
# Channel queries
# =============================================================================


def get_channel_profile(db: Session, viewer_id: UUID, username: str) -> ChannelProfileOut:
    """Channel page header with subscription counts.

    is_subscribed reports whether the viewer subscribes to this channel
    (always False when viewing one's own channel).

    Raises:
        NotFoundError(E_CHANNEL_NOT_FOUND): No user with that username.
    """
    username = (username or "").strip().lower()
    if not username:
        raise InvalidRequestError(ApiErrorCode.E_FIELD_REQUIRED, "Username is missing")

    user = db.scalar(select(User).where(User.username == username))
    if user is None:
        raise NotFoundError(ApiErrorCode.E_CHANNEL_NOT_FOUND, "Channel does not exist")

    subscribers_count = db.scalar(
        select(func.count()).select_from(Subscription).where(Subscription.channel_id == user.id)
    )
    subscribed_to_count = db.scalar(
        select(func.count())
        .select_from(Subscription)
        .where(Subscription.subscriber_id == user.id)
    )
    is_subscribed = db.scalar(
        select(
            exists().where(
                Subscription.subscriber_id == viewer_id,
                Subscription.channel_id == user.id,
            )
        )
    )

    return ChannelProfileOut(
        id=user.id,
        username=user.username,
        full_name=user.full_name,
        email=user.email,
        avatar=user.avatar,
        cover_image=user.cover_image,
        subscribers_count=subscribers_count or 0,
        subscribed_to_count=subscribed_to_count or 0,
        is_subscribed=bool(is_subscribed),
    )


def get_watch_history(db: Session, viewer_id: UUID) -> list[VideoOut]:
    """Watched videos in stored order, each with a reduced owner view.

    Entries are appended on each view, so the list runs oldest first and the
    most recently watched video is last. Re-watching moves a video to the end.
    """
    get_user_or_404(db, viewer_id)

    videos = db.scalars(
        select(Video)
        .join(WatchHistoryEntry, WatchHistoryEntry.video_id == Video.id)
        .where(WatchHistoryEntry.user_id == viewer_id)
        .options(selectinload(Video.owner))
        .order_by(WatchHistoryEntry.seq)
    ).all()

    return [video_to_out(v, public_user_view(v.owner, WATCH_HISTORY_OWNER)) for v in videos]
