"""Toggle engine for like and subscription join records.

toggle() flips existence of the (subject, target) pair and reports which way
it went. The flip is a single atomic step: an INSERT inside a SAVEPOINT.
If a unique constraint rejects it, the pair already exists and is deleted
instead. Two concurrent identical toggles can therefore never leave a
duplicate row.

Callers check that the target exists first. A target deleted between that
check and the insert surfaces as the target's NotFoundError.
"""

import logging
from enum import Enum
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from vidshare.db.models import Comment, Like, Subscription, Tweet, User, Video
from vidshare.db.session import insert_or_conflict, transaction
from vidshare.errors import ApiErrorCode, NotFoundError

logger = logging.getLogger(__name__)


class ToggleTarget(str, Enum):
    VIDEO = "video"
    COMMENT = "comment"
    TWEET = "tweet"
    CHANNEL = "channel"


class ToggleOutcome(str, Enum):
    CREATED = "created"
    DELETED = "deleted"


_LIKE_COLUMNS = {
    ToggleTarget.VIDEO: "video_id",
    ToggleTarget.COMMENT: "comment_id",
    ToggleTarget.TWEET: "tweet_id",
}

_TARGET_MODELS = {
    ToggleTarget.VIDEO: (Video, ApiErrorCode.E_VIDEO_NOT_FOUND, "Video not found"),
    ToggleTarget.COMMENT: (Comment, ApiErrorCode.E_COMMENT_NOT_FOUND, "Comment not found"),
    ToggleTarget.TWEET: (Tweet, ApiErrorCode.E_TWEET_NOT_FOUND, "Tweet not found"),
    ToggleTarget.CHANNEL: (User, ApiErrorCode.E_CHANNEL_NOT_FOUND, "Channel not found"),
}


def _new_row(subject_id: UUID, target: ToggleTarget, target_id: UUID) -> Like | Subscription:
    if target == ToggleTarget.CHANNEL:
        return Subscription(subscriber_id=subject_id, channel_id=target_id)
    return Like(liked_by_id=subject_id, **{_LIKE_COLUMNS[target]: target_id})


def _delete_existing(db: Session, subject_id: UUID, target: ToggleTarget, target_id: UUID) -> int:
    if target == ToggleTarget.CHANNEL:
        stmt = delete(Subscription).where(
            Subscription.subscriber_id == subject_id,
            Subscription.channel_id == target_id,
        )
    else:
        column = getattr(Like, _LIKE_COLUMNS[target])
        stmt = delete(Like).where(Like.liked_by_id == subject_id, column == target_id)
    return db.execute(stmt).rowcount


def _require_target(db: Session, target: ToggleTarget, target_id: UUID) -> None:
    model, code, message = _TARGET_MODELS[target]
    if db.scalar(select(model.id).where(model.id == target_id)) is None:
        raise NotFoundError(code, message)


def toggle(db: Session, subject_id: UUID, target: ToggleTarget, target_id: UUID) -> ToggleOutcome:
    """Create the join record if absent, delete it if present.

    Args:
        db: Database session.
        subject_id: The acting user (liker or subscriber).
        target: Kind of target.
        target_id: The video, comment, tweet or channel (user) id.

    Returns:
        ToggleOutcome.CREATED or ToggleOutcome.DELETED.

    Raises:
        NotFoundError: The insert was rejected, nothing was deleted and the
            target no longer exists.
    """
    with transaction(db):
        if insert_or_conflict(db, _new_row(subject_id, target, target_id)):
            outcome = ToggleOutcome.CREATED
        else:
            removed = _delete_existing(db, subject_id, target, target_id)
            if not removed:
                _require_target(db, target, target_id)
            # Zero rows with a live target: a concurrent toggle removed the pair.
            outcome = ToggleOutcome.DELETED

    logger.info(
        "toggle_applied",
        extra={
            "subject_id": str(subject_id),
            "target": target.value,
            "target_id": str(target_id),
            "outcome": outcome.value,
        },
    )
    return outcome
