"""Tweet service layer."""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from vidshare.auth.permissions import require_owner
from vidshare.db.models import Tweet
from vidshare.db.session import transaction
from vidshare.errors import ApiErrorCode, InvalidRequestError, NotFoundError
from vidshare.schemas.social import TweetOut
from vidshare.services.user_views import TWEET_OWNER, public_user_view
from vidshare.services.users import get_user_or_404

logger = logging.getLogger(__name__)


def _tweet_to_out(tweet: Tweet, owner: dict | None = None) -> TweetOut:
    return TweetOut(
        id=tweet.id,
        content=tweet.content,
        owner=owner if owner is not None else tweet.owner_id,
        created_at=tweet.created_at,
        updated_at=tweet.updated_at,
    )


def _get_tweet_or_404(db: Session, tweet_id: UUID) -> Tweet:
    tweet = db.get(Tweet, tweet_id)
    if tweet is None:
        raise NotFoundError(ApiErrorCode.E_TWEET_NOT_FOUND, "Tweet not found")
    return tweet


def _content_or_400(content: str | None) -> str:
    content = (content or "").strip()
    if not content:
        raise InvalidRequestError(ApiErrorCode.E_FIELD_REQUIRED, "Content is required")
    return content


def create_tweet(db: Session, viewer_id: UUID, content: str) -> TweetOut:
    content = _content_or_400(content)

    tweet = Tweet(content=content, owner_id=viewer_id)
    with transaction(db):
        db.add(tweet)

    logger.info("tweet_created", extra={"tweet_id": str(tweet.id)})
    return _tweet_to_out(tweet)


def list_user_tweets(db: Session, user_id: UUID) -> list[TweetOut]:
    """All tweets of a user, newest first, each with the owner's public view.

    Raises:
        NotFoundError(E_USER_NOT_FOUND): User missing.
    """
    user = get_user_or_404(db, user_id)
    owner = public_user_view(user, TWEET_OWNER)

    tweets = db.scalars(
        select(Tweet).where(Tweet.owner_id == user_id).order_by(Tweet.created_at.desc(), Tweet.id)
    ).all()
    return [_tweet_to_out(t, owner) for t in tweets]


def update_tweet(db: Session, viewer_id: UUID, tweet_id: UUID, content: str) -> TweetOut:
    """Raises NotFoundError before ForbiddenError; see vidshare.auth.permissions."""
    content = _content_or_400(content)
    tweet = _get_tweet_or_404(db, tweet_id)
    require_owner(viewer_id, tweet.owner_id, "Only the author can edit this tweet")

    with transaction(db):
        tweet.content = content

    return _tweet_to_out(tweet)


def delete_tweet(db: Session, viewer_id: UUID, tweet_id: UUID) -> None:
    tweet = _get_tweet_or_404(db, tweet_id)
    require_owner(viewer_id, tweet.owner_id, "Only the author can delete this tweet")

    with transaction(db):
        db.delete(tweet)
