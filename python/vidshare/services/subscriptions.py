"""Subscription service layer.

A channel is a user. Subscribing toggles a (subscriber, channel) join record.
"""

from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from vidshare.db.models import Subscription, User
from vidshare.errors import ApiErrorCode, InvalidRequestError
from vidshare.schemas.engagement import ToggleOut
from vidshare.services.toggles import ToggleOutcome, ToggleTarget, toggle
from vidshare.services.user_views import SUBSCRIBED_CHANNEL, SUBSCRIBER, public_user_view
from vidshare.services.users import get_user_or_404


def toggle_subscription(db: Session, viewer_id: UUID, channel_id: UUID) -> ToggleOut:
    """Subscribe to or unsubscribe from a channel.

    Raises:
        NotFoundError(E_CHANNEL_NOT_FOUND): Channel missing.
        InvalidRequestError(E_INVALID_REQUEST): Viewer tried to subscribe to themselves.
    """
    get_user_or_404(db, channel_id, ApiErrorCode.E_CHANNEL_NOT_FOUND)
    if channel_id == viewer_id:
        raise InvalidRequestError(
            ApiErrorCode.E_INVALID_REQUEST, "You cannot subscribe to your own channel"
        )

    outcome = toggle(db, viewer_id, ToggleTarget.CHANNEL, channel_id)
    return ToggleOut(active=outcome == ToggleOutcome.CREATED)


def list_channel_subscribers(db: Session, channel_id: UUID) -> list[dict[str, Any]]:
    """Subscribers of a channel as [{"subscriber": {...}}], oldest first.

    Raises:
        NotFoundError(E_CHANNEL_NOT_FOUND): Channel missing.
    """
    get_user_or_404(db, channel_id, ApiErrorCode.E_CHANNEL_NOT_FOUND)

    subscribers = db.scalars(
        select(User)
        .join(Subscription, Subscription.subscriber_id == User.id)
        .where(Subscription.channel_id == channel_id)
        .order_by(Subscription.created_at, Subscription.id)
    ).all()
    return [{"subscriber": public_user_view(u, SUBSCRIBER)} for u in subscribers]


def list_subscribed_channels(db: Session, subscriber_id: UUID) -> list[dict[str, Any]]:
    """Channels a user subscribes to, oldest subscription first.

    Raises:
        NotFoundError(E_USER_NOT_FOUND): User missing.
    """
    get_user_or_404(db, subscriber_id)

    channels = db.scalars(
        select(User)
        .join(Subscription, Subscription.channel_id == User.id)
        .where(Subscription.subscriber_id == subscriber_id)
        .order_by(Subscription.created_at, Subscription.id)
    ).all()
    return [public_user_view(c, SUBSCRIBED_CHANNEL) for c in channels]
