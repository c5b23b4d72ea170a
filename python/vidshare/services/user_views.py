"""Public user view.

Every response that embeds a user goes through public_user_view(). The
password hash and refresh-token hash are never part of the view; each query
names which additional fields it drops.
"""

from collections.abc import Iterable
from typing import Any

from vidshare.db.models import User

PUBLIC_USER_FIELDS = (
    "id",
    "username",
    "email",
    "fullName",
    "avatar",
    "coverImage",
    "createdAt",
    "updatedAt",
)

TIMESTAMPS = frozenset({"createdAt", "updatedAt"})


def _keep_only(*fields: str) -> frozenset[str]:
    return frozenset(PUBLIC_USER_FIELDS) - frozenset(fields)


# Named exclusion sets, one per embedding query.
OWNER_CARD = _keep_only("id", "username", "fullName", "avatar")
WATCH_HISTORY_OWNER = _keep_only("username", "fullName", "avatar")
LIKED_VIDEO_OWNER = frozenset({"email", "coverImage"})
COMMENTER = _keep_only("id", "username", "email", "avatar")
SUBSCRIBER = _keep_only("id", "username", "fullName", "email", "avatar")
SUBSCRIBED_CHANNEL = TIMESTAMPS
TWEET_OWNER: frozenset[str] = frozenset()


def public_user_view(user: User, exclude: Iterable[str] = frozenset()) -> dict[str, Any]:
    """Shape a user for embedding in another entity's output.

    Args:
        user: The ORM user.
        exclude: camelCase field names to drop in addition to the secrets.

    Returns:
        Dict keyed by camelCase field name, in PUBLIC_USER_FIELDS order.
    """
    values = {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "fullName": user.full_name,
        "avatar": user.avatar,
        "coverImage": user.cover_image,
        "createdAt": user.created_at,
        "updatedAt": user.updated_at,
    }
    dropped = frozenset(exclude)
    return {key: values[key] for key in PUBLIC_USER_FIELDS if key not in dropped}
