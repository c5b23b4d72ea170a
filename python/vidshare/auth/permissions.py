"""Ownership guard for mutating operations.

Video, Comment, Tweet and Playlist carry a single immutable owner. Only that
owner may update or delete the resource.

Ordering rule (callers must follow it):
1. Load the resource. Absent -> NotFoundError (404).
2. Only then call require_owner(). Mismatch -> ForbiddenError (403).

A missing resource therefore always reports 404, never 403.
"""

from uuid import UUID

from vidshare.errors import ApiErrorCode, ForbiddenError


def is_owner(viewer_id: UUID, owner_id: UUID) -> bool:
    """Pure identifier comparison; no side effects."""
    return viewer_id == owner_id


def require_owner(
    viewer_id: UUID,
    owner_id: UUID,
    message: str = "You are not allowed to modify this resource",
) -> None:
    """Raise ForbiddenError unless viewer_id owns the resource."""
    if not is_owner(viewer_id, owner_id):
        raise ForbiddenError(ApiErrorCode.E_FORBIDDEN, message)
