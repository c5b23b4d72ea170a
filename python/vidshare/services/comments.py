"""Comment service layer.

Service functions correspond 1:1 with route handlers.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from vidshare.auth.permissions import require_owner
from vidshare.db.models import Comment
from vidshare.db.session import transaction
from vidshare.errors import ApiErrorCode, InvalidRequestError, NotFoundError
from vidshare.logging import get_logger
from vidshare.schemas.social import CommentOut
from vidshare.services.pagination import normalize_pagination, page_offset
from vidshare.services.user_views import COMMENTER, public_user_view
from vidshare.services.videos import get_visible_video_or_404

logger = get_logger(__name__)


def _comment_to_out(comment: Comment, owner: dict | None = None) -> CommentOut:
    return CommentOut(
        id=comment.id,
        content=comment.content,
        video=comment.video_id,
        owner=owner if owner is not None else comment.owner_id,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
    )


def _get_comment_or_404(db: Session, comment_id: UUID) -> Comment:
    comment = db.get(Comment, comment_id)
    if comment is None:
        raise NotFoundError(ApiErrorCode.E_COMMENT_NOT_FOUND, "Comment not found")
    return comment


def _content_or_400(content: str | None) -> str:
    content = (content or "").strip()
    if not content:
        raise InvalidRequestError(ApiErrorCode.E_FIELD_REQUIRED, "Content is required")
    return content


def list_video_comments(
    db: Session, viewer_id: UUID, video_id: UUID | str, page: object = None, limit: object = None
) -> list[CommentOut]:
    """One page of a video's comments, newest first, with commenter identity.

    video_id arrives unparsed; a malformed id reads as a missing video.

    Raises:
        NotFoundError(E_VIDEO_NOT_FOUND): Video id malformed, missing or not visible.
    """
    try:
        video_uuid = UUID(str(video_id))
    except ValueError:
        raise NotFoundError(ApiErrorCode.E_VIDEO_NOT_FOUND, "Video not found") from None
    get_visible_video_or_404(db, viewer_id, video_uuid)
    page_num, page_size = normalize_pagination(page, limit)

    comments = db.scalars(
        select(Comment)
        .where(Comment.video_id == video_uuid)
        .options(selectinload(Comment.owner))
        .order_by(Comment.created_at.desc(), Comment.id.desc())
        .offset(page_offset(page_num, page_size))
        .limit(page_size)
    ).all()

    return [_comment_to_out(c, public_user_view(c.owner, COMMENTER)) for c in comments]


def add_comment(db: Session, viewer_id: UUID, video_id: UUID, content: str) -> CommentOut:
    """Comment on a video.

    Raises:
        InvalidRequestError(E_FIELD_REQUIRED): Content empty.
        NotFoundError(E_VIDEO_NOT_FOUND): Video missing or not visible.
    """
    content = _content_or_400(content)
    get_visible_video_or_404(db, viewer_id, video_id)

    comment = Comment(content=content, video_id=video_id, owner_id=viewer_id)
    with transaction(db):
        db.add(comment)

    logger.info("comment_added", comment_id=str(comment.id), video_id=str(video_id))
    return _comment_to_out(comment)


def update_comment(db: Session, viewer_id: UUID, comment_id: UUID, content: str) -> CommentOut:
    """Edit a comment's content. Only its author may do so.

    Raises:
        InvalidRequestError(E_FIELD_REQUIRED): Content empty.
        NotFoundError(E_COMMENT_NOT_FOUND): Comment missing.
        ForbiddenError(E_FORBIDDEN): Viewer did not write the comment.
    """
    content = _content_or_400(content)
    comment = _get_comment_or_404(db, comment_id)
    require_owner(viewer_id, comment.owner_id, "Only the author can edit this comment")

    with transaction(db):
        comment.content = content

    return _comment_to_out(comment)


def delete_comment(db: Session, viewer_id: UUID, comment_id: UUID) -> None:
    """Delete a comment. Only its author may do so.

    Raises:
        NotFoundError(E_COMMENT_NOT_FOUND): Comment missing.
        ForbiddenError(E_FORBIDDEN): Viewer did not write the comment.
    """
    comment = _get_comment_or_404(db, comment_id)
    require_owner(viewer_id, comment.owner_id, "Only the author can delete this comment")

    with transaction(db):
        db.delete(comment)
