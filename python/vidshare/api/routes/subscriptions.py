"""Subscription routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vidshare.api.deps import get_db
from vidshare.auth.middleware import Viewer, get_viewer
from vidshare.responses import success_response
from vidshare.schemas.common import to_jsonable
from vidshare.services import subscriptions as subscriptions_service

router = APIRouter()


@router.post("/subscriptions/c/{channel_id}")
def toggle_subscription(
    channel_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = subscriptions_service.toggle_subscription(db, viewer.user_id, channel_id)
    message = "Subscribed successfully" if result.active else "Unsubscribed successfully"
    return success_response(result.to_json(), message)


@router.get("/subscriptions/c/{channel_id}")
def list_channel_subscribers(
    channel_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = subscriptions_service.list_channel_subscribers(db, channel_id)
    return success_response(to_jsonable(result), "Subscribers fetched successfully")


@router.get("/subscriptions/u/{subscriber_id}")
def list_subscribed_channels(
    subscriber_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = subscriptions_service.list_subscribed_channels(db, subscriber_id)
    return success_response(to_jsonable(result), "Subscribed channels fetched successfully")
