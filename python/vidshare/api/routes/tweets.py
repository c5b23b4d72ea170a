"""Tweet routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vidshare.api.deps import get_db
from vidshare.auth.middleware import Viewer, get_viewer
from vidshare.responses import success_response
from vidshare.schemas.common import to_jsonable
from vidshare.schemas.social import ContentRequest
from vidshare.services import tweets as tweets_service

router = APIRouter()


@router.post("/tweets", status_code=201)
def create_tweet(
    body: ContentRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = tweets_service.create_tweet(db, viewer.user_id, body.content)
    return success_response(result.to_json(), "Tweet created successfully", 201)


@router.get("/tweets/user/{user_id}")
def list_user_tweets(
    user_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = tweets_service.list_user_tweets(db, user_id)
    return success_response(to_jsonable(result), "Tweets fetched successfully")


@router.patch("/tweets/{tweet_id}")
def update_tweet(
    tweet_id: UUID,
    body: ContentRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = tweets_service.update_tweet(db, viewer.user_id, tweet_id, body.content)
    return success_response(result.to_json(), "Tweet updated successfully")


@router.delete("/tweets/{tweet_id}")
def delete_tweet(
    tweet_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    tweets_service.delete_tweet(db, viewer.user_id, tweet_id)
    return success_response({}, "Tweet deleted successfully")
