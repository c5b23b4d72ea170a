"""FastAPI dependencies for route handlers.

Shared collaborators (token service, media relay) are created once in
create_app() and stored on app.state.
"""

from fastapi import Request

from vidshare.auth.tokens import TokenService
from vidshare.db.session import get_db
from vidshare.storage.media import MediaRelayBase

__all__ = ["get_db", "get_media_relay", "get_token_service"]


def get_media_relay(request: Request) -> MediaRelayBase:
    return request.app.state.media_relay


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service
