"""Authentication and authorization module.

This module provides:
- Access/refresh token issuance and verification
- Password hashing
- Auth middleware for FastAPI
- The ownership guard used by every mutating content operation
"""

from vidshare.auth.middleware import AuthMiddleware, Viewer, get_viewer
from vidshare.auth.permissions import is_owner, require_owner
from vidshare.auth.tokens import TokenService, TokenVerifier

__all__ = [
    "AuthMiddleware",
    "Viewer",
    "get_viewer",
    "is_owner",
    "require_owner",
    "TokenService",
    "TokenVerifier",
]
