"""HTTP middleware."""

from vidshare.middleware.request_id import RequestIDMiddleware

__all__ = ["RequestIDMiddleware"]
