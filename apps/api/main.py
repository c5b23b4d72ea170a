"""uvicorn entrypoint: `uvicorn apps.api.main:app`.

The app is built here rather than in vidshare.app so importing the package
(tests, the worker) never requires a configured environment.
"""

from vidshare.app import add_request_id_middleware, create_app

app = create_app()
add_request_id_middleware(app)

__all__ = ["app"]
