"""Multipart file staging.

Uploaded parts are streamed to UPLOAD_TMP_DIR and handed to services as
local paths. The media relay removes each file once relayed; whatever is
left when the request ends (validation failed before upload) is removed by
the stash.
"""

from collections.abc import Generator
from pathlib import Path
from uuid import uuid4

from fastapi import UploadFile

from vidshare.config import get_settings
from vidshare.errors import ApiErrorCode, InvalidRequestError

CHUNK_SIZE = 1024 * 1024


class UploadStash:
    """Per-request temp files for multipart uploads."""

    def __init__(self, directory: Path, max_bytes: int):
        self.directory = directory
        self.max_bytes = max_bytes
        self._paths: list[Path] = []

    def save(self, upload: UploadFile | None) -> Path | None:
        """Write an uploaded part to disk.

        Returns:
            The temp path, or None when the part is absent or has no filename.

        Raises:
            InvalidRequestError(E_FILE_TOO_LARGE): Part exceeds MAX_UPLOAD_BYTES.
        """
        if upload is None or not upload.filename:
            return None

        self.directory.mkdir(parents=True, exist_ok=True)
        suffix = Path(upload.filename).suffix.lower()
        path = self.directory / f"{uuid4().hex}{suffix}"
        self._paths.append(path)

        written = 0
        with path.open("wb") as out:
            while chunk := upload.file.read(CHUNK_SIZE):
                written += len(chunk)
                if written > self.max_bytes:
                    raise InvalidRequestError(
                        ApiErrorCode.E_FILE_TOO_LARGE, f"{upload.filename} is too large"
                    )
                out.write(chunk)
        return path

    def cleanup(self) -> None:
        for path in self._paths:
            path.unlink(missing_ok=True)
        self._paths.clear()


def get_upload_stash() -> Generator[UploadStash, None, None]:
    """FastAPI dependency yielding a stash that is emptied after the request."""
    settings = get_settings()
    stash = UploadStash(Path(settings.upload_tmp_dir), settings.max_upload_bytes)
    try:
        yield stash
    finally:
        stash.cleanup()
