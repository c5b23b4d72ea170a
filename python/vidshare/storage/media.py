"""Media host client abstraction.

Binary media (video files, thumbnails, avatars, cover images) is never stored
by the API. Multipart uploads land in a local temp file, are relayed to the
media host, and only the returned URL is persisted.

Provides:
- MediaRelayBase: upload(local_path) / delete(ref)
- CloudinaryMediaRelay: httpx client for the Cloudinary upload API
- FakeMediaRelay: in-memory relay for local dev and tests
- discard_media: best-effort deletion of released references
"""

import hashlib
import logging
import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from uuid import uuid4

import httpx

from vidshare.config import Settings, get_settings
from vidshare.errors import ApiErrorCode, UploadError

logger = logging.getLogger(__name__)

CLOUDINARY_API_BASE = "https://api.cloudinary.com/v1_1"

# res.cloudinary.com/<cloud>/<resource_type>/upload/[v<version>/]<public_id>.<ext>
_DELIVERY_URL_PATTERN = re.compile(
    r"/(?P<resource_type>image|video|raw)/upload/(?:v\d+/)?"
    r"(?P<public_id>[^?#]+?)(?:\.[A-Za-z0-9]+)?(?:[?#].*)?$"
)

VIDEO_SUFFIXES = {".mp4", ".mov", ".webm", ".mkv", ".avi", ".m4v"}


@dataclass(frozen=True)
class UploadedMedia:
    """Result of a successful upload.

    duration is reported in seconds for video/audio, None otherwise.
    """

    url: str
    public_id: str
    duration: float | None = None


class MediaRelayError(Exception):
    """Media host call failed (delete path)."""

    def __init__(self, message: str, ref: str | None = None):
        super().__init__(message)
        self.message = message
        self.ref = ref


class MediaRelayBase(ABC):
    """Abstract base class for media relay implementations."""

    def upload(self, local_path: Path) -> UploadedMedia:
        """Upload a local temp file to the media host.

        The temp file is removed afterwards whether or not the upload succeeded.

        Raises:
            UploadError: If the file is missing or the host rejects it.
        """
        try:
            if not local_path.is_file():
                raise UploadError(ApiErrorCode.E_UPLOAD_FAILED, "Upload file is missing")
            return self._upload(local_path)
        finally:
            local_path.unlink(missing_ok=True)

    @abstractmethod
    def _upload(self, local_path: Path) -> UploadedMedia: ...

    @abstractmethod
    def delete(self, ref: str) -> None:
        """Delete a previously uploaded object by URL.

        Raises:
            MediaRelayError: If the host call fails. Already-missing objects
                are not an error.
        """
        ...


def parse_delivery_url(url: str) -> tuple[str, str]:
    """Split a Cloudinary delivery URL into (resource_type, public_id).

    Raises:
        MediaRelayError: If the URL is not a Cloudinary upload URL.
    """
    match = _DELIVERY_URL_PATTERN.search(url)
    if match is None:
        raise MediaRelayError(f"Not a media host URL: {url}", ref=url)
    return match.group("resource_type"), match.group("public_id")


def sign_params(params: dict[str, str], api_secret: str) -> str:
    """Cloudinary request signature: SHA-1 over sorted key=value pairs plus secret."""
    to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode()).hexdigest()


class CloudinaryMediaRelay(MediaRelayBase):
    """Production relay backed by the Cloudinary REST API."""

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: str = "vidshare",
        timeout: float = 300.0,
    ):
        self._cloud_name = cloud_name
        self._api_key = api_key
        self._api_secret = api_secret
        self._folder = folder
        self._timeout = timeout
        self._base_url = f"{CLOUDINARY_API_BASE}/{cloud_name}"

    def _signed(self, params: dict[str, str]) -> dict[str, str]:
        params = {**params, "timestamp": str(int(time.time()))}
        return {
            **params,
            "api_key": self._api_key,
            "signature": sign_params(params, self._api_secret),
        }

    def _upload(self, local_path: Path) -> UploadedMedia:
        data = self._signed({"folder": self._folder})
        url = f"{self._base_url}/auto/upload"

        try:
            with httpx.Client() as client, local_path.open("rb") as fh:
                response = client.post(
                    url,
                    data=data,
                    files={"file": (local_path.name, fh)},
                    timeout=self._timeout,
                )
        except httpx.HTTPError as e:
            logger.warning("media_upload_failed", extra={"error": str(e)})
            raise UploadError(ApiErrorCode.E_UPLOAD_FAILED, "Media upload failed") from e

        if response.status_code != 200:
            logger.warning(
                "media_upload_failed",
                extra={"status_code": response.status_code, "body": response.text[:200]},
            )
            raise UploadError(ApiErrorCode.E_UPLOAD_FAILED, "Media upload failed")

        body = response.json()
        duration = body.get("duration")
        return UploadedMedia(
            url=body["secure_url"],
            public_id=body["public_id"],
            duration=float(duration) if duration is not None else None,
        )

    def delete(self, ref: str) -> None:
        resource_type, public_id = parse_delivery_url(ref)
        data = self._signed({"public_id": public_id})
        url = f"{self._base_url}/{resource_type}/destroy"

        try:
            with httpx.Client() as client:
                response = client.post(url, data=data, timeout=30.0)
        except httpx.HTTPError as e:
            raise MediaRelayError(f"Media delete error: {e}", ref=ref) from e

        if response.status_code != 200:
            raise MediaRelayError(f"Media delete failed: {response.status_code}", ref=ref)

        try:
            result = response.json().get("result")
        except (ValueError, AttributeError) as e:
            raise MediaRelayError("Media delete returned an unreadable body", ref=ref) from e
        if result not in ("ok", "not found"):
            raise MediaRelayError(f"Media delete rejected: {result}", ref=ref)


class FakeMediaRelay(MediaRelayBase):
    """In-memory relay for local development and tests.

    Uploaded objects are tracked by URL; deletes are recorded in order.
    """

    def __init__(self, video_duration: float = 12.5):
        self.video_duration = video_duration
        self.objects: dict[str, int] = {}  # url -> size in bytes
        self.deleted: list[str] = []
        self.fail_uploads = False
        self.fail_deletes = False

    def _upload(self, local_path: Path) -> UploadedMedia:
        if self.fail_uploads:
            raise UploadError(ApiErrorCode.E_UPLOAD_FAILED, "Media upload failed")

        suffix = local_path.suffix.lower()
        resource_type = "video" if suffix in VIDEO_SUFFIXES else "image"
        public_id = f"vidshare/{uuid4().hex}"
        url = f"https://res.cloudinary.test/fake/{resource_type}/upload/{public_id}{suffix}"
        self.objects[url] = local_path.stat().st_size
        return UploadedMedia(
            url=url,
            public_id=public_id,
            duration=self.video_duration if resource_type == "video" else None,
        )

    def delete(self, ref: str) -> None:
        if self.fail_deletes:
            raise MediaRelayError("Media host unavailable", ref=ref)
        self.objects.pop(ref, None)
        self.deleted.append(ref)


def get_media_relay(settings: Settings | None = None) -> MediaRelayBase:
    """Get the configured media relay.

    Returns:
        CloudinaryMediaRelay if Cloudinary credentials are set,
        FakeMediaRelay otherwise.
    """
    settings = settings or get_settings()

    if settings.cloudinary_configured:
        return CloudinaryMediaRelay(
            cloud_name=settings.cloudinary_cloud_name,  # type: ignore[arg-type]
            api_key=settings.cloudinary_api_key,  # type: ignore[arg-type]
            api_secret=settings.cloudinary_api_secret,  # type: ignore[arg-type]
            folder=settings.media_folder,
        )

    return FakeMediaRelay()


def discard_media(relay: MediaRelayBase, *refs: str | None) -> list[str]:
    """Delete media references best-effort.

    Failures are logged and never raised; the database change that released
    the reference has already been committed.

    Returns:
        The refs that could not be deleted.
    """
    failed = []
    for ref in refs:
        if not ref:
            continue
        try:
            relay.delete(ref)
        except MediaRelayError as e:
            logger.warning("media_delete_failed", extra={"ref": ref, "error": e.message})
            failed.append(ref)
    return failed
