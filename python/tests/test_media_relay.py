"""Tests for the media relay, upload staging and media release.

Tests cover:
- Cloudinary upload/destroy calls (mocked with respx)
- Request signing and delivery URL parsing
- Temp file removal after relaying
- Best-effort discard and the deferred purge task
"""

import hashlib
import importlib
import io
from pathlib import Path

import httpx
import pytest
import respx
from starlette.datastructures import UploadFile

from vidshare.api.uploads import UploadStash
from vidshare.config import Settings, clear_settings_cache
from vidshare.errors import ApiErrorCode, InvalidRequestError, UploadError
from vidshare.storage.cleanup import release_media
from vidshare.storage.media import (
    CloudinaryMediaRelay,
    FakeMediaRelay,
    MediaRelayError,
    discard_media,
    get_media_relay,
    parse_delivery_url,
    sign_params,
)

CLOUD = "democloud"
UPLOAD_URL = f"https://api.cloudinary.com/v1_1/{CLOUD}/auto/upload"
VIDEO_URL = f"https://res.cloudinary.com/{CLOUD}/video/upload/v1712/vidshare/abc123.mp4"

PURGE_MODULE = importlib.import_module("vidshare.tasks.purge_media")


@pytest.fixture
def relay() -> CloudinaryMediaRelay:
    return CloudinaryMediaRelay(cloud_name=CLOUD, api_key="key", api_secret="secret")


@pytest.fixture
def local_file(tmp_path: Path) -> Path:
    path = tmp_path / "clip.mp4"
    path.write_bytes(b"fake-video-bytes")
    return path


# =============================================================================
# Signing and URL parsing
# =============================================================================


class TestSigning:
    def test_signature_over_sorted_params(self):
        expected = hashlib.sha1(b"public_id=sample&timestamp=1315060510abcd").hexdigest()

        assert sign_params({"timestamp": "1315060510", "public_id": "sample"}, "abcd") == expected

    def test_parse_versioned_url(self):
        assert parse_delivery_url(VIDEO_URL) == ("video", "vidshare/abc123")

    def test_parse_image_url_without_version(self):
        url = f"https://res.cloudinary.com/{CLOUD}/image/upload/vidshare/thumb.png"

        assert parse_delivery_url(url) == ("image", "vidshare/thumb")

    def test_parse_rejects_foreign_url(self):
        with pytest.raises(MediaRelayError):
            parse_delivery_url("https://example.com/some/file.mp4")


# =============================================================================
# Cloudinary relay
# =============================================================================


class TestCloudinaryUpload:
    @respx.mock
    def test_upload_returns_url_and_duration(self, relay, local_file):
        route = respx.post(UPLOAD_URL).mock(
            return_value=httpx.Response(
                200,
                json={"secure_url": VIDEO_URL, "public_id": "vidshare/abc123", "duration": 31.2},
            )
        )

        uploaded = relay.upload(local_file)

        assert route.called
        assert uploaded.url == VIDEO_URL
        assert uploaded.public_id == "vidshare/abc123"
        assert uploaded.duration == 31.2
        assert not local_file.exists()

    @respx.mock
    def test_image_upload_has_no_duration(self, relay, local_file):
        respx.post(UPLOAD_URL).mock(
            return_value=httpx.Response(
                200, json={"secure_url": "https://x/image/upload/a.png", "public_id": "a"}
            )
        )

        assert relay.upload(local_file).duration is None

    @respx.mock
    def test_rejected_upload_removes_temp_file(self, relay, local_file):
        respx.post(UPLOAD_URL).mock(return_value=httpx.Response(400, json={"error": "bad"}))

        with pytest.raises(UploadError) as exc_info:
            relay.upload(local_file)

        assert exc_info.value.code == ApiErrorCode.E_UPLOAD_FAILED
        assert not local_file.exists()

    @respx.mock
    def test_network_error_is_upload_error(self, relay, local_file):
        respx.post(UPLOAD_URL).mock(side_effect=httpx.ConnectError("down"))

        with pytest.raises(UploadError):
            relay.upload(local_file)
        assert not local_file.exists()

    def test_missing_file(self, relay, tmp_path):
        with pytest.raises(UploadError):
            relay.upload(tmp_path / "gone.mp4")


class TestCloudinaryDelete:
    destroy_url = f"https://api.cloudinary.com/v1_1/{CLOUD}/video/destroy"

    @respx.mock
    def test_delete_posts_public_id(self, relay):
        route = respx.post(self.destroy_url).mock(
            return_value=httpx.Response(200, json={"result": "ok"})
        )

        relay.delete(VIDEO_URL)

        assert route.called
        assert b"vidshare%2Fabc123" in route.calls.last.request.content

    @respx.mock
    def test_already_missing_is_not_an_error(self, relay):
        respx.post(self.destroy_url).mock(
            return_value=httpx.Response(200, json={"result": "not found"})
        )

        relay.delete(VIDEO_URL)

    @respx.mock
    def test_failed_delete_raises(self, relay):
        respx.post(self.destroy_url).mock(return_value=httpx.Response(500))

        with pytest.raises(MediaRelayError) as exc_info:
            relay.delete(VIDEO_URL)

        assert exc_info.value.ref == VIDEO_URL

    @respx.mock
    def test_unreadable_body_raises_relay_error(self, relay):
        respx.post(self.destroy_url).mock(
            return_value=httpx.Response(200, text="<html>gateway</html>")
        )

        with pytest.raises(MediaRelayError) as exc_info:
            relay.delete(VIDEO_URL)

        assert exc_info.value.ref == VIDEO_URL

    @respx.mock
    def test_discard_reports_unreadable_body_as_failed(self, relay):
        respx.post(self.destroy_url).mock(return_value=httpx.Response(200, text="not json"))

        assert discard_media(relay, VIDEO_URL) == [VIDEO_URL]


class TestRelaySelection:
    def test_fake_without_credentials(self):
        settings = Settings(DATABASE_URL="sqlite://", VIDSHARE_ENV="test")

        assert isinstance(get_media_relay(settings), FakeMediaRelay)

    def test_cloudinary_with_credentials(self):
        settings = Settings(
            DATABASE_URL="sqlite://",
            VIDSHARE_ENV="test",
            CLOUDINARY_CLOUD_NAME=CLOUD,
            CLOUDINARY_API_KEY="key",
            CLOUDINARY_API_SECRET="secret",
        )

        assert isinstance(get_media_relay(settings), CloudinaryMediaRelay)


# =============================================================================
# Upload staging
# =============================================================================


class TestUploadStash:
    def test_save_and_cleanup(self, tmp_path):
        stash = UploadStash(tmp_path / "stash", max_bytes=1024)

        path = stash.save(UploadFile(io.BytesIO(b"abc"), filename="Photo.PNG"))

        assert path is not None
        assert path.suffix == ".png"
        assert path.read_bytes() == b"abc"
        stash.cleanup()
        assert not path.exists()

    def test_absent_part(self, tmp_path):
        stash = UploadStash(tmp_path, max_bytes=1024)

        assert stash.save(None) is None
        assert stash.save(UploadFile(io.BytesIO(b""), filename="")) is None

    def test_too_large(self, tmp_path):
        stash = UploadStash(tmp_path, max_bytes=10)

        with pytest.raises(InvalidRequestError) as exc_info:
            stash.save(UploadFile(io.BytesIO(b"x" * 20), filename="big.png"))

        assert exc_info.value.code == ApiErrorCode.E_FILE_TOO_LARGE
        stash.cleanup()
        assert list(tmp_path.iterdir()) == []


# =============================================================================
# Release of media references
# =============================================================================


class TestDiscardMedia:
    def test_returns_failed_refs(self):
        relay = FakeMediaRelay()
        relay.fail_deletes = True

        assert discard_media(relay, "https://a", None, "https://b") == ["https://a", "https://b"]

    def test_skips_empty_refs(self):
        relay = FakeMediaRelay()

        assert discard_media(relay, None, "", "https://a") == []
        assert relay.deleted == ["https://a"]


class _RecordingTask:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[dict] = []

    def apply_async(self, **kwargs):
        if self.fail:
            raise ConnectionError("broker unavailable")
        self.calls.append(kwargs)


class TestReleaseMedia:
    @pytest.fixture
    def deferred_mode(self, monkeypatch):
        monkeypatch.setenv("MEDIA_CLEANUP_MODE", "deferred")
        monkeypatch.setenv("REDIS_URL", "redis://localhost:6379/0")
        clear_settings_cache()

    def test_inline_mode_deletes_now(self):
        relay = FakeMediaRelay()

        release_media(relay, "https://a", None)

        assert relay.deleted == ["https://a"]

    def test_deferred_mode_enqueues(self, deferred_mode, monkeypatch):
        task = _RecordingTask()
        monkeypatch.setattr(PURGE_MODULE, "purge_media", task)
        relay = FakeMediaRelay()

        release_media(relay, "https://a", None, "https://b")

        assert relay.deleted == []
        assert task.calls[0]["args"] == [["https://a", "https://b"]]
        assert task.calls[0]["queue"] == "media"

    def test_deferred_mode_falls_back_inline(self, deferred_mode, monkeypatch):
        monkeypatch.setattr(PURGE_MODULE, "purge_media", _RecordingTask(fail=True))
        relay = FakeMediaRelay()

        release_media(relay, "https://a")

        assert relay.deleted == ["https://a"]

    def test_nothing_to_release(self, deferred_mode, monkeypatch):
        task = _RecordingTask()
        monkeypatch.setattr(PURGE_MODULE, "purge_media", task)

        release_media(FakeMediaRelay(), None, "")

        assert task.calls == []


class TestPurgeMediaTask:
    def test_purges_all_refs(self, monkeypatch):
        from vidshare.tasks.purge_media import purge_media

        relay = FakeMediaRelay()
        monkeypatch.setattr(PURGE_MODULE, "get_media_relay", lambda: relay)

        result = purge_media.apply(args=[["https://a", "https://b"]]).get()

        assert result == {"deleted": 2, "failed": 0}
        assert relay.deleted == ["https://a", "https://b"]
