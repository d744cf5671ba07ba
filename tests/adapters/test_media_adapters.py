"""Image downloader and filesystem media store."""

from __future__ import annotations

import io
from dataclasses import replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import uuid4

import httpx
import pytest
from PIL import Image

from catalogsync.adapters.http_resilience import ResilientClient
from catalogsync.adapters.media import FilesystemMediaStore, HttpImageDownloader, safe_filename
from catalogsync.config.media import get_media_config, is_image_payload
from catalogsync.domain.errors import MediaError, TransportError
from tests.helpers.catalog import png_bytes

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from catalogsync.config.http_resilience import ResilienceConfig

IMAGE_URL = "https://cdn.example.com/img/ax55-front.jpg"


def _jpeg_bytes(size: tuple[int, int] = (1600, 1200)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, "blue").save(buffer, format="JPEG")
    return buffer.getvalue()


def _client_factory(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[[ResilienceConfig], ResilientClient]:
    def factory(config: ResilienceConfig) -> ResilientClient:
        async def async_handler(request: httpx.Request) -> httpx.Response:
            return handler(request)

        # the sqlite response cache stays out of downloader tests
        uncached = replace(config, cache=None)
        return ResilientClient(uncached, transport=httpx.MockTransport(async_handler))

    return factory


def _fixed_clock() -> datetime:
    return datetime(2026, 3, 14, tzinfo=UTC)


def _temp_file(tmp_path: Path, data: bytes, name: str = "download.tmp") -> Path:
    path = tmp_path / name
    path.write_bytes(data)
    return path


@pytest.mark.parametrize(
    ("display_name", "expected"),
    [
        ("side view.png", "side-view.png"),
        ("../../etc/passwd", "passwd"),
        ("C:\\images\\front.jpg", "front.jpg"),
        ("...", "image"),
    ],
)
def test_safe_filename(display_name: str, expected: str) -> None:
    assert safe_filename(display_name) == expected


def test_is_image_payload() -> None:
    assert is_image_payload(png_bytes())
    assert is_image_payload(_jpeg_bytes((10, 10)))
    assert not is_image_payload(b"<html></html>")


def test_store_moves_file_into_dated_directory(tmp_path: Path) -> None:
    store = FilesystemMediaStore(root=tmp_path / "media", clock=_fixed_clock)
    temp = _temp_file(tmp_path, png_bytes())

    stored = store.store_permanently(temp, display_name="front.png", owner_id=uuid4())

    assert stored.path == tmp_path / "media" / "2026" / "03" / "front.png"
    assert stored.mime_type == "image/png"
    assert stored.size == stored.path.stat().st_size
    assert not temp.exists()


def test_store_never_overwrites_existing_files(tmp_path: Path) -> None:
    store = FilesystemMediaStore(root=tmp_path / "media", clock=_fixed_clock)

    first = store.store_permanently(
        _temp_file(tmp_path, png_bytes(), "a.tmp"), display_name="front.png", owner_id=uuid4()
    )
    second = store.store_permanently(
        _temp_file(tmp_path, png_bytes(), "b.tmp"), display_name="front.png", owner_id=uuid4()
    )

    assert first.path.name == "front.png"
    assert second.path.name == "front-1.png"


def test_store_fixes_extension_to_match_content(tmp_path: Path) -> None:
    store = FilesystemMediaStore(root=tmp_path / "media", clock=_fixed_clock)

    stored = store.store_permanently(
        _temp_file(tmp_path, _jpeg_bytes((20, 20))), display_name="front.png", owner_id=uuid4()
    )

    assert stored.path.name == "front.jpg"
    assert stored.mime_type == "image/jpeg"


def test_store_rejects_non_images(tmp_path: Path) -> None:
    store = FilesystemMediaStore(root=tmp_path / "media")
    temp = _temp_file(tmp_path, b"<html>404</html>")

    with pytest.raises(MediaError, match="not a usable image"):
        store.store_permanently(temp, display_name="front.jpg", owner_id=uuid4())

    assert temp.exists()


def test_renditions_are_downscaled_only(tmp_path: Path) -> None:
    store = FilesystemMediaStore(root=tmp_path / "media", clock=_fixed_clock)
    stored = store.store_permanently(
        _temp_file(tmp_path, _jpeg_bytes((1600, 1200))), display_name="big.jpg", owner_id=uuid4()
    )

    renditions = store.generate_renditions(stored)

    assert set(renditions) == {"thumbnail", "medium", "large"}
    with Image.open(renditions["thumbnail"]) as thumb:
        assert thumb.width == 150
        assert thumb.height < 150
    with Image.open(renditions["large"]) as large:
        assert large.size == (1024, 768)


def test_small_images_get_no_renditions(tmp_path: Path) -> None:
    store = FilesystemMediaStore(root=tmp_path / "media", clock=_fixed_clock)
    stored = store.store_permanently(
        _temp_file(tmp_path, png_bytes((100, 80))), display_name="tiny.png", owner_id=uuid4()
    )

    assert store.generate_renditions(stored) == {}


def test_downloader_writes_temp_file(tmp_path: Path) -> None:
    body = _jpeg_bytes((10, 10))
    downloader = HttpImageDownloader(
        config=get_media_config(timeout_seconds=5, cache_predicate=None),
        client_factory=_client_factory(lambda _request: httpx.Response(200, content=body)),
        temp_dir=tmp_path,
    )

    path = downloader(IMAGE_URL)

    assert path.parent == tmp_path
    assert path.name.startswith("catalogsync-")
    assert path.suffix == ".jpg"
    assert path.read_bytes() == body


@pytest.mark.parametrize(
    ("response", "message"),
    [
        (httpx.Response(404), "HTTP 404"),
        (httpx.Response(200, content=b""), "empty response body"),
    ],
)
def test_downloader_reports_bad_responses(
    tmp_path: Path, response: httpx.Response, message: str
) -> None:
    downloader = HttpImageDownloader(
        config=get_media_config(timeout_seconds=5, cache_predicate=None),
        client_factory=_client_factory(lambda _request: response),
        temp_dir=tmp_path,
    )

    with pytest.raises(TransportError, match=message) as excinfo:
        downloader(IMAGE_URL)

    assert excinfo.value.url == IMAGE_URL
    assert list(tmp_path.iterdir()) == []


def test_downloader_reports_timeouts(tmp_path: Path) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("slow", request=request)

    downloader = HttpImageDownloader(
        config=get_media_config(timeout_seconds=30, cache_predicate=None),
        client_factory=_client_factory(handler),
        temp_dir=tmp_path,
    )

    with pytest.raises(TransportError, match="timed out after 30s"):
        downloader(IMAGE_URL)


def _unavailable(request: httpx.Request) -> httpx.Response:
    return httpx.Response(503, request=request)


def _read_timeout(request: httpx.Request) -> httpx.Response:
    raise httpx.ReadTimeout("slow", request=request)


@pytest.mark.parametrize("failure", [_unavailable, _read_timeout])
def test_downloader_sends_one_request_per_image(
    tmp_path: Path, failure: Callable[[httpx.Request], httpx.Response]
) -> None:
    attempts: list[httpx.URL] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request.url)
        return failure(request)

    downloader = HttpImageDownloader(
        config=get_media_config(timeout_seconds=5, cache_predicate=None),
        client_factory=_client_factory(handler),
        temp_dir=tmp_path,
    )

    with pytest.raises(TransportError):
        downloader(IMAGE_URL)

    assert len(attempts) == 1
