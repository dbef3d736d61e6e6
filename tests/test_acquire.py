"""Tests for image download and signature validation."""

import asyncio

import pytest
from playwright.async_api import Error as PlaywrightError

from mangapdf.acquire import PlaywrightFetcher, acquire_image
from mangapdf.errors import DownloadError, InvalidImageFormat
from mangapdf.models import ChapterJob, ImageFormat, ImageRef
from tests.fakes import FakeFetcher, image_bytes

URL = "https://example/title/x/ch_1"


def _ref(url, ordinal=1):
    job = ChapterJob(index=3, source_url=URL)
    return ImageRef(job=job, ordinal=ordinal, source_url=url, detected_format=ImageFormat.from_url(url))


def test_sniff_known_signatures():
    assert ImageFormat.sniff(image_bytes("JPEG")) is ImageFormat.JPEG
    assert ImageFormat.sniff(image_bytes("PNG")) is ImageFormat.PNG
    assert ImageFormat.sniff(image_bytes("WEBP")) is ImageFormat.WEBP
    assert ImageFormat.sniff(b"<html>nope</html>") is ImageFormat.UNKNOWN


def test_acquire_writes_numbered_file(tmp_path):
    data = image_bytes("JPEG")
    fetcher = FakeFetcher({"https://c/001.jpg": data})

    local = asyncio.run(acquire_image(fetcher, _ref("https://c/001.jpg", 5), tmp_path / "ch", URL))

    assert local.path == tmp_path / "ch" / "page_005.jpg"
    assert local.path.read_bytes() == data
    assert local.byte_length == len(data)
    assert local.validated is True
    assert local.format is ImageFormat.JPEG


def test_extension_follows_actual_bytes(tmp_path):
    fetcher = FakeFetcher({"https://c/001.jpg": image_bytes("PNG")})

    local = asyncio.run(acquire_image(fetcher, _ref("https://c/001.jpg"), tmp_path, URL))

    assert local.path.name == "page_001.png"


def test_webp_is_kept_as_webp(tmp_path):
    fetcher = FakeFetcher({"https://c/001.webp": image_bytes("WEBP")})

    local = asyncio.run(acquire_image(fetcher, _ref("https://c/001.webp"), tmp_path, URL))

    assert local.path.name == "page_001.webp"


def test_non_success_status_raises_download_error(tmp_path):
    fetcher = FakeFetcher({"https://c/001.jpg": 503})

    with pytest.raises(DownloadError) as excinfo:
        asyncio.run(acquire_image(fetcher, _ref("https://c/001.jpg", 2), tmp_path, URL))

    assert excinfo.value.status == 503
    assert excinfo.value.chapter_index == 3
    assert excinfo.value.image_index == 2
    assert list(tmp_path.iterdir()) == []


def test_html_payload_rejected_without_writing(tmp_path):
    fetcher = FakeFetcher({"https://c/001.jpg": b"<html>Access denied</html>"})

    with pytest.raises(InvalidImageFormat):
        asyncio.run(acquire_image(fetcher, _ref("https://c/001.jpg"), tmp_path / "ch", URL))

    assert not (tmp_path / "ch").exists()


def test_jpeg_url_serving_webp_rejected(tmp_path):
    fetcher = FakeFetcher({"https://c/001.jpg": image_bytes("WEBP")})

    with pytest.raises(InvalidImageFormat):
        asyncio.run(acquire_image(fetcher, _ref("https://c/001.jpg"), tmp_path, URL))


class _Response:
    def __init__(self, status=200, body=b"", body_error=None):
        self.status = status
        self.status_text = "" if status < 400 else "Error"
        self.ok = 200 <= status < 300
        self._body = body
        self._body_error = body_error
        self.disposed = False

    async def body(self):
        if self._body_error:
            raise self._body_error
        return self._body

    async def dispose(self):
        self.disposed = True


class _Request:
    def __init__(self, response):
        self.response = response
        self.headers = None

    async def get(self, url, headers=None, timeout=None):
        self.headers = headers
        return self.response


def _fetch(response):
    fetcher = PlaywrightFetcher(_Request(response), "UA/1.0", 1000)
    return asyncio.run(fetcher.fetch("https://c/001.jpg", URL))


def test_fetcher_returns_body_and_disposes_response():
    resp = _Response(body=b"\xff\xd8data")

    assert _fetch(resp) == b"\xff\xd8data"
    assert resp.disposed


def test_fetcher_sends_referer_and_user_agent():
    request = _Request(_Response(body=b"x"))

    asyncio.run(PlaywrightFetcher(request, "UA/1.0", 1000).fetch("https://c/1.jpg", URL))

    assert request.headers["Referer"] == URL
    assert request.headers["User-Agent"] == "UA/1.0"


def test_fetcher_body_failure_becomes_download_error():
    resp = _Response(body_error=PlaywrightError("Response has been disposed"))

    with pytest.raises(DownloadError) as excinfo:
        _fetch(resp)

    assert "response body" in str(excinfo.value)
    assert resp.disposed


def test_fetcher_http_error_disposes_response():
    resp = _Response(status=404)

    with pytest.raises(DownloadError) as excinfo:
        _fetch(resp)

    assert excinfo.value.status == 404
    assert resp.disposed
