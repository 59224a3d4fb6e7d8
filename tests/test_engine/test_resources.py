"""Tests for resource decoding."""

from __future__ import annotations

import base64
import gzip
import io

import httpx
import pytest
from PIL import Image

from svgraster.engine import resources


def test_plain_data_url():
    assert resources.open_data_url("data:text/plain,a%20b") == b"a b"


def test_base64_data_url_without_padding():
    encoded = base64.b64encode(b"hello!!").decode().rstrip("=")
    assert resources.open_data_url(f"data:text/plain;base64,{encoded}") == b"hello!!"


def test_bad_data_url():
    with pytest.raises(OSError):
        resources.open_data_url("data:nocomma")


def test_svg_detection_and_gzip():
    assert resources.is_svg_bytes(b"  <svg/>")
    assert not resources.is_svg_bytes(b"\x89PNG")
    packed = gzip.compress(b"<svg/>")
    assert resources.is_svg_bytes(packed)
    assert resources.svg_text(packed) == "<svg/>"


def test_decode_raster_png():
    buf = io.BytesIO()
    Image.new("RGBA", (3, 2), (255, 0, 0, 255)).save(buf, format="PNG")
    surface = resources.decode_raster(buf.getvalue())
    assert (surface.get_width(), surface.get_height()) == (3, 2)


def test_decode_raster_rejects_junk():
    with pytest.raises(OSError):
        resources.decode_raster(b"junk")


def test_resolve_url():
    assert resources.resolve_url("img.png", "http://x.test/a/b.svg") == "http://x.test/a/img.png"
    assert resources.resolve_url("data:,x", "http://x.test/") == "data:,x"


def test_read_bytes_from_file(tmp_path):
    path = tmp_path / "blob.bin"
    path.write_bytes(b"abc")
    assert resources.read_bytes(str(path)) == b"abc"


def test_failed_load_counts_as_loaded(session, tmp_path):
    pending = session.load(str(tmp_path / "missing.png"), resources.decode_raster)
    assert pending.wait(5) is None
    assert pending.loaded


def _fake_get(status=200, response_headers=None, calls=None):
    def get(url, timeout=None, follow_redirects=False, headers=None):
        if calls is not None:
            calls.append((url, headers, timeout, follow_redirects))
        return httpx.Response(
            status,
            content=b"remote",
            headers=response_headers,
            request=httpx.Request("GET", url),
        )

    return get


def test_read_bytes_over_http(monkeypatch):
    calls = []
    monkeypatch.setattr(resources.httpx, "get", _fake_get(calls=calls))
    data = resources.read_bytes("img.png", "http://x.test/a/doc.svg", timeout=3.0)
    assert data == b"remote"
    assert calls == [("http://x.test/a/img.png", None, 3.0, True)]


def test_http_error_status_raises_oserror(monkeypatch):
    monkeypatch.setattr(resources.httpx, "get", _fake_get(status=404))
    with pytest.raises(OSError):
        resources.read_bytes("http://x.test/missing.png")


def test_transport_error_raises_oserror(monkeypatch):
    def get(url, **kwargs):
        raise httpx.ConnectError("refused", request=httpx.Request("GET", url))

    monkeypatch.setattr(resources.httpx, "get", get)
    with pytest.raises(OSError):
        resources.read_bytes("https://x.test/a.png")


def test_cors_request_sends_origin(monkeypatch):
    calls = []
    allowed = {"Access-Control-Allow-Origin": "*"}
    monkeypatch.setattr(resources.httpx, "get", _fake_get(response_headers=allowed, calls=calls))
    resources.read_bytes("http://cdn.test/a.png", "http://app.test/doc.svg", use_cors=True)
    assert calls[0][1] == {"Origin": "http://app.test"}


def test_cors_refuses_response_without_access(monkeypatch):
    monkeypatch.setattr(resources.httpx, "get", _fake_get())
    with pytest.raises(OSError):
        resources.read_bytes("http://cdn.test/a.png", "http://app.test/doc.svg", use_cors=True)


def test_cors_same_origin_needs_no_grant(monkeypatch):
    monkeypatch.setattr(resources.httpx, "get", _fake_get())
    data = resources.read_bytes("b.png", "http://app.test/doc.svg", use_cors=True)
    assert data == b"remote"


def test_origin_of():
    assert resources.origin_of("https://x.test:8443/a/b") == "https://x.test:8443"
    assert resources.origin_of("/tmp/doc.svg") == "null"
    assert resources.origin_of(None) == "null"


def test_read_bytes_file_url(tmp_path):
    path = tmp_path / "blob.bin"
    path.write_bytes(b"xyz")
    assert resources.read_bytes(path.as_uri()) == b"xyz"
