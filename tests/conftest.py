"""
Shared fixtures: sample images and a fake watermarking service.

The fake service is a FastAPI app implementing the documented contract. Its
form parsing (Starlette + python-multipart) doubles as the reference
multipart parser for round-trip checks.
"""
from __future__ import annotations

import io
import struct
import zlib
from typing import Any, Dict, List

import httpx
import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from PIL import Image

from watermark_builder.api.schemas import ImagePayload
from watermark_builder.infra.settings import clear_settings_cache

FAKE_ENDPOINT = "http://testserver/api/watermark"
RESULT_PREFIX = b"WATERMARKED:"


def make_png(size=(4, 3), color=(200, 30, 30)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def _is_empty(value: Any) -> bool:
    if isinstance(value, str):
        return value == ""
    return len(value["data"]) == 0


def create_fake_service() -> FastAPI:
    """
    Fake watermarking service.

    Records every parsed form in app.state.received and answers with
    RESULT_PREFIX + picture bytes, or a 400 error-code list.
    """
    app = FastAPI()
    app.state.received = []

    @app.post("/api/watermark")
    async def watermark(request: Request):
        form = await request.form()
        received: Dict[str, Any] = {}
        for name, value in form.multi_items():
            if isinstance(value, str):
                received[name] = value
            else:
                received[name] = {
                    "filename": value.filename,
                    "content_type": value.content_type,
                    "data": await value.read(),
                }
        app.state.received.append(received)

        errors: List[Dict[str, Any]] = []
        if "picture" not in received or _is_empty(received["picture"]):
            errors.append({"code": 11})
        if "text" in received:
            if received["text"] == "":
                errors.append({"code": 2, "data": "text"})
        elif "watermark" not in received or _is_empty(received["watermark"]):
            errors.append({"code": 12})

        if errors:
            return JSONResponse({"errorCodes": errors}, status_code=400)
        return Response(content=RESULT_PREFIX + received["picture"]["data"], media_type="image/png")

    return app


@pytest.fixture
def fake_service() -> FastAPI:
    return create_fake_service()


@pytest.fixture
def fake_transport(fake_service) -> httpx.ASGITransport:
    return httpx.ASGITransport(app=fake_service)


@pytest.fixture
def oversized_png_file(tmp_path):
    """PNG file whose header declares 30000x30000 pixels."""
    data = bytearray(make_png())
    # IHDR: length (8:12), type (12:16), width and height (16:24), CRC (29:33)
    data[16:24] = struct.pack(">II", 30000, 30000)
    data[29:33] = struct.pack(">I", zlib.crc32(bytes(data[12:29])))
    path = tmp_path / "huge.png"
    path.write_bytes(bytes(data))
    return path


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture
def picture(png_bytes) -> ImagePayload:
    return ImagePayload(data=png_bytes, mime_type="image/png", name="picture.png")


@pytest.fixture
def watermark_image() -> ImagePayload:
    return ImagePayload(data=make_png((2, 2), (0, 0, 255)), mime_type="image/png", name="logo.png")


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Isolate tests from the developer's environment and .env file."""
    for name in (
        "WATERMARK_ENDPOINT_URL",
        "REQUEST_TIMEOUT_SECONDS",
        "LANGUAGE",
        "EXPORT_DIR",
        "LOG_LEVEL",
        "LOG_FORMAT",
        "USE_STRUCTURED_LOGGING",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()
