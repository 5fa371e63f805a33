"""
Image selection for the subject picture and the watermark image.

A selection produces exactly one ImagePayload, or no value, exactly once.
Imported files are normalised to PNG with a fresh unique file name, the
same shape a camera or photo-library pick produces.
"""
from __future__ import annotations

import asyncio
import io
import uuid
from pathlib import Path
from typing import Optional, Tuple, Union

from PIL import Image, ImageOps

from watermark_builder.api.schemas import ImagePayload
from watermark_builder.infra.logging import get_logger

logger = get_logger(__name__)

PNG_MIME_TYPE = "image/png"

# Modes Pillow can write to PNG without conversion
_PNG_MODES = {"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"}

# Pillow rejects oversized images with an error outside the OSError tree
IMAGE_READ_ERRORS = (OSError, Image.DecompressionBombError)


class ImageSelection:
    """
    Single-shot result of picking an image.

    The first resolve() wins; later calls are ignored and return False.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._payload: Optional[ImagePayload] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def done(self) -> bool:
        return self._event.is_set()

    def resolve(self, payload: Optional[ImagePayload]) -> bool:
        """
        Complete the selection.

        Args:
            payload: Picked image, or None if nothing was picked

        Returns:
            True if this call completed the selection
        """
        if self._event.is_set():
            logger.warning("image_selection_already_resolved")
            return False
        self._payload = payload
        self._event.set()
        return True

    def dismiss(self) -> bool:
        """Complete the selection with no value."""
        return self.resolve(None)

    async def wait(self) -> Optional[ImagePayload]:
        await self._event.wait()
        return self._payload


def encode_png(image: Image.Image) -> bytes:
    if image.mode not in _PNG_MODES:
        image = image.convert("RGBA")
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def load_image_file(path: Union[str, Path]) -> ImagePayload:
    """
    Read an image file and re-encode it as PNG.

    EXIF orientation is applied so the pixels sent match what is displayed.

    Raises:
        OSError: If the file is missing or is not a readable image
        Image.DecompressionBombError: If the image exceeds Pillow's pixel limit
    """
    with Image.open(path) as image:
        image.load()
        data = encode_png(ImageOps.exif_transpose(image))

    return ImagePayload(
        data=data,
        mime_type=PNG_MIME_TYPE,
        name=f"{str(uuid.uuid4()).upper()}.png",
    )


def import_image_file(path: Union[str, Path]) -> ImageSelection:
    """
    Start importing an image file in the background.

    Must be called from a running event loop. The returned selection
    resolves to the PNG payload, or to None when the file cannot be read.
    """
    selection = ImageSelection()

    async def _load() -> None:
        try:
            payload = await asyncio.to_thread(load_image_file, path)
        except IMAGE_READ_ERRORS as e:
            logger.warning(
                "image_import_failed",
                extra={"path": str(path), "error": str(e)},
            )
            payload = None
        selection.resolve(payload)

    selection._task = asyncio.get_running_loop().create_task(_load())
    return selection


def image_size(data: bytes) -> Tuple[int, int]:
    """
    Pixel dimensions of encoded image bytes, for previews.

    Raises:
        OSError: If the bytes are not a readable image
    """
    with Image.open(io.BytesIO(data)) as image:
        return image.size
