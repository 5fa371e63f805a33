"""
multipart/form-data encoding of watermark requests.

Builds the exact request body the watermarking service expects:

    --<boundary>\\r\\n
    Content-Disposition: form-data; name="picture"; filename="<name>"\\r\\n
    Content-Type: <mime>\\r\\n
    \\r\\n
    <raw bytes>\\r\\n
    --<boundary>\\r\\n
    Content-Disposition: form-data; name="text"\\r\\n
    \\r\\n
    <value>\\r\\n
    ...
    --<boundary>--

The boundary is generated per request and is never a substring of any
part's content.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Union

from watermark_builder.api.schemas import (
    CustomWatermarkParams,
    ImagePayload,
    TextWatermarkParams,
)

CRLF = b"\r\n"

# Characters that would terminate a quoted header parameter
_HEADER_PARAM_ESCAPES = {
    '"': "%22",
    "\r": "%0D",
    "\n": "%0A",
}


@dataclass(frozen=True)
class TextPart:
    name: str
    value: str


@dataclass(frozen=True)
class FilePart:
    name: str
    payload: ImagePayload


Part = Union[TextPart, FilePart]


@dataclass(frozen=True)
class EncodedRequest:
    """A fully encoded multipart body and the boundary it was built with."""

    boundary: str
    body: bytes

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self.boundary}"

    @property
    def headers(self) -> Dict[str, str]:
        return {"Content-Type": self.content_type}


def generate_boundary() -> str:
    """Fresh boundary token for one request."""
    return f"Boundary-{uuid.uuid4().hex.upper()}"


def _quote_header_param(value: str) -> str:
    return "".join(_HEADER_PARAM_ESCAPES.get(char, char) for char in value)


def _part_contents(parts: Sequence[Part]) -> Iterator[bytes]:
    for part in parts:
        yield part.name.encode("utf-8")
        if isinstance(part, FilePart):
            yield part.payload.name.encode("utf-8")
            yield part.payload.mime_type.encode("utf-8")
            yield part.payload.data
        else:
            yield part.value.encode("utf-8")


def boundary_collides(boundary: str, parts: Sequence[Part]) -> bool:
    """Whether the boundary token occurs inside any part's content."""
    token = boundary.encode("ascii")
    return any(token in content for content in _part_contents(parts))


def compose_text_part(name: str, value: str, boundary: str) -> bytes:
    return b"".join([
        f"--{boundary}".encode("ascii"), CRLF,
        f'Content-Disposition: form-data; name="{_quote_header_param(name)}"'.encode("utf-8"), CRLF,
        CRLF,
        value.encode("utf-8"), CRLF,
    ])


def compose_file_part(name: str, payload: ImagePayload, boundary: str) -> bytes:
    disposition = (
        f'Content-Disposition: form-data; name="{_quote_header_param(name)}"; '
        f'filename="{_quote_header_param(payload.name)}"'
    )
    return b"".join([
        f"--{boundary}".encode("ascii"), CRLF,
        disposition.encode("utf-8"), CRLF,
        f"Content-Type: {payload.mime_type}".encode("utf-8"), CRLF,
        CRLF,
        payload.data, CRLF,
    ])


def encode_parts(parts: Sequence[Part], boundary: Optional[str] = None) -> EncodedRequest:
    """
    Encode parts in the given order.

    Args:
        parts: Text and file parts, written in sequence order
        boundary: Explicit boundary; generated when omitted

    Returns:
        EncodedRequest with body and boundary

    Raises:
        ValueError: If an explicit boundary occurs in the part contents
    """
    if boundary is None:
        boundary = generate_boundary()
        while boundary_collides(boundary, parts):
            boundary = generate_boundary()
    elif boundary_collides(boundary, parts):
        raise ValueError(f"Boundary {boundary!r} occurs inside the request content")

    chunks = []
    for part in parts:
        if isinstance(part, FilePart):
            chunks.append(compose_file_part(part.name, part.payload, boundary))
        else:
            chunks.append(compose_text_part(part.name, part.value, boundary))
    chunks.append(f"--{boundary}--".encode("ascii"))

    return EncodedRequest(boundary=boundary, body=b"".join(chunks))


def text_watermark_parts(image: ImagePayload, params: TextWatermarkParams) -> List[Part]:
    """picture file, then text and every present optional field."""
    parts: List[Part] = [FilePart("picture", image)]
    parts.extend(TextPart(name, value) for name, value in params.form_fields())
    return parts


def custom_watermark_parts(image: ImagePayload, params: CustomWatermarkParams) -> List[Part]:
    """picture and watermark files, then every present optional field."""
    parts: List[Part] = [
        FilePart("picture", image),
        FilePart("watermark", params.watermark),
    ]
    parts.extend(TextPart(name, value) for name, value in params.form_fields())
    return parts


def encode_text_watermark(
    image: ImagePayload,
    params: TextWatermarkParams,
    boundary: Optional[str] = None,
) -> EncodedRequest:
    return encode_parts(text_watermark_parts(image, params), boundary)


def encode_custom_watermark(
    image: ImagePayload,
    params: CustomWatermarkParams,
    boundary: Optional[str] = None,
) -> EncodedRequest:
    return encode_parts(custom_watermark_parts(image, params), boundary)
