"""
Client side of the watermarking service contract.

Provides:
- Parameter model for text and custom (image) watermarks
- multipart/form-data request encoder
- WatermarkClient: async HTTP client with error-code mapping

Usage:
    client = WatermarkClient("https://host/api/watermark")
    png = await client.process_text(picture, TextWatermarkParams(text="Hello"))
"""
from watermark_builder.api.client import WatermarkClient, create_client
from watermark_builder.api.exceptions import (
    ServiceError,
    TransportError,
    WatermarkClientError,
)
from watermark_builder.api.multipart import (
    EncodedRequest,
    encode_custom_watermark,
    encode_text_watermark,
)
from watermark_builder.api.schemas import (
    ApiErrorCode,
    CustomWatermarkParams,
    DensityLevel,
    FontDecoration,
    FontWeight,
    ImagePayload,
    TextWatermarkParams,
)

__all__ = [
    # Client
    "WatermarkClient",
    "create_client",
    # Encoder
    "EncodedRequest",
    "encode_text_watermark",
    "encode_custom_watermark",
    # Parameter model
    "ImagePayload",
    "TextWatermarkParams",
    "CustomWatermarkParams",
    "DensityLevel",
    "FontWeight",
    "FontDecoration",
    "ApiErrorCode",
    # Exceptions
    "WatermarkClientError",
    "TransportError",
    "ServiceError",
]
