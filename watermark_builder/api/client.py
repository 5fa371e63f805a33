"""
HTTP client for the watermarking service.

Handles:
- POST <endpoint> with a text watermark request
- POST <endpoint> with a custom (image) watermark request
- Mapping of non-200 responses to user-facing messages
"""
from __future__ import annotations

from typing import Optional

import httpx
from pydantic import ValidationError

from watermark_builder.api.exceptions import ServiceError, TransportError
from watermark_builder.api.messages import (
    DEFAULT_LANGUAGE,
    compose_error_message,
    generic_message,
)
from watermark_builder.api.multipart import (
    EncodedRequest,
    encode_custom_watermark,
    encode_text_watermark,
)
from watermark_builder.api.schemas import (
    ApiErrorResponse,
    CustomWatermarkParams,
    ImagePayload,
    TextWatermarkParams,
)
from watermark_builder.infra.logging import get_logger
from watermark_builder.infra.settings import Settings, get_settings

logger = get_logger(__name__)


class WatermarkClient:
    """
    Async HTTP client for the watermarking service.

    Holds only the endpoint URL and the underlying connection pool; callers
    construct and inject it explicitly.

    Usage:
        async with WatermarkClient("https://host/api/watermark") as client:
            png = await client.process_text(picture, TextWatermarkParams(text="Hi"))
    """

    def __init__(
        self,
        endpoint_url: str,
        language: str = DEFAULT_LANGUAGE,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize watermark client.

        Args:
            endpoint_url: URL requests are POSTed to
            language: Language of error messages ("lv" or "en")
            timeout: Request timeout in seconds (default: httpx default)
            http_client: Pre-built httpx client, e.g. with a test transport.
                The caller keeps ownership of an injected client.
        """
        generic_message(language)  # rejects unsupported languages early
        self._endpoint_url = endpoint_url
        self._language = language
        self._timeout = timeout
        self._client = http_client
        self._owns_client = http_client is None

    @property
    def endpoint_url(self) -> str:
        return self._endpoint_url

    @property
    def language(self) -> str:
        return self._language

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            if self._timeout is not None:
                self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout))
            else:
                self._client = httpx.AsyncClient()
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client and self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "WatermarkClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def process_text(
        self,
        image: ImagePayload,
        params: TextWatermarkParams,
    ) -> bytes:
        """
        Apply a text watermark.

        Args:
            image: Subject picture
            params: Text watermark parameters

        Returns:
            Watermarked image bytes as returned by the service

        Raises:
            ServiceError: The service rejected the request
            TransportError: No usable response was obtained
        """
        return await self._send(encode_text_watermark(image, params), mode="text")

    async def process_custom(
        self,
        image: ImagePayload,
        params: CustomWatermarkParams,
    ) -> bytes:
        """
        Apply an image watermark.

        Args:
            image: Subject picture
            params: Custom watermark parameters, including the watermark image

        Returns:
            Watermarked image bytes as returned by the service

        Raises:
            ServiceError: The service rejected the request
            TransportError: No usable response was obtained
        """
        return await self._send(encode_custom_watermark(image, params), mode="custom")

    async def _send(self, request: EncodedRequest, mode: str) -> bytes:
        logger.info(
            "watermark_request_sent",
            extra={"mode": mode, "body_size": len(request.body)},
        )

        try:
            client = await self._get_client()
            response = await client.post(
                self._endpoint_url,
                content=request.body,
                headers=request.headers,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            # InvalidURL is not an HTTPError
            logger.error("watermark_transport_failed", extra={"error": repr(e)})
            raise TransportError(generic_message(self._language), original_error=e)

        if response.status_code == 200:
            logger.info(
                "watermark_request_succeeded",
                extra={"mode": mode, "result_size": len(response.content)},
            )
            return response.content

        raise self._map_error_response(response)

    def _map_error_response(self, response: httpx.Response) -> Exception:
        try:
            error_response = ApiErrorResponse.model_validate_json(response.content)
        except ValidationError as e:
            logger.warning(
                "watermark_error_body_undecodable",
                extra={"status_code": response.status_code},
            )
            return TransportError(
                generic_message(self._language),
                original_error=e,
                status_code=response.status_code,
            )

        codes = error_response.codes
        logger.warning(
            "watermark_request_rejected",
            extra={"status_code": response.status_code, "codes": codes},
        )
        return ServiceError(
            compose_error_message(codes, self._language),
            status_code=response.status_code,
            codes=codes,
        )


def create_client(
    settings: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> WatermarkClient:
    """
    Build a client from settings.

    Args:
        settings: Settings to use (default: cached environment settings)
        http_client: Optional pre-built httpx client

    Returns:
        WatermarkClient for the configured endpoint
    """
    settings = settings or get_settings()
    return WatermarkClient(
        endpoint_url=settings.WATERMARK_ENDPOINT_URL,
        language=settings.LANGUAGE,
        timeout=settings.REQUEST_TIMEOUT_SECONDS,
        http_client=http_client,
    )
