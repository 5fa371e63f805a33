"""
Exceptions raised by the watermark client.

Every error carries one user-displayable message. There is no recoverable
/ fatal split: the caller shows the message and the user may resubmit.
"""
from __future__ import annotations

from typing import List, Optional


class WatermarkClientError(Exception):
    """Base error for watermark requests."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TransportError(WatermarkClientError):
    """
    No structured response was obtained.

    Covers connection failures, timeouts and undecodable error bodies.
    """

    def __init__(
        self,
        message: str,
        original_error: Optional[BaseException] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.original_error = original_error
        self.status_code = status_code


class ServiceError(WatermarkClientError):
    """The service answered with a non-200 status and a list of error codes."""

    def __init__(self, message: str, status_code: int, codes: List[int]):
        super().__init__(message)
        self.status_code = status_code
        self.codes = codes
