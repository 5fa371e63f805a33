"""
User-facing messages for service error codes.

Each recognised error code maps to one fixed message per language. Latvian
is the default language of the application.
"""
from __future__ import annotations

from typing import Dict, Iterable, Optional

from watermark_builder.api.schemas import ApiErrorCode

DEFAULT_LANGUAGE = "lv"

GENERIC_MESSAGES: Dict[str, str] = {
    "lv": "Pieprasījums neizdevās. Lūdzu, pamēģiniet vēlreiz vēlāk.",
    "en": "The request failed. Please try again later.",
}

ERROR_MESSAGES: Dict[str, Dict[ApiErrorCode, str]] = {
    "lv": {
        ApiErrorCode.GENERIC: GENERIC_MESSAGES["lv"],
        ApiErrorCode.INVALID_WATERMARK_TEXT: "Nederīgs ūdenszīmes teksts.",
        ApiErrorCode.INVALID_IMAGE_BUFFER: "Nederīgi attēla dati.",
        ApiErrorCode.INVALID_WATERMARK_IMAGE_BUFFER: "Nederīgi ūdenszīmes attēla dati.",
        ApiErrorCode.TOO_MANY_FIELDS: "Pārāk daudz pieprasījuma lauku.",
        ApiErrorCode.TOO_MANY_FILES: "Pārāk daudz pieprasījuma failu.",
        ApiErrorCode.FILE_TOO_LARGE: "Fails ir pārāk liels.",
        ApiErrorCode.FIELD_NAME_TOO_LONG: "Pieprasījuma lauka nosaukums ir pārāk garš.",
        ApiErrorCode.FIELD_VALUE_TOO_LONG: "Pieprasījuma lauka vērtība ir pārāk gara.",
        ApiErrorCode.INVALID_FILE_TYPE: "Nederīgs faila tips.",
        ApiErrorCode.NO_PICTURE_PROVIDED: "Attēls nav sniegts.",
        ApiErrorCode.NO_WATERMARK_DATA_PROVIDED: "Nav nodrošināta ūdenszīme.",
    },
    "en": {
        ApiErrorCode.GENERIC: GENERIC_MESSAGES["en"],
        ApiErrorCode.INVALID_WATERMARK_TEXT: "Invalid watermark text.",
        ApiErrorCode.INVALID_IMAGE_BUFFER: "Invalid image data.",
        ApiErrorCode.INVALID_WATERMARK_IMAGE_BUFFER: "Invalid watermark image data.",
        ApiErrorCode.TOO_MANY_FIELDS: "Too many request fields.",
        ApiErrorCode.TOO_MANY_FILES: "Too many request files.",
        ApiErrorCode.FILE_TOO_LARGE: "The file is too large.",
        ApiErrorCode.FIELD_NAME_TOO_LONG: "A request field name is too long.",
        ApiErrorCode.FIELD_VALUE_TOO_LONG: "A request field value is too long.",
        ApiErrorCode.INVALID_FILE_TYPE: "Invalid file type.",
        ApiErrorCode.NO_PICTURE_PROVIDED: "No picture provided.",
        ApiErrorCode.NO_WATERMARK_DATA_PROVIDED: "No watermark provided.",
    },
}


def _table(language: str) -> Dict[ApiErrorCode, str]:
    if language not in ERROR_MESSAGES:
        raise ValueError(f"Unsupported language: {language!r}")
    return ERROR_MESSAGES[language]


def generic_message(language: str = DEFAULT_LANGUAGE) -> str:
    """Message shown for any failure without a recognised error code."""
    _table(language)
    return GENERIC_MESSAGES[language]


def message_for_code(code: int, language: str = DEFAULT_LANGUAGE) -> Optional[str]:
    """
    Look up the message for a single error code.

    Returns:
        The message, or None for a code the client does not recognise
    """
    table = _table(language)
    try:
        return table[ApiErrorCode(code)]
    except ValueError:
        return None


def compose_error_message(codes: Iterable[int], language: str = DEFAULT_LANGUAGE) -> str:
    """
    Build the single message for a list of error codes.

    Unrecognised codes are dropped; the rest are joined with newlines in the
    order received. If nothing is left, the generic message is returned.
    """
    messages = [
        message
        for message in (message_for_code(code, language) for code in codes)
        if message is not None
    ]
    if not messages:
        return generic_message(language)
    return "\n".join(messages)
