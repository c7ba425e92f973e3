"""Converts uploaded image files into base64 payloads for the edit client."""

from __future__ import annotations

import base64
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Optional

from .errors import DecodeError, ReadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EncodedPayload:
    content: str
    media_type: str


@dataclass(frozen=True)
class SourceImage:
    """An uploaded image kept in memory for the lifetime of a session."""

    data: bytes
    media_type: str
    filename: Optional[str] = None

    async def read(self) -> bytes:
        return self.data


def to_data_uri(data: bytes, media_type: str) -> str:
    body = base64.b64encode(data).decode("ascii")
    return f"data:{media_type};base64,{body}"


def declared_media_type(source: Any) -> str:
    # UploadFile exposes content_type; SourceImage exposes media_type.
    media_type = getattr(source, "media_type", None) or getattr(source, "content_type", None)
    return str(media_type or "")


async def encode_image(source: Any) -> EncodedPayload:
    media_type = declared_media_type(source)
    try:
        data = source.read()
        if inspect.isawaitable(data):
            data = await data
    except Exception as exc:
        raise ReadError(str(exc) or "Failed to read the selected file.") from exc

    data_uri = to_data_uri(bytes(data or b""), media_type)
    _, _, content = data_uri.partition(",")
    if not content:
        raise DecodeError("Failed to read base64 string from file.")
    logger.debug("Encoded %d bytes as %s", len(data or b""), media_type or "unknown type")
    return EncodedPayload(content=content, media_type=media_type)


__all__ = ["EncodedPayload", "SourceImage", "declared_media_type", "encode_image", "to_data_uri"]
