"""In-memory display handles for rendering uploaded and edited images."""

from __future__ import annotations

import base64
import io
import logging
from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

DEFAULT_RESULT_MEDIA_TYPE = "image/png"


@dataclass(frozen=True)
class DisplayHandle:
    handle_id: str
    media_type: str
    data: bytes

    @property
    def data_uri(self) -> str:
        body = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.media_type};base64,{body}"

    @property
    def url(self) -> str:
        return f"/api/images/{self.handle_id}"


class HandleRegistry:
    """Hands out revocable references to image bytes, like browser object URLs."""

    def __init__(self) -> None:
        self._handles: dict[str, DisplayHandle] = {}

    def __len__(self) -> int:
        return len(self._handles)

    def create(self, data: bytes, media_type: str) -> DisplayHandle:
        handle = DisplayHandle(handle_id=uuid4().hex, media_type=media_type, data=data)
        self._handles[handle.handle_id] = handle
        return handle

    def get(self, handle_id: str) -> Optional[DisplayHandle]:
        return self._handles.get(handle_id)

    def release(self, handle: Optional[DisplayHandle]) -> None:
        if handle is None:
            return
        if self._handles.pop(handle.handle_id, None) is not None:
            logger.debug("Released display handle %s", handle.handle_id)


def sniff_media_type(data: bytes, default: str = DEFAULT_RESULT_MEDIA_TYPE) -> str:
    """Returns the MIME type Pillow detects for the bytes, or the default."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            detected = Image.MIME.get(img.format or "")
    except (UnidentifiedImageError, OSError, ValueError):
        return default
    return detected or default


__all__ = ["DEFAULT_RESULT_MEDIA_TYPE", "DisplayHandle", "HandleRegistry", "sniff_media_type"]
