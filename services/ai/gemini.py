"""Gemini-based edit client that sends one image and one instruction per call."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Optional

from google import genai
from google.genai import types as genai_types

from ..errors import ServiceError
from ..timing import log_timing

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash-image"

MODEL_LABELS = {
    "gemini-2.5-flash-image": "Gemini 2.5 Flash Image",
    "gemini-2.5-flash-image-preview": "Gemini 2.5 Flash Image Preview",
    "gemini-3-pro-image-preview": "Gemini 3 Pro Image Preview",
}


def model_label(model_name: str) -> str:
    return MODEL_LABELS.get(model_name, model_name)


class GeminiEditClient:
    def __init__(
        self,
        api_key: str,
        model_name: str = DEFAULT_MODEL,
        enabled: bool = True,
        client: Optional[genai.Client] = None,
    ) -> None:
        self._model_name = model_name
        self._client = client
        self.available = bool(enabled) and (bool(api_key) or client is not None)
        if not self.available:
            logger.info("[Gemini] API key not set; image editing disabled")
            return
        if self._client is None:
            try:
                self._client = genai.Client(api_key=api_key)
            except Exception as exc:
                logger.warning("[Gemini] config error: %s", exc)
                self.available = False
                return
        logger.info("[Gemini] configured model %s", model_name)

    @property
    def label(self) -> str:
        return model_label(self._model_name)

    @property
    def model_name(self) -> str:
        return self._model_name

    async def submit(self, content: str, media_type: str, instruction: str) -> Optional[str]:
        if not self.available or self._client is None:
            raise ServiceError("Gemini client is not configured. Set GEMINI_API_KEY.")

        try:
            image_bytes = base64.b64decode(content, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ServiceError(f"Invalid image payload: {exc}") from exc

        contents = [
            genai_types.Part.from_bytes(data=image_bytes, mime_type=media_type),
            genai_types.Part.from_text(text=instruction),
        ]
        config = genai_types.GenerateContentConfig(
            response_modalities=[genai_types.Modality.IMAGE, genai_types.Modality.TEXT],
        )
        try:
            with log_timing(f"gemini generate_content {self._model_name}", logger):
                response = await self._client.aio.models.generate_content(
                    model=self._model_name, contents=contents, config=config
                )
        except Exception as exc:
            logger.warning("[Gemini] request failed: %s", exc)
            raise ServiceError(str(exc)) from exc

        for candidate in response.candidates or []:
            parts = candidate.content.parts if candidate.content else None
            for part in parts or []:
                encoded = _inline_image_to_base64(getattr(part, "inline_data", None))
                if encoded:
                    logger.info("[Gemini] image returned")
                    return encoded
                text = getattr(part, "text", None)
                if text:
                    logger.info("[Gemini] text response: %s", text[:200])

        logger.info("[Gemini] response contained no image")
        return None


def _inline_image_to_base64(inline: object) -> Optional[str]:
    if not inline:
        return None

    if isinstance(inline, dict):
        mime_type = inline.get("mime_type") or inline.get("mimeType")
        data = inline.get("data")
    else:
        mime_type = getattr(inline, "mime_type", None)
        data = getattr(inline, "data", None)

    if mime_type and not str(mime_type).startswith("image/"):
        return None
    if not data:
        return None

    # Raw SDK responses carry bytes; JSON-shaped ones already carry base64 text.
    if isinstance(data, str):
        return data
    if isinstance(data, (bytes, bytearray)):
        return base64.b64encode(bytes(data)).decode("ascii")
    return None


__all__ = ["DEFAULT_MODEL", "GeminiEditClient", "model_label"]
