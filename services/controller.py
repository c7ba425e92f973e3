"""View state machine for the upload, prompt, and enhance flow."""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from .ai.base import EditClient
from .encoder import EncodedPayload, SourceImage, declared_media_type, encode_image
from .errors import EmptyResultError, ServiceError, ValidationError
from .handles import DEFAULT_RESULT_MEDIA_TYPE, DisplayHandle, HandleRegistry, sniff_media_type
from .timing import log_timing

logger = logging.getLogger(__name__)

INVALID_FILE_MESSAGE = "Please upload a valid image file."
NO_IMAGE_MESSAGE = "The API did not return an image. Please try a different prompt."
FAILURE_PREFIX = "Failed to enhance image."
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."


class Phase(str, Enum):
    EMPTY = "empty"
    READY = "ready"
    ENHANCING = "enhancing"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class ViewState:
    phase: Phase = Phase.EMPTY
    original: Optional[DisplayHandle] = None
    edited: Optional[DisplayHandle] = None
    prompt: str = ""
    error: Optional[str] = None

    def __post_init__(self) -> None:
        if self.phase is Phase.EMPTY:
            if self.original is not None or self.edited is not None:
                raise ValueError("An empty view cannot hold images.")
            return
        if self.original is None:
            raise ValueError(f"Phase {self.phase.value} requires an original image.")
        if self.phase is Phase.ENHANCING and (self.error or self.edited is not None):
            raise ValueError("An enhancing view cannot hold an error or an edited image.")
        # A rejected upload may leave a validation error next to a finished result.
        if self.phase is Phase.SUCCESS and self.edited is None:
            raise ValueError("A successful view requires an edited image.")
        if self.phase is Phase.FAILED and (not self.error or self.edited is not None):
            raise ValueError("A failed view requires an error and no edited image.")

    @property
    def is_loading(self) -> bool:
        return self.phase is Phase.ENHANCING

    @property
    def has_original(self) -> bool:
        return self.original is not None

    @property
    def error_message(self) -> Optional[str]:
        return self.error

    @property
    def can_enhance(self) -> bool:
        return self.has_original and bool(self.prompt) and not self.is_loading

    def to_dict(self) -> dict:
        return {
            "phase": self.phase.value,
            "is_loading": self.is_loading,
            "has_original": self.has_original,
            "can_enhance": self.can_enhance,
            "prompt": self.prompt,
            "error": self.error,
            "original_url": self.original.url if self.original else None,
            "edited_url": self.edited.url if self.edited else None,
        }


Encoder = Callable[[Any], Awaitable[EncodedPayload]]


def format_failure(exc: BaseException) -> str:
    message = str(exc).strip() or UNKNOWN_ERROR_MESSAGE
    return f"{FAILURE_PREFIX} {message}"


class EnhancementController:
    """Owns one view state and applies the three user actions to it."""

    def __init__(
        self,
        edit_client: Optional[EditClient],
        handles: Optional[HandleRegistry] = None,
        encoder: Encoder = encode_image,
    ) -> None:
        self._edit_client = edit_client
        self._handles = handles if handles is not None else HandleRegistry()
        self._encoder = encoder
        self._source: Optional[SourceImage] = None
        self._attempt = 0
        self._state = ViewState()

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def handles(self) -> HandleRegistry:
        return self._handles

    def select_file(self, source: SourceImage) -> bool:
        if self._state.is_loading:
            logger.info("Ignored upload while an enhancement is in flight")
            return False
        try:
            media_type = validate_source(source)
        except ValidationError as exc:
            logger.info("Rejected upload: %s", exc)
            self._state = replace(self._state, error=str(exc))
            return False

        self._handles.release(self._state.original)
        self._handles.release(self._state.edited)
        original = self._handles.create(source.data, media_type)
        self._source = source
        self._state = ViewState(phase=Phase.READY, original=original, prompt=self._state.prompt)
        return True

    def set_prompt(self, text: str) -> None:
        self._state = replace(self._state, prompt=text or "")

    async def enhance(self) -> bool:
        # Checked and committed before the first await so a second trigger is ignored.
        state = self._state
        if not state.can_enhance or self._source is None:
            return False

        self._handles.release(state.edited)
        self._state = ViewState(phase=Phase.ENHANCING, original=state.original, prompt=state.prompt)
        self._attempt += 1
        attempt = self._attempt
        source = self._source

        try:
            with log_timing("encode source image", logger):
                payload = await self._encoder(source)
            if self._edit_client is None:
                raise ServiceError("Image editing is unavailable. Set GEMINI_API_KEY.")
            edited_base64 = await self._edit_client.submit(
                payload.content, payload.media_type, state.prompt
            )
            if not edited_base64:
                raise EmptyResultError(NO_IMAGE_MESSAGE)
            edited = self._build_edited_handle(edited_base64)
        except Exception as exc:
            message = format_failure(exc)
            logger.error("Enhancement failed: %s", message)
            if self._is_current(attempt):
                self._state = ViewState(
                    phase=Phase.FAILED,
                    original=self._state.original,
                    prompt=self._state.prompt,
                    error=message,
                )
            return True
        except BaseException:
            # Cancelled mid-flight: leave Enhancing so the session can retry.
            if self._is_current(attempt):
                logger.warning("Enhancement cancelled")
                self._state = ViewState(
                    phase=Phase.READY,
                    original=self._state.original,
                    prompt=self._state.prompt,
                )
            raise

        if not self._is_current(attempt):
            # The session was discarded while the request was in flight.
            self._handles.release(edited)
            return True
        self._state = ViewState(
            phase=Phase.SUCCESS,
            original=self._state.original,
            edited=edited,
            prompt=self._state.prompt,
        )
        return True

    def discard(self) -> None:
        self._handles.release(self._state.original)
        self._handles.release(self._state.edited)
        self._source = None
        self._attempt += 1
        self._state = ViewState()

    def _is_current(self, attempt: int) -> bool:
        return attempt == self._attempt and self._state.is_loading

    def _build_edited_handle(self, edited_base64: str) -> DisplayHandle:
        try:
            data = base64.b64decode(edited_base64)
        except (binascii.Error, ValueError) as exc:
            raise ServiceError("The API returned an unreadable image.") from exc
        media_type = sniff_media_type(data, DEFAULT_RESULT_MEDIA_TYPE)
        return self._handles.create(data, media_type)


def validate_source(source: Any) -> str:
    """Returns the declared media type, or raises ValidationError for non-images."""
    media_type = declared_media_type(source)
    if not media_type.startswith("image/"):
        raise ValidationError(INVALID_FILE_MESSAGE)
    return media_type


__all__ = [
    "EnhancementController",
    "FAILURE_PREFIX",
    "INVALID_FILE_MESSAGE",
    "NO_IMAGE_MESSAGE",
    "Phase",
    "ViewState",
    "format_failure",
    "validate_source",
]
