"""Service container definitions for core app services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .ai import EditClient
from .controller import EnhancementController, Phase, ViewState
from .encoder import EncodedPayload, SourceImage, encode_image
from .handles import DisplayHandle, HandleRegistry
from .sessions import SessionRegistry


@dataclass(frozen=True)
class AppServices:
    sessions: SessionRegistry
    edit_client: Optional[EditClient]

    @property
    def ai_available(self) -> bool:
        return bool(self.edit_client and self.edit_client.available)

    @property
    def ai_label(self) -> str:
        return self.edit_client.label if self.edit_client else "Gemini"


__all__ = [
    "AppServices",
    "DisplayHandle",
    "EncodedPayload",
    "EnhancementController",
    "HandleRegistry",
    "Phase",
    "SessionRegistry",
    "SourceImage",
    "ViewState",
    "encode_image",
]
