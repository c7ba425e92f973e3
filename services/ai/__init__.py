"""Factory for building the configured remote edit client."""

from __future__ import annotations

from typing import Optional

from .base import EditClient
from .gemini import DEFAULT_MODEL, GeminiEditClient


def build_edit_client(config: dict) -> Optional[EditClient]:
    provider = str(config.get("IMAGE_PROVIDER", "")).lower()
    if provider == "gemini":
        client = GeminiEditClient(
            api_key=config.get("GEMINI_API_KEY", ""),
            model_name=config.get("GEMINI_MODEL", DEFAULT_MODEL) or DEFAULT_MODEL,
        )
        return client if client.available else None

    return None


__all__ = ["EditClient", "GeminiEditClient", "build_edit_client"]
