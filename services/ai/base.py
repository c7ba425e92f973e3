"""Protocol definition for remote image edit providers."""

from __future__ import annotations

from typing import Optional, Protocol


class EditClient(Protocol):
    @property
    def available(self) -> bool:
        ...

    @property
    def label(self) -> str:
        ...

    async def submit(self, content: str, media_type: str, instruction: str) -> Optional[str]:
        """Returns the base64 body of the edited image, or None when no image came back."""
        ...
