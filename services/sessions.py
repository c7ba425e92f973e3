"""Per-session controller registry with least-recently-used eviction."""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Optional

from .ai.base import EditClient
from .controller import EnhancementController

DEFAULT_SESSION_CAPACITY = 200

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Keeps one EnhancementController per browser session in memory."""

    def __init__(
        self,
        edit_client: Optional[EditClient],
        capacity: int = DEFAULT_SESSION_CAPACITY,
    ) -> None:
        self._edit_client = edit_client
        self._capacity = max(1, int(capacity))
        self._controllers: OrderedDict[str, EnhancementController] = OrderedDict()

    def __len__(self) -> int:
        return len(self._controllers)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._controllers

    @property
    def edit_client(self) -> Optional[EditClient]:
        return self._edit_client

    def get(self, session_id: str) -> EnhancementController:
        """Returns the session's controller, creating one and evicting the oldest if full."""
        controller = self._controllers.get(session_id)
        if controller is not None:
            self._controllers.move_to_end(session_id)
            return controller

        controller = EnhancementController(self._edit_client)
        self._controllers[session_id] = controller
        while len(self._controllers) > self._capacity:
            evicted_id, evicted = self._controllers.popitem(last=False)
            evicted.discard()
            logger.info("Evicted session %s", evicted_id)
        return controller

    def peek(self, session_id: Optional[str]) -> Optional[EnhancementController]:
        """Returns an existing controller without creating one, so reads never evict."""
        if not session_id:
            return None
        controller = self._controllers.get(session_id)
        if controller is not None:
            self._controllers.move_to_end(session_id)
        return controller

    def discard(self, session_id: str) -> bool:
        controller = self._controllers.pop(session_id, None)
        if controller is None:
            return False
        controller.discard()
        return True

    def clear(self) -> None:
        for controller in self._controllers.values():
            controller.discard()
        self._controllers.clear()


__all__ = ["DEFAULT_SESSION_CAPACITY", "SessionRegistry"]
