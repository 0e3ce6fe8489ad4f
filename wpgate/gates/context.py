from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Set

logger = logging.getLogger(__name__)


@dataclass
class InitContext:
    """
    Per-page-load state shared by gate callers.

    Several gates can ask for the same editor asset (e.g. the generic URL embed hider);
    the first claim wins and later ones are no-ops. Create one per page load and pass it
    to every gate that needs it.
    """

    delivered: Set[str] = field(default_factory=set)

    def claim(self, handle: str) -> bool:
        """Return True if `handle` was not delivered yet (and mark it delivered)."""
        if handle in self.delivered:
            logger.debug("Asset %s already delivered for this page load", handle)
            return False
        self.delivered.add(handle)
        return True
