from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from PIL import Image

from .pixel_buffer import deep_copy, same_pixels

logger = logging.getLogger(__name__)


class NothingToUndoError(LookupError):
    pass


@dataclass
class UndoStack:
    """
    Linear history of full image snapshots, oldest first.

    The bottom entry is the floor (the image right after loading). Every entry
    is a private deep copy; callers never get a reference into the stack.
    """

    snapshots: list[Image.Image] = field(default_factory=list)

    @property
    def depth(self) -> int:
        return len(self.snapshots)

    def __len__(self) -> int:
        return len(self.snapshots)

    def push(self, image: Optional[Image.Image]) -> bool:
        copy = deep_copy(image)
        if copy is None:
            logger.warning("Snapshot konnte nicht gesichert werden, Verlauf unverändert.")
            return False
        self.snapshots.append(copy)
        return True

    def rollback(self) -> None:
        """Drop the most recent snapshot after a failed edit."""
        if self.snapshots:
            self.snapshots.pop()

    def peek(self) -> Optional[Image.Image]:
        if not self.snapshots:
            return None
        return self.snapshots[-1].copy()

    def clear(self) -> None:
        self.snapshots.clear()

    def undo(self, current: Optional[Image.Image] = None) -> Image.Image:
        """
        Return the buffer to restore.

        With a single entry the floor is handed back as a copy and stays on the
        stack; if ``current`` already equals it there is nothing left to undo.
        """
        if not self.snapshots:
            raise NothingToUndoError("Nichts mehr zum Rückgängig machen.")
        if len(self.snapshots) == 1:
            floor = self.snapshots[0]
            if current is not None and same_pixels(current, floor):
                raise NothingToUndoError("Bereits im Ausgangszustand.")
            return floor.copy()
        return self.snapshots.pop()
