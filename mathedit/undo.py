"""Snapshot-based undo/redo history.

The stack holds whole-document snapshots. The entry at ``position`` is the
state the model currently reflects; the one before it is the next undo
target and anything after it can be redone.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Literal, Optional

from .constants import EditorConstants

logger = logging.getLogger(__name__)


TransitionType = Literal["undo", "redo"]
SelectionDirection = Literal["forward", "backward", "none"]


@dataclass(frozen=True)
class Selection:
    ranges: tuple[tuple[int, int], ...] = ((0, 0),)
    direction: SelectionDirection = "none"

    def __post_init__(self):
        if not self.ranges:
            raise ValueError("a selection needs at least one range")

    @classmethod
    def caret(cls, offset: int) -> "Selection":
        return cls(ranges=((offset, offset),))

    @property
    def start(self) -> int:
        return min(min(r) for r in self.ranges)

    @property
    def end(self) -> int:
        return max(max(r) for r in self.ranges)

    @property
    def focus(self) -> int:
        """Offset where the caret sits (the moving end of the selection)."""
        if self.direction == "backward":
            return self.start
        return self.end

    def is_collapsed(self) -> bool:
        return self.start == self.end


@dataclass(frozen=True)
class ModelState:
    content: tuple[str, ...]
    selection: Selection = Selection()


@dataclass(frozen=True)
class SetStateOptions:
    type: TransitionType
    silence_notifications: bool = False


class DocumentModel(ABC):
    """What the undo manager needs from a document model."""

    @abstractmethod
    def get_state(self) -> ModelState:
        """Return an independent copy of the current content and selection."""

    @abstractmethod
    def set_state(self, state: ModelState, options: SetStateOptions) -> None:
        """Restore the model to exactly ``state``."""


class UndoManager:
    # Maximum number of undo/redo states
    maximum_depth = EditorConstants.UNDO_MAXIMUM_DEPTH

    def __init__(self, model: DocumentModel, maximum_depth: Optional[int] = None,
                 trace: bool = False):
        if maximum_depth is not None:
            if maximum_depth < 1:
                raise ValueError(f"maximum_depth must be at least 1, got {maximum_depth}")
            self.maximum_depth = maximum_depth
        self._model = model
        self._recording = False
        self._trace = trace
        self.reset()

    def reset(self):
        self._stack: list[ModelState] = []
        self._index = -1
        # Tag of the last recorded edit; a snapshot with the same tag
        # replaces it instead of adding a new entry.
        self._last_op = ""

    def start_recording(self):
        self._recording = True

    def stop_recording(self):
        self._recording = False

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def position(self) -> int:
        return self._index

    @property
    def last_op(self) -> str:
        return self._last_op

    @property
    def entries(self) -> tuple[ModelState, ...]:
        return tuple(self._stack)

    def __len__(self) -> int:
        return len(self._stack)

    def can_undo(self) -> bool:
        return self._index - 1 >= 0

    def can_redo(self) -> bool:
        return len(self._stack) - 1 > self._index

    def stop_coalescing(self, selection: Optional[Selection] = None):
        """Stop coalescing future ops, for example when the selection changes.

        If ``selection`` is given it replaces the selection stored in the
        current entry, so undoing back to it puts the caret where it ended.
        """
        if selection is not None and self._index >= 0:
            self._stack[self._index] = replace(self._stack[self._index], selection=selection)
        if self._last_op:
            logger.debug(f"stop coalescing {self._last_op!r}")
        self._last_op = ""

    def undo(self) -> bool:
        if not self.can_undo():
            return False
        self._dump("undo")
        # The current entry is the state after the last edit, so step back
        # to the one before it.
        self._model.set_state(
            self._stack[self._index - 1],
            SetStateOptions(type="undo", silence_notifications=False),
        )
        self._index -= 1
        self._last_op = ""
        return True

    def redo(self) -> bool:
        if not self.can_redo():
            return False
        self._dump("redo")
        self._index += 1
        self._model.set_state(
            self._stack[self._index],
            SetStateOptions(type="redo", silence_notifications=False),
        )
        self._last_op = ""
        return True

    def pop(self):
        """Discard the current entry and everything after it."""
        if not self.can_undo():
            return
        del self._stack[self._index:]
        self._index -= 1

    def snapshot(self, op: Optional[str] = None) -> bool:
        """Push the model's current state so it can be reverted to later.

        Returns True if the history changed.
        """
        if not self._recording:
            return False

        if op and op == self._last_op:
            self.pop()

        # Any new entry invalidates the redo branch
        del self._stack[self._index + 1:]

        self._stack.append(self._model.get_state())
        self._index += 1

        # Cap history
        if len(self._stack) > self.maximum_depth:
            self._stack.pop(0)
            self._index -= 1

        self._dump(f"snapshot (last op = {self._last_op!r}, op = {op!r})")
        self._last_op = op or ""
        return True

    def _dump(self, label: str):
        if not self._trace or not logger.isEnabledFor(logging.DEBUG):
            return
        lines = [
            f"{'>' if i == self._index else ' '}{''.join(state.content)}"
            for i, state in enumerate(self._stack)
        ]
        logger.debug(label + ":\n" + "\n".join(lines))
