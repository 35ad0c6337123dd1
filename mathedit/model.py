import re
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Optional

from .constants import EditorConstants
from .undo import DocumentModel, ModelState, Selection, SetStateOptions

# A control word (\frac), a control symbol (\{) or any other single character
_ATOM_RE = re.compile(r"\\[a-zA-Z]+|\\.|\S")


def tokenize(latex: str) -> list[str]:
    """Split a LaTeX string into atoms."""
    return _ATOM_RE.findall(latex)


def serialize(atoms) -> str:
    out = []
    for i, atom in enumerate(atoms):
        out.append(atom)
        # "\alpha" followed by "x" must not read as "\alphax"
        if (atom[0] == '\\' and atom[1:].isalpha() and i + 1 < len(atoms)
                and atoms[i + 1][0].isalpha()):
            out.append(' ')
    return ''.join(out)


class ModelListener(ABC):
    """Receives change notifications from a MathModel."""

    @abstractmethod
    def content_did_change(self, model: "MathModel", input_type: str):
        """Called after the content of the model changed.

        ``input_type`` names the kind of change, e.g. "insertText" or
        "historyUndo" when the change was a restore from the undo history.
        """

    @abstractmethod
    def selection_did_change(self, model: "MathModel"):
        """Called after the selection moved."""


class MathModel(DocumentModel):
    atoms: list[str]
    listener: Optional[ModelListener]

    def __init__(self, value: str = "", listener: Optional[ModelListener] = None):
        self.atoms = tokenize(value)
        self.listener = listener
        self._selection = Selection.caret(len(self.atoms))
        self._silence_notifications = False
        self.clipboard: list[str] = []  # Internal clipboard for cut/copy/paste

    @property
    def value(self) -> str:
        return serialize(self.atoms)

    @property
    def selection(self) -> Selection:
        return self._selection

    @property
    def position(self) -> int:
        return self._selection.focus

    @contextmanager
    def silenced(self):
        """Suppress listener notifications for the duration of the block."""
        saved = self._silence_notifications
        self._silence_notifications = True
        try:
            yield self
        finally:
            self._silence_notifications = saved

    def _content_did_change(self, input_type: str):
        if self.listener is not None and not self._silence_notifications:
            self.listener.content_did_change(self, input_type)

    def _selection_did_change(self):
        if self.listener is not None and not self._silence_notifications:
            self.listener.selection_did_change(self)

    def _clamp(self, offset: int) -> int:
        return max(0, min(offset, len(self.atoms)))

    # --- Selection ---
    def set_selection(self, start: int, end: Optional[int] = None):
        """Select atoms between two offsets, or place the caret at ``start``."""
        start = self._clamp(start)
        end = start if end is None else self._clamp(end)
        if start == end:
            selection = Selection.caret(start)
        elif start < end:
            selection = Selection(ranges=((start, end),), direction="forward")
        else:
            selection = Selection(ranges=((end, start),), direction="backward")
        if selection != self._selection:
            self._selection = selection
            self._selection_did_change()

    def select_all(self):
        self.set_selection(0, len(self.atoms))

    def move(self, delta: int):
        """Move the caret by ``delta`` atoms, collapsing any selection."""
        sel = self._selection
        if not sel.is_collapsed():
            # Like most editors, an arrow key collapses to the matching edge
            self.set_selection(sel.start if delta < 0 else sel.end)
            return
        self.set_selection(sel.focus + delta)

    def move_to_start(self):
        self.set_selection(0)

    def move_to_end(self):
        self.set_selection(len(self.atoms))

    def get_selected_atoms(self) -> list[str]:
        return self.atoms[self._selection.start:self._selection.end]

    # --- Editing ---
    def _remove(self, start: int, end: int):
        del self.atoms[start:end]
        self._selection = Selection.caret(start)

    def insert(self, latex: str) -> bool:
        """Insert atoms at the caret, replacing the selection if there is one."""
        new_atoms = tokenize(latex)
        sel = self._selection
        if not new_atoms and sel.is_collapsed():
            return False
        self.atoms[sel.start:sel.end] = new_atoms
        self._selection = Selection.caret(sel.start + len(new_atoms))
        self._content_did_change(EditorConstants.INPUT_INSERT_TEXT)
        self._selection_did_change()
        return True

    def delete_selection(self) -> bool:
        sel = self._selection
        if sel.is_collapsed():
            return False
        self._remove(sel.start, sel.end)
        self._content_did_change(EditorConstants.INPUT_DELETE_BACKWARD)
        self._selection_did_change()
        return True

    def delete_backward(self) -> bool:
        """Delete the selection, or the atom before the caret."""
        sel = self._selection
        if sel.is_collapsed():
            if sel.start == 0:
                return False
            self._remove(sel.start - 1, sel.start)
        else:
            self._remove(sel.start, sel.end)
        self._content_did_change(EditorConstants.INPUT_DELETE_BACKWARD)
        self._selection_did_change()
        return True

    def delete_forward(self) -> bool:
        """Delete the selection, or the atom after the caret."""
        sel = self._selection
        if sel.is_collapsed():
            if sel.start >= len(self.atoms):
                return False
            self._remove(sel.start, sel.start + 1)
        else:
            self._remove(sel.start, sel.end)
        self._content_did_change(EditorConstants.INPUT_DELETE_FORWARD)
        self._selection_did_change()
        return True

    def set_value(self, latex: str):
        """Replace the whole content and put the caret at the end."""
        self.atoms = tokenize(latex)
        self._selection = Selection.caret(len(self.atoms))
        self._content_did_change(EditorConstants.INPUT_INSERT_TEXT)
        self._selection_did_change()

    # --- Clipboard ---
    def copy_selection(self) -> bool:
        """Copy selected atoms to the clipboard."""
        selected = self.get_selected_atoms()
        if selected:
            self.clipboard = selected
            return True
        return False

    def cut_selection(self) -> bool:
        """Cut selected atoms to the clipboard."""
        if not self.copy_selection():
            return False
        sel = self._selection
        self._remove(sel.start, sel.end)
        self._content_did_change(EditorConstants.INPUT_DELETE_BY_CUT)
        self._selection_did_change()
        return True

    def paste(self) -> bool:
        """Paste the clipboard at the caret, replacing any selection."""
        if not self.clipboard:
            return False
        return self.insert(serialize(self.clipboard))

    # --- Undo support ---
    def get_state(self) -> ModelState:
        return ModelState(content=tuple(self.atoms), selection=self._selection)

    def set_state(self, state: ModelState, options: SetStateOptions):
        self.atoms = list(state.content)
        # A stored selection may point past the end if it was amended
        # against a longer document
        self._selection = Selection(
            ranges=tuple((self._clamp(a), self._clamp(b)) for a, b in state.selection.ranges),
            direction=state.selection.direction,
        )
        if options.silence_notifications:
            return
        if options.type == "undo":
            input_type = EditorConstants.INPUT_HISTORY_UNDO
        else:
            input_type = EditorConstants.INPUT_HISTORY_REDO
        self._content_did_change(input_type)
        self._selection_did_change()
