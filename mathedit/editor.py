"""Editor controller tying the math model to its undo history."""

import logging
from typing import Any, Dict, Optional

from .commands import CommandRegistry
from .constants import EditorConstants
from .model import MathModel, ModelListener, tokenize
from .settings_persistence import get_persistence
from .undo import UndoManager

logger = logging.getLogger(__name__)


class MathEditor(ModelListener):
    """Host for a math expression: model, undo history and commands."""

    def __init__(self, value: str = "", settings: Optional[Dict[str, Any]] = None):
        """Initialize the editor components.

        Args:
            value: Initial LaTeX content.
            settings: Editor settings. Loaded from the user's config
                directory when omitted.
        """
        if settings is None:
            settings = get_persistence().load_settings()
        self.model = MathModel(value, listener=self)
        self.undo = UndoManager(
            self.model,
            maximum_depth=settings.get('undo_maximum_depth'),
            trace=bool(settings.get('undo_trace', False)),
        )
        self.command_registry = CommandRegistry()
        self.modified = False
        self.status_message: Optional[str] = None
        self.announcement: Optional[str] = None
        self.caret: int = self.model.position
        # The initial content is the oldest state undo can return to
        self.undo.start_recording()
        self.undo.snapshot()

    @property
    def value(self) -> str:
        return self.model.value

    # --- ModelListener ---
    def content_did_change(self, model, input_type):
        self.modified = True
        if input_type == EditorConstants.INPUT_HISTORY_UNDO:
            self.announcement = f"undo: {model.value}"
        elif input_type == EditorConstants.INPUT_HISTORY_REDO:
            self.announcement = f"redo: {model.value}"

    def selection_did_change(self, model):
        self.caret = model.position

    # --- Commands ---
    def execute(self, name: str, *args) -> bool:
        """Run a named command.

        Returns:
            True if the command modified the document
        """
        command = self.command_registry.get_command(name)
        if command is None:
            logger.warning(f"Unknown command: {name}")
            return False
        self.status_message = None
        return command.execute(self, *args)

    def set_value(self, latex: str) -> bool:
        """Replace the content as a single undoable step.

        Returns:
            True if the content changed
        """
        if tokenize(latex) == self.model.atoms:
            return False
        # Work on the model directly; movement commands would amend the
        # selection stored in the current history entry
        self.undo.stop_recording()
        try:
            self.model.select_all()
            if latex:
                self.model.insert(latex)
            else:
                self.model.delete_selection()
        finally:
            self.undo.start_recording()
        self.undo.snapshot()
        return True

    def load(self, latex: str):
        """Replace the content and start a fresh history."""
        with self.model.silenced():
            self.model.set_value(latex)
        self.caret = self.model.position
        self.modified = False
        self.undo.reset()
        self.undo.snapshot()
