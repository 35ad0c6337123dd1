"""Command pattern implementation for editor actions."""

from abc import ABC, abstractmethod
from typing import Dict, Optional, TYPE_CHECKING
from .constants import EditorConstants

if TYPE_CHECKING:
    from .editor import MathEditor


class EditorCommand(ABC):
    """Base class for editor commands."""

    @abstractmethod
    def execute(self, editor: 'MathEditor', *args) -> bool:
        """Execute the command.

        Args:
            editor: Editor instance
            *args: Command arguments, e.g. the LaTeX to insert

        Returns:
            True if the command modified the document
        """
        pass


class MovementCommand(EditorCommand):
    """Base class for caret movement commands."""

    def execute(self, editor: 'MathEditor', *args) -> bool:
        """Movement commands don't modify the document."""
        self._move(editor, *args)
        # Typing after a move starts a new undo step; remember where the
        # caret ended up in the current one
        editor.undo.stop_coalescing(editor.model.selection)
        return False

    @abstractmethod
    def _move(self, editor: 'MathEditor', *args):
        """Perform the movement."""
        pass


class MoveLeftCommand(MovementCommand):
    def _move(self, editor, *args):
        editor.model.move(-1)


class MoveRightCommand(MovementCommand):
    def _move(self, editor, *args):
        editor.model.move(1)


class MoveToStartCommand(MovementCommand):
    def _move(self, editor, *args):
        editor.model.move_to_start()


class MoveToEndCommand(MovementCommand):
    def _move(self, editor, *args):
        editor.model.move_to_end()


class SelectAllCommand(MovementCommand):
    def _move(self, editor, *args):
        editor.model.select_all()


class EditCommand(EditorCommand):
    """Base class for editing commands.

    ``op`` tags the undo entry; consecutive edits with the same tag are
    coalesced into one undo step. Untagged edits always get their own.
    """

    op: Optional[str] = None

    def execute(self, editor: 'MathEditor', *args) -> bool:
        """Editing commands modify the document."""
        if not self._edit(editor, *args):
            return False
        # Capture the state after the edit
        editor.undo.snapshot(self.op)
        return True

    @abstractmethod
    def _edit(self, editor: 'MathEditor', *args) -> bool:
        """Perform the edit. Return True if the document changed."""
        pass


class InsertCommand(EditCommand):
    op = EditorConstants.OP_INSERT

    def _edit(self, editor, latex="", *args):
        return editor.model.insert(latex)


class DeleteBackwardCommand(EditCommand):
    op = EditorConstants.OP_DELETE

    def _edit(self, editor, *args):
        return editor.model.delete_backward()


class DeleteForwardCommand(EditCommand):
    op = EditorConstants.OP_DELETE

    def _edit(self, editor, *args):
        return editor.model.delete_forward()


class DeleteSelectionCommand(EditCommand):
    def _edit(self, editor, *args):
        return editor.model.delete_selection()


class CutCommand(EditCommand):
    def _edit(self, editor, *args):
        if editor.model.cut_selection():
            editor.status_message = "Selection cut"
            return True
        editor.status_message = "No selection"
        return False


class PasteCommand(EditCommand):
    def _edit(self, editor, *args):
        return editor.model.paste()


class SystemCommand(EditorCommand):
    """Base class for commands that don't edit the document directly."""

    def execute(self, editor: 'MathEditor', *args) -> bool:
        self._execute_system(editor, *args)
        return False

    @abstractmethod
    def _execute_system(self, editor: 'MathEditor', *args):
        pass


class CopyCommand(SystemCommand):
    def _execute_system(self, editor, *args):
        if editor.model.copy_selection():
            editor.status_message = "Selection copied"
        else:
            editor.status_message = "No selection"


class UndoCommand(EditorCommand):
    def execute(self, editor: 'MathEditor', *args) -> bool:
        # Restoring a snapshot does change the document
        if editor.undo.undo():
            editor.status_message = EditorConstants.UNDONE_MESSAGE
            return True
        editor.status_message = EditorConstants.NOTHING_TO_UNDO_MESSAGE
        return False


class RedoCommand(EditorCommand):
    def execute(self, editor: 'MathEditor', *args) -> bool:
        if editor.undo.redo():
            editor.status_message = EditorConstants.REDONE_MESSAGE
            return True
        editor.status_message = EditorConstants.NOTHING_TO_REDO_MESSAGE
        return False


class CommandRegistry:
    """Registry for mapping command names to commands."""

    def __init__(self):
        self._commands: Dict[str, EditorCommand] = {}
        self._setup_default_commands()

    def _setup_default_commands(self):
        """Set up the default command mappings."""
        # Movement commands
        self.register('move_left', MoveLeftCommand())
        self.register('move_right', MoveRightCommand())
        self.register('move_to_start', MoveToStartCommand())
        self.register('move_to_end', MoveToEndCommand())
        self.register('select_all', SelectAllCommand())

        # Editing commands
        self.register('insert', InsertCommand())
        self.register('delete_backward', DeleteBackwardCommand())
        self.register('delete_forward', DeleteForwardCommand())
        self.register('delete_selection', DeleteSelectionCommand())
        self.register('cut', CutCommand())
        self.register('copy', CopyCommand())
        self.register('paste', PasteCommand())

        # Undo/redo
        self.register('undo', UndoCommand())
        self.register('redo', RedoCommand())

    def register(self, name: str, command: EditorCommand):
        """Register a command under a name."""
        self._commands[name] = command

    def get_command(self, name: str) -> Optional[EditorCommand]:
        """Get the command registered under a name."""
        return self._commands.get(name)
