"""Mathedit - Undo/redo history for a math expression editor."""

from .undo import UndoManager, ModelState, Selection, SetStateOptions, DocumentModel
from .model import MathModel, ModelListener
from .editor import MathEditor

__all__ = [
    'UndoManager',
    'ModelState',
    'Selection',
    'SetStateOptions',
    'DocumentModel',
    'MathModel',
    'ModelListener',
    'MathEditor',
]
