"""Constants and configuration for the mathedit editor."""

class EditorConstants:
    """Central configuration constants for the editor."""
    
    # Undo history
    UNDO_MAXIMUM_DEPTH = 1000  # Maximum number of undo/redo states
    UNDO_MIN_DEPTH = 1
    UNDO_MAX_DEPTH = 100000  # Upper bound accepted from user settings
    
    # Operation tags used for coalescing consecutive edits
    OP_INSERT = "insert"
    OP_DELETE = "delete"
    
    # Input types reported to the model listener
    INPUT_INSERT_TEXT = "insertText"
    INPUT_DELETE_BACKWARD = "deleteContentBackward"
    INPUT_DELETE_FORWARD = "deleteContentForward"
    INPUT_DELETE_BY_CUT = "deleteByCut"
    INPUT_HISTORY_UNDO = "historyUndo"
    INPUT_HISTORY_REDO = "historyRedo"
    
    # Settings storage
    SETTINGS_APP_NAME = "mathedit"
    SETTINGS_APP_AUTHOR = "mathedit"
    SETTINGS_FILE_NAME = "settings.json"
    
    # Status messages
    UNDONE_MESSAGE = "Undone"
    NOTHING_TO_UNDO_MESSAGE = "Nothing to undo"
    REDONE_MESSAGE = "Redone"
    NOTHING_TO_REDO_MESSAGE = "Nothing to redo"
