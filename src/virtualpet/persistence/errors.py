class SaveError(Exception):
    """Base exception for save/load errors."""


class SaveValidationError(SaveError):
    """Raised when a save document is malformed or missing required fields."""


class SaveSlotsFull(SaveError):
    """Raised when creating a new save would exceed the allowed number of slots."""


class CorruptSaveError(SaveError):
    """Raised when save files are corrupted and cannot be recovered from backup."""


class SaveNameConflict(SaveError):
    """Raised when a new pet's save file would replace another pet's save."""
