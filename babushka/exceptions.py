from pathlib import Path
from typing import Optional, Union


class BabushkaError(Exception):
    """Base exception for all trainer errors."""

    def __init__(
        self, message: str, original_exception: Optional[Exception] = None
    ):
        super().__init__(message)
        self.original_exception = original_exception


class StorageError(BabushkaError):
    """Base exception for durable storage errors."""

    pass


class StorageConnectionError(StorageError):
    """Raised for errors connecting to the storage database."""

    pass


class StorageParseError(StorageError):
    """Raised when persisted unit data cannot be parsed."""

    pass


class ShareDecodeError(BabushkaError):
    """Raised when a share payload is not a valid encoded unit."""

    pass


class GenerationError(BabushkaError):
    """Raised when the AI service fails to produce a usable card set."""

    pass


class CredentialMissingError(GenerationError):
    """Raised when no API key is configured for the AI service."""

    pass


class AudioError(BabushkaError):
    """Raised when speech synthesis or playback fails."""

    pass


class BuiltinUnitError(BabushkaError):
    """Raised on an attempt to modify or delete a built-in unit."""

    pass


class CardFileError(BabushkaError):
    """Raised when a card file cannot be read or validated."""

    def __init__(
        self,
        file_path: Union[str, Path],
        message: str,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(f"{file_path}: {message}", original_exception)
        self.file_path = Path(file_path)
