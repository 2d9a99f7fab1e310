"""Custom exceptions for deepnote_bridge.

Conversion of individual output items never lets these escape: the rich
output handler catches them per item and degrades. Only the serializer and
the config loader raise them to callers.
"""

from typing import List, Optional


class DeepnoteBridgeError(Exception):
    """Base exception for deepnote_bridge errors."""

    pass


class ContentDecodeError(DeepnoteBridgeError):
    """Raised when a host output item's payload cannot be decoded."""

    def __init__(self, mime: str, reason: Optional[str] = None):
        self.mime = mime
        self.reason = reason

        message = f"Cannot decode output item with mime type {mime}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class MimeProcessingError(DeepnoteBridgeError):
    """Raised by a MIME processor that cannot transform its content."""

    def __init__(
        self,
        processor: str,
        mime: str,
        original_error: Optional[str] = None,
    ):
        self.processor = processor
        self.mime = mime
        self.original_error = original_error

        message = f"Processor '{processor}' failed for {mime}"
        if original_error:
            message += f"\nOriginal error: {original_error}"
        super().__init__(message)


class DeepnoteFormatError(DeepnoteBridgeError):
    """Base exception for malformed Deepnote project content."""

    pass


class InvalidProjectError(DeepnoteFormatError):
    """Raised when a Deepnote file has no usable project structure."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid Deepnote file: {reason}")


class NotebookNotFoundError(DeepnoteFormatError):
    """Raised when the requested notebook is not part of the project."""

    def __init__(
        self,
        notebook_id: Optional[str],
        available: Optional[List[str]] = None,
    ):
        self.notebook_id = notebook_id
        self.available = available or []

        if notebook_id:
            message = f"Notebook with ID {notebook_id} not found in project"
        else:
            message = "No notebook selected or found"
        if self.available:
            message += f"\nAvailable: {', '.join(self.available)}"
        super().__init__(message)


class ConfigError(DeepnoteBridgeError):
    """Raised when a configuration file exists but cannot be used."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid configuration in {path}: {reason}")
