"""MIME type processors and their registry.

Example:
    from deepnote_bridge.mime import MimeTypeProcessorRegistry

    registry = MimeTypeProcessorRegistry()
    registry.process_for_deepnote(b"\\x89PNG...", "image/png")  # -> base64 str
"""

from .protocol import MimeProcessor
from .processors import (
    ApplicationMimeProcessor,
    GenericMimeProcessor,
    ImageMimeProcessor,
    JsonMimeProcessor,
    TextMimeProcessor,
)
from .registry import KNOWN_PROCESSORS, MimeTypeProcessorRegistry, create_registry

__all__ = [
    "MimeProcessor",
    "TextMimeProcessor",
    "ImageMimeProcessor",
    "JsonMimeProcessor",
    "ApplicationMimeProcessor",
    "GenericMimeProcessor",
    "KNOWN_PROCESSORS",
    "MimeTypeProcessorRegistry",
    "create_registry",
]
