"""Built-in MIME type processors.

Processors are consulted in registry order; the first whose can_handle()
accepts a MIME type wins:

    text         text/plain, text/html, text/markdown, text/latex, image/svg+xml
    image        image/* (raster, base64 on the Deepnote side)
    json         application/json and */*+json
    application  any other application/*
    generic      everything else (always last)
"""

import json
from typing import Any, List, Optional

from ..content import decode_base64, encode_base64, parse_json_safely
from ..models import HostOutputItem


def _join_lines(content: Any) -> Any:
    """Join nbformat-style multiline strings (lists of str) into one string."""
    if isinstance(content, list) and all(isinstance(part, str) for part in content):
        return "".join(content)
    return content


class TextMimeProcessor:
    """Handles text-based MIME types."""

    SUPPORTED_TYPES: List[str] = [
        "text/plain",
        "text/html",
        "text/markdown",
        "text/latex",
        "image/svg+xml",
    ]

    @property
    def name(self) -> str:
        return "text"

    def can_handle(self, mime: str) -> bool:
        return mime in self.SUPPORTED_TYPES

    def process_for_deepnote(self, content: Any, mime: str) -> Any:
        return content if isinstance(content, str) else str(content)

    def process_for_vscode(self, content: Any, mime: str) -> Optional[HostOutputItem]:
        content = _join_lines(content)
        return HostOutputItem.text(content if isinstance(content, str) else str(content), mime)


class ImageMimeProcessor:
    """Handles raster image MIME types.

    The Deepnote side stores images as base64 strings; the host side holds
    the raw image bytes.
    """

    @property
    def name(self) -> str:
        return "image"

    def can_handle(self, mime: str) -> bool:
        return mime.startswith("image/")

    def process_for_deepnote(self, content: Any, mime: str) -> Any:
        if isinstance(content, (bytes, bytearray, memoryview)):
            return encode_base64(bytes(content))
        # Already a base64 string or data URL
        return content

    def process_for_vscode(self, content: Any, mime: str) -> Optional[HostOutputItem]:
        content = _join_lines(content)
        if isinstance(content, str):
            try:
                return HostOutputItem(mime=mime, data=decode_base64(content))
            except ValueError:
                return HostOutputItem.text(content, mime)
        if isinstance(content, (bytes, bytearray, memoryview)):
            return HostOutputItem(mime=mime, data=bytes(content))
        return None


class JsonMimeProcessor:
    """Handles JSON MIME types (application/json and +json suffixes)."""

    @property
    def name(self) -> str:
        return "json"

    def can_handle(self, mime: str) -> bool:
        return mime == "application/json" or mime.endswith("+json")

    def process_for_deepnote(self, content: Any, mime: str) -> Any:
        if isinstance(content, str):
            return parse_json_safely(content)
        return content

    def process_for_vscode(self, content: Any, mime: str) -> Optional[HostOutputItem]:
        if isinstance(content, str):
            try:
                parsed = json.loads(content)
            except ValueError:
                return HostOutputItem.text(content, mime)
            return HostOutputItem.text(json.dumps(parsed, indent=2), mime)
        return HostOutputItem.text(json.dumps(content, indent=2), mime)


class ApplicationMimeProcessor:
    """Handles application/* MIME types other than JSON."""

    @property
    def name(self) -> str:
        return "application"

    def can_handle(self, mime: str) -> bool:
        return mime.startswith("application/")

    def process_for_deepnote(self, content: Any, mime: str) -> Any:
        if isinstance(content, str):
            return parse_json_safely(content)
        return content

    def process_for_vscode(self, content: Any, mime: str) -> Optional[HostOutputItem]:
        content = _join_lines(content)
        if isinstance(content, str):
            return HostOutputItem.text(content, mime)
        return HostOutputItem.text(json.dumps(content, indent=2), mime)


class GenericMimeProcessor:
    """Fallback processor: identity towards Deepnote, text towards the host."""

    @property
    def name(self) -> str:
        return "generic"

    def can_handle(self, mime: str) -> bool:
        return True

    def process_for_deepnote(self, content: Any, mime: str) -> Any:
        return content

    def process_for_vscode(self, content: Any, mime: str) -> Optional[HostOutputItem]:
        if content is None:
            return None
        if isinstance(content, (bytes, bytearray, memoryview)):
            return HostOutputItem(mime=mime, data=bytes(content))
        return HostOutputItem.text(str(content), mime)
