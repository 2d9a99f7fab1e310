"""Protocol definition for MIME type processors.

A MIME processor transforms the content of one output item between the host
representation (decoded payload of a HostOutputItem) and the Deepnote
representation (the value stored under the MIME key of an output's data).

Usage:
    class CsvProcessor:
        name = "csv"

        def can_handle(self, mime: str) -> bool:
            return mime == "text/csv"

        def process_for_deepnote(self, content, mime):
            return content if isinstance(content, str) else str(content)

        def process_for_vscode(self, content, mime):
            return HostOutputItem.text(content, mime)

    registry.register(CsvProcessor())
"""

from typing import Any, Optional, Protocol, runtime_checkable

from ..models import HostOutputItem


@runtime_checkable
class MimeProcessor(Protocol):
    """Protocol for MIME type processors.

    Processors are stateless. Each processor:
    - Has a unique name for identification and configuration
    - Declares which MIME types it handles via can_handle()
    - Converts decoded host content to Deepnote content
    - Converts Deepnote content to a host output item
    """

    @property
    def name(self) -> str:
        """Unique identifier for this processor."""
        ...

    def can_handle(self, mime: str) -> bool:
        """Return True if this processor handles the given MIME type."""
        ...

    def process_for_deepnote(self, content: Any, mime: str) -> Any:
        """Transform decoded host content into its Deepnote representation.

        May raise; the caller degrades to the raw decoded content.

        Args:
            content: Decoded payload (text, or bytes for binary types).
            mime: MIME type of the content.

        Returns:
            Value to store under the MIME key of the output's data.
        """
        ...

    def process_for_vscode(self, content: Any, mime: str) -> Optional[HostOutputItem]:
        """Transform Deepnote content into a host output item.

        Args:
            content: Value stored under the MIME key of the output's data.
            mime: MIME type of the content.

        Returns:
            A host output item, or None if the content cannot be represented
            (the caller skips it).
        """
        ...
