"""Registry mapping MIME types to processors.

The registry is the single extension point for new renderable content kinds:
register a processor and both conversion directions pick it up without
touching the output handlers.

Usage:
    from deepnote_bridge.mime import create_registry

    registry = create_registry()
    value = registry.process_for_deepnote('{"a": 1}', "application/json")
    item = registry.process_for_vscode(value, "application/json")

    # Custom processors are consulted before the built-ins
    registry.register(CsvProcessor())

    # Or insert ahead of a specific built-in
    registry.register(PlotlyProcessor(), before="json")
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Type

from ..models import HostOutputItem
from ..trace import trace as _trace_write
from .processors import (
    ApplicationMimeProcessor,
    GenericMimeProcessor,
    ImageMimeProcessor,
    JsonMimeProcessor,
    TextMimeProcessor,
)
from .protocol import MimeProcessor

if TYPE_CHECKING:
    from ..config import BridgeConfig

logger = logging.getLogger(__name__)


def _trace(msg: str) -> None:
    _trace_write("MimeRegistry", msg)


# Built-in processors in lookup order. The generic fallback is not listed:
# the registry always keeps it last.
KNOWN_PROCESSORS: Dict[str, Type] = {
    "text": TextMimeProcessor,
    "image": ImageMimeProcessor,
    "json": JsonMimeProcessor,
    "application": ApplicationMimeProcessor,
}

FALLBACK_PROCESSOR_NAME = "generic"


class MimeTypeProcessorRegistry:
    """Ordered lookup table from MIME type to processor.

    Lookup walks the processors in order and returns the first one whose
    can_handle() accepts the MIME type. The generic fallback sits at the
    end and accepts everything, so lookup never fails.

    The registry is read-only once handlers start converting; register()
    and unregister() are meant for setup time.
    """

    def __init__(self, processors: Optional[List[MimeProcessor]] = None):
        """Initialize the registry.

        Args:
            processors: Processors to consult before the fallback. Defaults
                to all built-in processors.
        """
        if processors is None:
            processors = [cls() for cls in KNOWN_PROCESSORS.values()]
        self._processors: List[MimeProcessor] = list(processors)
        self._fallback: MimeProcessor = GenericMimeProcessor()

    def register(self, processor: MimeProcessor, before: Optional[str] = None) -> None:
        """Register a processor.

        Args:
            processor: Processor implementing the MimeProcessor protocol.
            before: Name of a registered processor to insert ahead of. When
                omitted, the processor goes ahead of all others.

        Raises:
            TypeError: If processor does not implement MimeProcessor.
            ValueError: If the name is already registered or `before` is unknown.
        """
        if not isinstance(processor, MimeProcessor):
            raise TypeError(f"{type(processor).__name__} does not implement MimeProcessor")
        if processor.name == FALLBACK_PROCESSOR_NAME or self._index_of(processor.name) is not None:
            raise ValueError(f"MIME processor '{processor.name}' is already registered")

        if before is None:
            index = 0
        else:
            index = self._index_of(before)
            if index is None:
                raise ValueError(f"Unknown MIME processor '{before}'")

        self._processors.insert(index, processor)
        _trace(f"register: {processor.name} at position {index}")

    def unregister(self, name: str) -> bool:
        """Remove a processor by name.

        The generic fallback cannot be removed.

        Returns:
            True if a processor was removed.
        """
        index = self._index_of(name)
        if index is None:
            return False
        del self._processors[index]
        _trace(f"unregister: {name}")
        return True

    def list_processors(self) -> List[str]:
        """Names of all processors in lookup order, fallback included."""
        return [p.name for p in self._processors] + [self._fallback.name]

    def get_processor(self, mime: str) -> MimeProcessor:
        """Return the processor responsible for a MIME type."""
        for processor in self._processors:
            if processor.can_handle(mime):
                return processor
        return self._fallback

    def process_for_deepnote(self, content: Any, mime: str) -> Any:
        """Transform decoded host content for the Deepnote data mapping."""
        processor = self.get_processor(mime)
        _trace(f"process_for_deepnote: {mime} -> {processor.name}")
        return processor.process_for_deepnote(content, mime)

    def process_for_vscode(self, content: Any, mime: str) -> Optional[HostOutputItem]:
        """Transform Deepnote content into a host item, or None to skip it."""
        processor = self.get_processor(mime)
        _trace(f"process_for_vscode: {mime} -> {processor.name}")
        return processor.process_for_vscode(content, mime)

    def _index_of(self, name: str) -> Optional[int]:
        for i, processor in enumerate(self._processors):
            if processor.name == name:
                return i
        return None


def create_registry(config: Optional["BridgeConfig"] = None) -> MimeTypeProcessorRegistry:
    """Create a registry with the built-in processors.

    Args:
        config: Optional configuration; processors named in
            config.disabled_processors are left out.

    Returns:
        A ready-to-use MimeTypeProcessorRegistry.
    """
    disabled = set(config.disabled_processors) if config else set()

    if FALLBACK_PROCESSOR_NAME in disabled:
        logger.warning("The '%s' MIME processor cannot be disabled", FALLBACK_PROCESSOR_NAME)

    unknown = disabled - set(KNOWN_PROCESSORS) - {FALLBACK_PROCESSOR_NAME}
    if unknown:
        logger.warning("Ignoring unknown MIME processors in config: %s", ", ".join(sorted(unknown)))

    processors = [cls() for name, cls in KNOWN_PROCESSORS.items() if name not in disabled]
    return MimeTypeProcessorRegistry(processors)
