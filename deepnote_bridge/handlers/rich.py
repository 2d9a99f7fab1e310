"""Rich output conversion (display_data / execute_result).

Each MIME item of a host output goes through an ordered fallback chain:

    decode -> process -> raw decoded content -> skip

A failing item never aborts the conversion of its siblings.
"""

import logging
from typing import Any, List, Optional

from ..constants import DISPLAY_DATA, EXECUTE_RESULT, EXECUTION_COUNT_KEY
from ..content import decode_content
from ..errors import ContentDecodeError
from ..mime import MimeTypeProcessorRegistry
from ..models import DeepnoteOutput, HostOutput, HostOutputItem
from ..output_detector import OutputTypeDetector
from ..trace import trace as _trace_write

logger = logging.getLogger(__name__)

# Marker returned by the fallback chain for items that must be dropped.
_SKIP = object()


def _trace(msg: str, include_traceback: bool = False) -> None:
    _trace_write("RichOutputHandler", msg, include_traceback=include_traceback)


class RichOutputHandler:
    """Converts rich outputs between host and Deepnote formats."""

    def __init__(
        self,
        registry: Optional[MimeTypeProcessorRegistry] = None,
        detector: Optional[OutputTypeDetector] = None,
    ):
        self._mime_registry = registry if registry is not None else MimeTypeProcessorRegistry()
        self._output_detector = detector if detector is not None else OutputTypeDetector()

    def convert_to_deepnote(self, output: HostOutput) -> DeepnoteOutput:
        """Convert a host rich output to a Deepnote output.

        Stream and error items are skipped; they belong to the stream and
        error handlers. When no item could be placed the result is an
        execute_result with an empty (but present) data mapping.

        Args:
            output: Host output to convert.

        Returns:
            display_data, or execute_result when the output carries an
            execution count.
        """
        deepnote_output = DeepnoteOutput(output_type=EXECUTE_RESULT, data={})

        execution_count = (output.metadata or {}).get(EXECUTION_COUNT_KEY)
        if execution_count is not None:
            deepnote_output.execution_count = execution_count

        has_display_data = False

        for item in output.items:
            if self._output_detector.is_stream_mime(item.mime) or self._output_detector.is_error_mime(item.mime):
                _trace(f"convert_to_deepnote: skipping {item.mime}")
                continue

            value = self._convert_item(item)
            if value is _SKIP:
                continue

            deepnote_output.data[item.mime] = value
            has_display_data = True

        if has_display_data:
            if deepnote_output.execution_count is not None:
                deepnote_output.output_type = EXECUTE_RESULT
            else:
                deepnote_output.output_type = DISPLAY_DATA

        return deepnote_output

    def convert_to_vscode(self, output: DeepnoteOutput) -> List[HostOutputItem]:
        """Convert a Deepnote rich output to host output items.

        Without data, falls back to a single text/plain item built from the
        output's text (or no items at all). Otherwise items follow the data
        mapping's order; entries the registry cannot represent are omitted.
        """
        if not output.data:
            return [HostOutputItem.text(output.text)] if output.text else []

        items: List[HostOutputItem] = []

        for mime, content in output.data.items():
            try:
                item = self._mime_registry.process_for_vscode(content, mime)
            except Exception as e:
                logger.warning("Failed to convert %s content for display: %s", mime, e)
                _trace(f"convert_to_vscode: {mime} failed", include_traceback=True)
                continue
            if item is None:
                _trace(f"convert_to_vscode: no host item for {mime}")
                continue
            items.append(item)

        return items

    def _convert_item(self, item: HostOutputItem) -> Any:
        """Run one host item through the fallback chain.

        Returns:
            The Deepnote value for the item, or _SKIP to drop it.
        """
        try:
            decoded = decode_content(item.data, item.mime)
        except ContentDecodeError as e:
            logger.warning("Failed to process output item with mime type %s: %s", item.mime, e)
            return _SKIP

        try:
            return self._mime_registry.process_for_deepnote(decoded, item.mime)
        except Exception as e:
            logger.debug("Processing %s failed, keeping raw content: %s", item.mime, e)
            _trace(f"convert_to_deepnote: {item.mime} degraded to raw content", include_traceback=True)
            return decoded
