"""Classification of host outputs into error, stream and rich outputs."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .constants import ERROR_MIME, STDERR_MIME, STDOUT_MIME
from .models import HostOutput, HostOutputItem


class DetectedOutputType(Enum):
    """Routing decision for a host output."""
    ERROR = "error"
    STREAM = "stream"
    RICH = "rich"


@dataclass
class OutputTypeResult:
    """Result of OutputTypeDetector.detect().

    Attributes:
        type: Which handler the output should be routed to.
        stream_mimes: MIME types of the stream items, for stream outputs.
        error_item: The error item, for error outputs.
    """

    type: DetectedOutputType
    stream_mimes: List[str] = field(default_factory=list)
    error_item: Optional[HostOutputItem] = None


class OutputTypeDetector:
    """Stateless classifier for host output MIME types."""

    STREAM_MIMES = (STDOUT_MIME, STDERR_MIME)

    def is_stream_mime(self, mime: str) -> bool:
        """Return True for MIME types designating stdout/stderr chunks."""
        return mime in self.STREAM_MIMES

    def is_error_mime(self, mime: str) -> bool:
        return mime == ERROR_MIME

    def detect(self, output: HostOutput) -> OutputTypeResult:
        """Decide which handler converts a host output.

        An error item anywhere makes the output an error; otherwise any
        stdout/stderr item makes it a stream; everything else is rich.
        """
        for item in output.items:
            if self.is_error_mime(item.mime):
                return OutputTypeResult(type=DetectedOutputType.ERROR, error_item=item)

        stream_mimes = [item.mime for item in output.items if self.is_stream_mime(item.mime)]
        if stream_mimes:
            return OutputTypeResult(type=DetectedOutputType.STREAM, stream_mimes=stream_mimes)

        return OutputTypeResult(type=DetectedOutputType.RICH)
