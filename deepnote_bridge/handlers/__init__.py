"""Output handlers, one per Deepnote output family."""

from .error import ErrorOutputHandler
from .rich import RichOutputHandler
from .stream import StreamOutputHandler

__all__ = [
    "ErrorOutputHandler",
    "RichOutputHandler",
    "StreamOutputHandler",
]
