"""deepnote_bridge - lossless conversion between notebook cells and Deepnote blocks.

Usage:
    from deepnote_bridge import (
        DeepnoteDataConverter,
        RichOutputHandler,
        add_pocket_to_cell_metadata,
        create_block_from_pocket,
    )

    converter = DeepnoteDataConverter()
    cells = converter.convert_blocks_to_cells(blocks)
    blocks = converter.convert_cells_to_blocks(cells)
"""

from deepnote_bridge.config import BridgeConfig, load_config
from deepnote_bridge.constants import POCKET_FIELDS, POCKET_KEY
from deepnote_bridge.converter import DeepnoteDataConverter
from deepnote_bridge.errors import (
    ConfigError,
    ContentDecodeError,
    DeepnoteBridgeError,
    DeepnoteFormatError,
    InvalidProjectError,
    MimeProcessingError,
    NotebookNotFoundError,
)
from deepnote_bridge.handlers import (
    ErrorOutputHandler,
    RichOutputHandler,
    StreamOutputHandler,
)
from deepnote_bridge.mime import (
    MimeProcessor,
    MimeTypeProcessorRegistry,
    create_registry,
)
from deepnote_bridge.models import (
    CellKind,
    DeepnoteBlock,
    DeepnoteNotebook,
    DeepnoteOutput,
    DeepnoteProject,
    HostCell,
    HostNotebook,
    HostOutput,
    HostOutputItem,
)
from deepnote_bridge.output_detector import OutputTypeDetector
from deepnote_bridge.pocket import (
    add_pocket_to_cell_metadata,
    create_block_from_pocket,
    extract_pocket_from_cell_metadata,
)
from deepnote_bridge.serializer import DeepnoteNotebookSerializer

__version__ = "0.1.0"

__all__ = [
    # Config
    "BridgeConfig",
    "load_config",
    # Pocket
    "POCKET_KEY",
    "POCKET_FIELDS",
    "add_pocket_to_cell_metadata",
    "extract_pocket_from_cell_metadata",
    "create_block_from_pocket",
    # Conversion
    "DeepnoteDataConverter",
    "DeepnoteNotebookSerializer",
    "OutputTypeDetector",
    "RichOutputHandler",
    "StreamOutputHandler",
    "ErrorOutputHandler",
    "MimeProcessor",
    "MimeTypeProcessorRegistry",
    "create_registry",
    # Models
    "CellKind",
    "HostCell",
    "HostNotebook",
    "HostOutput",
    "HostOutputItem",
    "DeepnoteBlock",
    "DeepnoteNotebook",
    "DeepnoteOutput",
    "DeepnoteProject",
    # Errors
    "DeepnoteBridgeError",
    "ContentDecodeError",
    "MimeProcessingError",
    "DeepnoteFormatError",
    "InvalidProjectError",
    "NotebookNotFoundError",
    "ConfigError",
]
