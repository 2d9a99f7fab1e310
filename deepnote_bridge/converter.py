"""Conversion between Deepnote blocks and host notebook cells.

Block identity travels through the host inside the cell's pocket (see
pocket.py); outputs are routed by OutputTypeDetector to the stream, error
or rich handler.

Usage:
    from deepnote_bridge.converter import DeepnoteDataConverter

    converter = DeepnoteDataConverter()
    cells = converter.convert_blocks_to_cells(notebook.blocks)
    ...  # host edits cells
    blocks = converter.convert_cells_to_blocks(cells)
"""

import logging
from typing import Any, Dict, List, Optional

from .config import BridgeConfig
from .constants import (
    BLOCK_EXTRA_KEY,
    DEFAULT_BLOCK_TYPE,
    DISPLAY_DATA,
    ERROR,
    EXECUTE_RESULT,
    EXECUTION_COUNT_KEY,
    MARKDOWN_BLOCK_TYPE,
    OUTPUT_EXTRA_KEY,
    OUTPUT_REFERENCE_KEY,
    STREAM,
)
from .handlers import ErrorOutputHandler, RichOutputHandler, StreamOutputHandler
from .mime import create_registry
from .models import CellKind, DeepnoteBlock, DeepnoteOutput, HostCell, HostOutput, HostOutputItem
from .output_detector import DetectedOutputType, OutputTypeDetector
from .pocket import add_pocket_to_cell_metadata, create_block_from_pocket, extract_pocket_from_cell_metadata

logger = logging.getLogger(__name__)


def _merge_metadata(*sources: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    merged: Dict[str, Any] = {}
    for source in sources:
        if source:
            merged.update(source)
    return merged


class DeepnoteDataConverter:
    """Converts between Deepnote blocks and host cells, outputs included."""

    def __init__(self, config: Optional[BridgeConfig] = None):
        self._config = config or BridgeConfig()
        self._output_detector = OutputTypeDetector()
        self._stream_handler = StreamOutputHandler()
        self._error_handler = ErrorOutputHandler()
        self._rich_handler = RichOutputHandler(
            registry=create_registry(self._config),
            detector=self._output_detector,
        )

    # ==================== Blocks -> Cells ====================

    def convert_blocks_to_cells(self, blocks: List[DeepnoteBlock]) -> List[HostCell]:
        """Convert blocks to host cells in sorting key order.

        The input list is not reordered.
        """
        ordered = sorted(blocks, key=lambda block: block.sorting_key)
        return [self._convert_block_to_cell(block) for block in ordered]

    def _convert_block_to_cell(self, block: DeepnoteBlock) -> HostCell:
        is_code = block.type == DEFAULT_BLOCK_TYPE

        metadata: Dict[str, Any] = dict(block.metadata or {})
        metadata["id"] = block.id
        metadata["type"] = block.type
        metadata["sortingKey"] = block.sorting_key
        if block.execution_count is not None:
            metadata["executionCount"] = block.execution_count
        if block.output_reference:
            metadata[OUTPUT_REFERENCE_KEY] = block.output_reference
        if block.extra:
            metadata[BLOCK_EXTRA_KEY] = dict(block.extra)

        cell = HostCell(
            kind=CellKind.CODE if is_code else CellKind.MARKUP,
            value=block.content,
            language_id=self._config.code_language if is_code else self._config.markup_language,
            metadata=metadata,
            outputs=[self._convert_output_to_host(output) for output in block.outputs or []],
            execution_order=block.execution_count if is_code else None,
        )
        add_pocket_to_cell_metadata(cell)
        return cell

    def _convert_output_to_host(self, output: DeepnoteOutput) -> HostOutput:
        items = self._create_output_items(output)

        execution = {EXECUTION_COUNT_KEY: output.execution_count} if output.execution_count is not None else None

        stash: Dict[str, Any] = dict(output.extra)
        if output.output_type in (EXECUTE_RESULT, DISPLAY_DATA) and output.data and output.text is not None:
            stash["text"] = output.text
        extra = {OUTPUT_EXTRA_KEY: stash} if stash else None

        metadata = _merge_metadata(output.metadata, execution, extra)

        return HostOutput(items=items, metadata=metadata or None)

    def _create_output_items(self, output: DeepnoteOutput) -> List[HostOutputItem]:
        if output.output_type == STREAM:
            return self._stream_handler.convert_to_vscode(output)
        if output.output_type == ERROR:
            return self._error_handler.convert_to_vscode(output)
        if output.output_type in (EXECUTE_RESULT, DISPLAY_DATA):
            return self._rich_handler.convert_to_vscode(output)

        logger.debug("Unknown output type '%s', using text fallback", output.output_type)
        if output.text:
            return [HostOutputItem.text(output.text)]
        return []

    # ==================== Cells -> Blocks ====================

    def convert_cells_to_blocks(self, cells: List[HostCell]) -> List[DeepnoteBlock]:
        """Convert host cells back to blocks.

        Ids and sorting keys missing from a cell's pocket are generated from
        the cell's position.
        """
        return [self._convert_cell_to_block(cell, index) for index, cell in enumerate(cells)]

    def _convert_cell_to_block(self, cell: HostCell, index: int) -> DeepnoteBlock:
        block = create_block_from_pocket(cell, index, content=cell.value)

        pocket = extract_pocket_from_cell_metadata(cell)
        stored = pocket if isinstance(pocket, dict) else {}

        if cell.kind is CellKind.MARKUP and not stored.get("type"):
            block.type = MARKDOWN_BLOCK_TYPE

        if cell.kind is CellKind.CODE and block.execution_count is None:
            block.execution_count = cell.execution_order

        if block.metadata and OUTPUT_REFERENCE_KEY in block.metadata:
            block.output_reference = block.metadata.pop(OUTPUT_REFERENCE_KEY)

        if block.metadata and BLOCK_EXTRA_KEY in block.metadata:
            extra = block.metadata.pop(BLOCK_EXTRA_KEY)
            if isinstance(extra, dict):
                block.extra = dict(extra)
            else:
                logger.debug("Ignoring non-mapping %s of type %s", BLOCK_EXTRA_KEY, type(extra).__name__)

        if cell.outputs:
            block.outputs = [self._convert_output_to_deepnote(output) for output in cell.outputs]

        return block

    def _convert_output_to_deepnote(self, output: HostOutput) -> DeepnoteOutput:
        detection = self._output_detector.detect(output)

        if detection.type is DetectedOutputType.ERROR:
            deepnote_output = self._error_handler.convert_to_deepnote(detection.error_item)
        elif detection.type is DetectedOutputType.STREAM:
            dropped = [item.mime for item in output.items if not self._output_detector.is_stream_mime(item.mime)]
            if dropped:
                logger.warning("Stream output also carries %s; those items are dropped", ", ".join(dropped))
            deepnote_output = self._stream_handler.convert_to_deepnote(output)
        else:
            deepnote_output = self._rich_handler.convert_to_deepnote(output)

        if output.metadata:
            if EXECUTION_COUNT_KEY in output.metadata:
                deepnote_output.execution_count = output.metadata[EXECUTION_COUNT_KEY]

            stash = output.metadata.get(OUTPUT_EXTRA_KEY)
            if isinstance(stash, dict):
                stash = dict(stash)
                if "text" in stash:
                    deepnote_output.text = stash.pop("text")
                deepnote_output.extra.update(stash)
            elif stash is not None:
                logger.debug("Ignoring non-mapping %s of type %s", OUTPUT_EXTRA_KEY, type(stash).__name__)

            reserved = (EXECUTION_COUNT_KEY, OUTPUT_EXTRA_KEY)
            extra = {k: v for k, v in output.metadata.items() if k not in reserved}
            merged = _merge_metadata(deepnote_output.metadata, extra)
            if merged:
                deepnote_output.metadata = merged

        return deepnote_output
