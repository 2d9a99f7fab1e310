"""Pocket metadata codec and block builder.

Deepnote blocks carry fields the host cell model has no place for (stable
id, block type, sorting key, execution count). They travel through the host
inside a "pocket": a sub-mapping stored under a reserved metadata key, so
host metadata stays clean and nothing is dropped.

Lifecycle:
    block -> cell:  the fields are written to cell metadata, then
                    add_pocket_to_cell_metadata() moves them into the pocket.
    cell -> block:  create_block_from_pocket() reads the pocket, fills in
                    defaults for anything missing and strips the pocket from
                    the block's metadata.
"""

import logging
from typing import Any, Dict, Optional

from .constants import DEFAULT_BLOCK_TYPE, POCKET_FIELDS, POCKET_KEY
from .content import generate_block_id, generate_sorting_key
from .models import DeepnoteBlock, HostCell

logger = logging.getLogger(__name__)

# A pocket is a plain mapping holding any subset of POCKET_FIELDS.
Pocket = Dict[str, Any]


def add_pocket_to_cell_metadata(cell: HostCell) -> None:
    """Stash Deepnote block fields of a cell into its pocket.

    Collects id, type, sortingKey and executionCount from the top level of
    cell.metadata and from any existing pocket (top-level values win). If
    none is present the metadata is left untouched, and a cell without
    metadata keeps None. Otherwise cell.metadata is replaced by a copy in
    which the collected fields live only inside a new pocket; every other
    key is kept as-is.

    Args:
        cell: Cell whose metadata is rewritten in place.
    """
    if not cell.metadata:
        return

    src = dict(cell.metadata)
    existing = src.get(POCKET_KEY)
    previous = existing if isinstance(existing, dict) else {}

    pocket: Pocket = {}
    for key in POCKET_FIELDS:
        if key in src:
            pocket[key] = src.pop(key)
        elif key in previous:
            pocket[key] = previous[key]

    if not pocket:
        return

    src[POCKET_KEY] = pocket
    cell.metadata = src


def extract_pocket_from_cell_metadata(cell: HostCell) -> Optional[Pocket]:
    """Return the pocket stored in a cell's metadata, or None if absent.

    No validation happens here; whatever is stored is returned as-is.
    """
    if not cell.metadata:
        return None
    return cell.metadata.get(POCKET_KEY)


def _valid_string(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def _valid_execution_count(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _pocket_value(pocket: Pocket, key: str, is_valid) -> Any:
    """Return a usable pocket field, or None so the caller applies its default."""
    if key not in pocket:
        return None
    value = pocket[key]
    if not is_valid(value):
        logger.debug("Ignoring malformed pocket field %s=%r", key, value)
        return None
    return value


def create_block_from_pocket(cell: HostCell, position: int, content: str = "") -> DeepnoteBlock:
    """Build a Deepnote block for a cell.

    Each field comes from the pocket when present and well-formed, else:
    a fresh random id, type "code", sorting key "a<position>", and no
    execution count. The block's metadata is a copy of the cell's metadata
    without the pocket key; the cell itself is not modified.

    Args:
        cell: Source cell.
        position: Zero-based index of the cell in its notebook.
        content: Source text for the block.

    Returns:
        The assembled block, with outputs left unset.
    """
    pocket = extract_pocket_from_cell_metadata(cell)
    if pocket is not None and not isinstance(pocket, dict):
        logger.debug("Ignoring non-mapping pocket of type %s", type(pocket).__name__)
        pocket = None
    pocket = pocket or {}

    metadata: Optional[Dict[str, Any]] = None
    if cell.metadata is not None:
        metadata = {k: v for k, v in cell.metadata.items() if k != POCKET_KEY}

    return DeepnoteBlock(
        id=_pocket_value(pocket, "id", _valid_string) or generate_block_id(),
        type=_pocket_value(pocket, "type", _valid_string) or DEFAULT_BLOCK_TYPE,
        sorting_key=_pocket_value(pocket, "sortingKey", _valid_string) or generate_sorting_key(position),
        execution_count=_pocket_value(pocket, "executionCount", _valid_execution_count),
        content=content,
        metadata=metadata,
    )
