"""Tests for the pocket metadata codec and block builder."""

import re

import pytest

from deepnote_bridge.constants import POCKET_KEY
from deepnote_bridge.models import CellKind, HostCell
from deepnote_bridge.pocket import (
    add_pocket_to_cell_metadata,
    create_block_from_pocket,
    extract_pocket_from_cell_metadata,
)

HEX_ID = re.compile(r"^[0-9a-f]{32}$")


def make_cell(metadata=None):
    return HostCell(kind=CellKind.CODE, value='print("hello")', metadata=metadata)


class TestAddPocketToCellMetadata:
    """Tests for add_pocket_to_cell_metadata()."""

    def test_adds_pocket_with_deepnote_fields(self):
        cell = make_cell({
            "id": "block-123",
            "type": "code",
            "sortingKey": "a0",
            "executionCount": 5,
            "other": "value",
        })

        add_pocket_to_cell_metadata(cell)

        assert cell.metadata[POCKET_KEY] == {
            "id": "block-123",
            "type": "code",
            "sortingKey": "a0",
            "executionCount": 5,
        }
        assert cell.metadata["other"] == "value"

    def test_moves_fields_out_of_top_level(self):
        cell = make_cell({"id": "block-123", "sortingKey": "a0", "other": "value"})

        add_pocket_to_cell_metadata(cell)

        assert set(cell.metadata) == {"other", POCKET_KEY}

    def test_no_pocket_without_deepnote_fields(self):
        cell = make_cell({"other": "value"})

        add_pocket_to_cell_metadata(cell)

        assert cell.metadata == {"other": "value"}
        assert POCKET_KEY not in cell.metadata

    def test_cell_without_metadata_stays_without(self):
        cell = make_cell()

        add_pocket_to_cell_metadata(cell)

        assert cell.metadata is None

    def test_partial_fields(self):
        cell = make_cell({"id": "block-123", "type": "code"})

        add_pocket_to_cell_metadata(cell)

        assert cell.metadata[POCKET_KEY] == {"id": "block-123", "type": "code"}

    def test_preserves_nested_sibling_metadata(self):
        slideshow = {"slide_type": "slide", "extra": {"nested": [1, 2]}}
        cell = make_cell({"executionCount": 0, "slideshow": slideshow})

        add_pocket_to_cell_metadata(cell)

        assert cell.metadata["slideshow"] == {"slide_type": "slide", "extra": {"nested": [1, 2]}}
        assert cell.metadata[POCKET_KEY] == {"executionCount": 0}

    def test_existing_pocket_is_replaced_not_mutated(self):
        old_pocket = {"id": "block-123", "sortingKey": "a0"}
        cell = make_cell({POCKET_KEY: old_pocket, "sortingKey": "b5"})

        add_pocket_to_cell_metadata(cell)

        assert cell.metadata[POCKET_KEY] == {"id": "block-123", "sortingKey": "b5"}
        assert cell.metadata[POCKET_KEY] is not old_pocket
        assert old_pocket == {"id": "block-123", "sortingKey": "a0"}

    def test_round_trip_with_extract(self):
        fields = {"id": "abc", "executionCount": 3}
        cell = make_cell(dict(fields, custom=True))

        add_pocket_to_cell_metadata(cell)

        assert extract_pocket_from_cell_metadata(cell) == fields


class TestExtractPocketFromCellMetadata:
    """Tests for extract_pocket_from_cell_metadata()."""

    def test_extracts_pocket(self):
        cell = make_cell({
            POCKET_KEY: {"id": "block-123", "type": "code", "sortingKey": "a0", "executionCount": 5},
            "other": "value",
        })

        assert extract_pocket_from_cell_metadata(cell) == {
            "id": "block-123",
            "type": "code",
            "sortingKey": "a0",
            "executionCount": 5,
        }

    def test_returns_none_without_pocket(self):
        assert extract_pocket_from_cell_metadata(make_cell({"other": "value"})) is None

    def test_returns_none_without_metadata(self):
        assert extract_pocket_from_cell_metadata(make_cell()) is None

    def test_does_not_validate(self):
        cell = make_cell({POCKET_KEY: "not a mapping"})

        assert extract_pocket_from_cell_metadata(cell) == "not a mapping"

    def test_does_not_mutate(self):
        metadata = {POCKET_KEY: {"id": "x"}, "other": 1}
        cell = make_cell(metadata)

        extract_pocket_from_cell_metadata(cell)

        assert cell.metadata == {POCKET_KEY: {"id": "x"}, "other": 1}


class TestCreateBlockFromPocket:
    """Tests for create_block_from_pocket()."""

    def test_block_from_full_pocket(self):
        cell = make_cell({
            POCKET_KEY: {"id": "block-123", "type": "code", "sortingKey": "a0", "executionCount": 5},
            "custom": "value",
        })

        block = create_block_from_pocket(cell, 0)

        assert block.id == "block-123"
        assert block.type == "code"
        assert block.sorting_key == "a0"
        assert block.execution_count == 5
        assert block.content == ""
        assert block.outputs is None

    def test_defaults_without_pocket(self):
        block = create_block_from_pocket(make_cell(), 5)

        assert HEX_ID.match(block.id)
        assert block.type == "code"
        assert block.sorting_key == "a5"
        assert block.execution_count is None
        assert "executionCount" not in block.to_dict()

    def test_generated_ids_differ(self):
        first = create_block_from_pocket(make_cell(), 0)
        second = create_block_from_pocket(make_cell(), 0)

        assert first.id != second.id

    def test_partial_pocket_uses_defaults(self):
        cell = make_cell({POCKET_KEY: {"id": "block-123"}})

        block = create_block_from_pocket(cell, 3)

        assert block.id == "block-123"
        assert block.type == "code"
        assert block.sorting_key == "a3"
        assert block.execution_count is None

    def test_partial_pocket_without_id_generates_one(self):
        cell = make_cell({POCKET_KEY: {"type": "markdown", "sortingKey": "c7"}})

        block = create_block_from_pocket(cell, 1)

        assert HEX_ID.match(block.id)
        assert block.type == "markdown"
        assert block.sorting_key == "c7"

    def test_removes_pocket_from_block_metadata(self):
        cell = make_cell({POCKET_KEY: {"id": "block-123", "type": "code"}, "custom": "value"})

        block = create_block_from_pocket(cell, 0)

        assert POCKET_KEY not in block.metadata
        assert block.metadata["custom"] == "value"

    def test_preserves_other_metadata(self):
        cell = make_cell({
            POCKET_KEY: {"id": "block-123", "type": "code"},
            "custom": "value",
            "slideshow": {"slide_type": "slide"},
        })

        block = create_block_from_pocket(cell, 0)

        assert block.metadata == {"custom": "value", "slideshow": {"slide_type": "slide"}}

    def test_does_not_modify_cell(self):
        cell = make_cell({POCKET_KEY: {"id": "block-123"}, "custom": "value"})

        create_block_from_pocket(cell, 0)

        assert cell.metadata == {POCKET_KEY: {"id": "block-123"}, "custom": "value"}

    def test_metadata_none_when_cell_has_none(self):
        assert create_block_from_pocket(make_cell(), 0).metadata is None

    def test_content_argument(self):
        block = create_block_from_pocket(make_cell(), 0, content="x = 1")

        assert block.content == "x = 1"

    def test_execution_count_zero_is_kept(self):
        cell = make_cell({POCKET_KEY: {"executionCount": 0}})

        assert create_block_from_pocket(cell, 0).execution_count == 0

    def test_non_mapping_pocket_treated_as_absent(self):
        cell = make_cell({POCKET_KEY: ["garbage"], "custom": 1})

        block = create_block_from_pocket(cell, 2)

        assert HEX_ID.match(block.id)
        assert block.sorting_key == "a2"
        assert block.metadata == {"custom": 1}

    @pytest.mark.parametrize("pocket", [
        {"id": 42},
        {"id": ""},
        {"type": None},
        {"sortingKey": 7},
        {"executionCount": "5"},
        {"executionCount": -1},
        {"executionCount": True},
    ])
    def test_malformed_fields_fall_back_to_defaults(self, pocket):
        cell = make_cell({POCKET_KEY: pocket})

        block = create_block_from_pocket(cell, 4)

        assert HEX_ID.match(block.id)
        assert block.type == "code"
        assert block.sorting_key == "a4"
        assert block.execution_count is None
