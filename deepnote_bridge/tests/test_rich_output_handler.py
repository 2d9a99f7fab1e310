"""Tests for RichOutputHandler."""

import logging

import pytest

from deepnote_bridge.constants import DISPLAY_DATA, EXECUTE_RESULT
from deepnote_bridge.errors import MimeProcessingError
from deepnote_bridge.handlers import RichOutputHandler
from deepnote_bridge.mime import MimeTypeProcessorRegistry
from deepnote_bridge.models import DeepnoteOutput, HostOutput, HostOutputItem


class FailingProcessor:
    """Processor that fails in both directions for one MIME type."""

    def __init__(self, mime="application/x-broken"):
        self._mime = mime

    @property
    def name(self):
        return "failing"

    def can_handle(self, mime):
        return mime == self._mime

    def process_for_deepnote(self, content, mime):
        raise MimeProcessingError(self.name, mime, "cannot transform")

    def process_for_vscode(self, content, mime):
        raise MimeProcessingError(self.name, mime, "cannot transform")


class DroppingProcessor:
    """Processor that declines to represent its content on the host."""

    @property
    def name(self):
        return "dropping"

    def can_handle(self, mime):
        return mime == "application/x-hidden"

    def process_for_deepnote(self, content, mime):
        return content

    def process_for_vscode(self, content, mime):
        return None


@pytest.fixture
def handler():
    return RichOutputHandler()


def registry_with(*processors):
    registry = MimeTypeProcessorRegistry()
    for processor in processors:
        registry.register(processor)
    return registry


class TestConvertToDeepnote:
    """Tests for convert_to_deepnote()."""

    def test_text_output_is_display_data(self, handler):
        output = HostOutput(items=[HostOutputItem.text("hello")])

        result = handler.convert_to_deepnote(output)

        assert result.output_type == DISPLAY_DATA
        assert result.data == {"text/plain": "hello"}
        assert result.execution_count is None

    def test_execution_count_makes_execute_result(self, handler):
        output = HostOutput(items=[HostOutputItem.text("42")], metadata={"executionCount": 3})

        result = handler.convert_to_deepnote(output)

        assert result.output_type == EXECUTE_RESULT
        assert result.execution_count == 3
        assert result.data == {"text/plain": "42"}

    def test_stream_items_are_skipped(self, handler):
        output = HostOutput(items=[HostOutputItem.stdout("log line"), HostOutputItem.text("value")])

        result = handler.convert_to_deepnote(output)

        assert result.output_type == DISPLAY_DATA
        assert result.data == {"text/plain": "value"}

    def test_error_items_are_skipped(self, handler):
        output = HostOutput(items=[
            HostOutputItem.error({"name": "E", "message": "m"}),
            HostOutputItem.text("<p>x</p>", "text/html"),
        ])

        result = handler.convert_to_deepnote(output)

        assert result.data == {"text/html": "<p>x</p>"}

    def test_no_items_gives_empty_execute_result(self, handler):
        result = handler.convert_to_deepnote(HostOutput())

        assert result.output_type == EXECUTE_RESULT
        assert result.data == {}
        assert result.to_dict() == {"output_type": "execute_result", "data": {}}

    def test_only_stream_items_gives_empty_execute_result(self, handler):
        result = handler.convert_to_deepnote(HostOutput(items=[HostOutputItem.stderr("warn")]))

        assert result.output_type == EXECUTE_RESULT
        assert result.data == {}

    def test_multiple_mime_types(self, handler):
        output = HostOutput(items=[
            HostOutputItem.text("   a\n0  1", "text/plain"),
            HostOutputItem.text("<table></table>", "text/html"),
            HostOutputItem("image/png", b"\x89PNG"),
            HostOutputItem.text('{"x": 1}', "application/json"),
        ])

        result = handler.convert_to_deepnote(output)

        assert result.data == {
            "text/plain": "   a\n0  1",
            "text/html": "<table></table>",
            "image/png": "iVBORw==",
            "application/json": {"x": 1},
        }

    def test_undecodable_item_is_skipped(self, handler, caplog):
        output = HostOutput(items=[
            HostOutputItem("text/html", b"\xff\xfe"),
            HostOutputItem.text("fine"),
        ])

        with caplog.at_level(logging.WARNING, logger="deepnote_bridge.handlers.rich"):
            result = handler.convert_to_deepnote(output)

        assert result.data == {"text/plain": "fine"}
        assert "text/html" in caplog.text

    def test_all_items_undecodable(self, handler):
        output = HostOutput(items=[HostOutputItem("text/plain", b"\xff")])

        result = handler.convert_to_deepnote(output)

        assert result.output_type == EXECUTE_RESULT
        assert result.data == {}

    def test_processor_failure_keeps_raw_content(self):
        handler = RichOutputHandler(registry=registry_with(FailingProcessor()))
        output = HostOutput(items=[
            HostOutputItem.text("raw payload", "application/x-broken"),
            HostOutputItem.text("ok"),
        ])

        result = handler.convert_to_deepnote(output)

        assert result.data == {"application/x-broken": "raw payload", "text/plain": "ok"}
        assert result.output_type == DISPLAY_DATA

    def test_does_not_mutate_input(self, handler):
        item = HostOutputItem.text("x")
        output = HostOutput(items=[item], metadata={"executionCount": 1})

        handler.convert_to_deepnote(output)

        assert output.items == [item]
        assert output.metadata == {"executionCount": 1}


class TestConvertToVscode:
    """Tests for convert_to_vscode()."""

    def test_items_follow_data_order(self, handler):
        output = DeepnoteOutput(
            output_type=EXECUTE_RESULT,
            data={"text/html": "<b>1</b>", "text/plain": "1"},
        )

        items = handler.convert_to_vscode(output)

        assert [item.mime for item in items] == ["text/html", "text/plain"]
        assert items[0].data == b"<b>1</b>"

    def test_image_is_decoded_to_bytes(self, handler):
        output = DeepnoteOutput(output_type=DISPLAY_DATA, data={"image/png": "iVBORw=="})

        items = handler.convert_to_vscode(output)

        assert items == [HostOutputItem("image/png", b"\x89PNG")]

    def test_json_is_pretty_printed(self, handler):
        output = DeepnoteOutput(output_type=DISPLAY_DATA, data={"application/json": {"a": 1}})

        (item,) = handler.convert_to_vscode(output)

        assert item.data == b'{\n  "a": 1\n}'

    def test_text_fallback_without_data(self, handler):
        output = DeepnoteOutput(output_type=EXECUTE_RESULT, text="fallback")

        assert handler.convert_to_vscode(output) == [HostOutputItem.text("fallback")]

    def test_text_fallback_with_empty_data(self, handler):
        output = DeepnoteOutput(output_type=EXECUTE_RESULT, data={}, text="fallback")

        assert handler.convert_to_vscode(output) == [HostOutputItem.text("fallback")]

    def test_no_data_no_text(self, handler):
        assert handler.convert_to_vscode(DeepnoteOutput(output_type=EXECUTE_RESULT, data={})) == []

    def test_unrepresentable_entry_is_omitted(self, handler):
        output = DeepnoteOutput(
            output_type=DISPLAY_DATA,
            data={"x-unknown/thing": None, "text/plain": "shown"},
        )

        items = handler.convert_to_vscode(output)

        assert items == [HostOutputItem.text("shown")]

    def test_processor_returning_none_is_omitted(self):
        handler = RichOutputHandler(registry=registry_with(DroppingProcessor()))
        output = DeepnoteOutput(
            output_type=DISPLAY_DATA,
            data={"application/x-hidden": "secret", "text/plain": "visible"},
        )

        assert handler.convert_to_vscode(output) == [HostOutputItem.text("visible")]

    def test_processor_failure_skips_only_that_entry(self, caplog):
        handler = RichOutputHandler(registry=registry_with(FailingProcessor()))
        output = DeepnoteOutput(
            output_type=DISPLAY_DATA,
            data={"application/x-broken": "payload", "text/plain": "visible"},
        )

        with caplog.at_level(logging.WARNING, logger="deepnote_bridge.handlers.rich"):
            items = handler.convert_to_vscode(output)

        assert items == [HostOutputItem.text("visible")]
        assert "application/x-broken" in caplog.text


class TestRoundTrip:
    """Host -> Deepnote -> host conversions."""

    def test_text_and_html_survive(self, handler):
        original = HostOutput(items=[
            HostOutputItem.text("plain"),
            HostOutputItem.text("<i>html</i>", "text/html"),
        ])

        items = handler.convert_to_vscode(handler.convert_to_deepnote(original))

        assert items == original.items

    def test_image_bytes_survive(self, handler):
        png = b"\x89PNG\r\n\x1a\n" + bytes(range(256))
        original = HostOutput(items=[HostOutputItem("image/png", png)])

        items = handler.convert_to_vscode(handler.convert_to_deepnote(original))

        assert items == [HostOutputItem("image/png", png)]
