"""Stream output conversion (stdout/stderr)."""

import logging
from typing import List

from ..constants import STDERR_MIME, STDOUT_MIME, STREAM, UNNAMED_STREAM_HINT
from ..content import decode_content
from ..errors import ContentDecodeError
from ..models import DeepnoteOutput, HostOutput, HostOutputItem

logger = logging.getLogger(__name__)


class StreamOutputHandler:
    """Converts stream outputs between host and Deepnote formats."""

    STREAM_MIMES = (STDOUT_MIME, STDERR_MIME)

    def convert_to_deepnote(self, output: HostOutput) -> DeepnoteOutput:
        """Combine the stream items of a host output into one stream output.

        The stream name is only set when the items determine it: stderr wins,
        stdout is used unless the item was created from an unnamed stream.
        """
        stream_items = [item for item in output.items if item.mime in self.STREAM_MIMES]

        texts = []
        for item in stream_items:
            try:
                texts.append(decode_content(item.data, item.mime))
            except ContentDecodeError as e:
                logger.warning("Dropping undecodable stream chunk: %s", e)

        deepnote_output = DeepnoteOutput(output_type=STREAM, text="".join(texts))

        has_stderr = any(item.mime == STDERR_MIME for item in stream_items)
        has_named_stdout = any(
            item.mime == STDOUT_MIME and not item.hints.get(UNNAMED_STREAM_HINT)
            for item in stream_items
        )

        if has_stderr:
            deepnote_output.name = "stderr"
        elif has_named_stdout:
            deepnote_output.name = "stdout"

        return deepnote_output

    def convert_to_vscode(self, output: DeepnoteOutput) -> List[HostOutputItem]:
        """Route a Deepnote stream output to a stdout or stderr item."""
        if not output.text:
            return []

        if output.name == "stderr":
            return [HostOutputItem.stderr(output.text)]
        if output.name == "stdout":
            return [HostOutputItem.stdout(output.text)]

        # Unnamed streams display as stdout but remember they had no name
        item = HostOutputItem.stdout(output.text)
        item.hints[UNNAMED_STREAM_HINT] = True
        return [item]
