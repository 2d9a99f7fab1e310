"""Error output conversion.

The host represents an error as a single item whose payload is a JSON object
with name/message/stack. Jupyter-style fields (ename, evalue, traceback) are
stored alongside so a Deepnote error survives the round trip; the traceback
is additionally encoded into the stack between delimiter lines in case the
extra fields are stripped by the host.
"""

import logging
import re
from typing import Any, Dict, List

from ..constants import ERROR
from ..content import decode_content, parse_json_safely
from ..errors import ContentDecodeError
from ..models import DeepnoteOutput, HostOutputItem

logger = logging.getLogger(__name__)

TRACEBACK_START = "__TRACEBACK_START__"
TRACEBACK_LINE = "__TRACEBACK_LINE__"
TRACEBACK_END = "__TRACEBACK_END__"

_TRACEBACK_PATTERN = re.compile(
    rf"{TRACEBACK_START}\n(.*?)\n{TRACEBACK_END}",
    re.DOTALL,
)


def _traceback_from_stack(stack: str) -> List[str]:
    """Recover traceback lines from a host error stack."""
    if TRACEBACK_START in stack:
        match = _TRACEBACK_PATTERN.search(stack)
        if not match:
            return []
        return match.group(1).split(f"\n{TRACEBACK_LINE}\n")
    # Plain stack: first line is "Name: message"
    return stack.split("\n")[1:]


class ErrorOutputHandler:
    """Converts error outputs between host and Deepnote formats."""

    def convert_to_deepnote(self, error_item: HostOutputItem) -> DeepnoteOutput:
        """Convert a host error item to a Deepnote error output."""
        deepnote_output = DeepnoteOutput(output_type=ERROR)

        try:
            error_text = decode_content(error_item.data, error_item.mime)
        except ContentDecodeError as e:
            logger.warning("Undecodable error output: %s", e)
            error_text = bytes(error_item.data).decode("utf-8", errors="replace")

        error_data = parse_json_safely(error_text)

        if isinstance(error_data, dict):
            deepnote_output.ename = error_data.get("ename") or error_data.get("name") or "Error"
            deepnote_output.evalue = error_data.get("evalue") or error_data.get("message") or ""

            traceback = error_data.get("traceback")
            stack = error_data.get("stack")
            if isinstance(traceback, list):
                deepnote_output.traceback = traceback
            elif isinstance(stack, str):
                deepnote_output.traceback = _traceback_from_stack(stack)
            else:
                deepnote_output.traceback = []

            deepnote_output.error = error_data.get("deepnoteError")
        else:
            # Plain text, or JSON that is not an object (null, a list, a number)
            deepnote_output.ename = "Error"
            deepnote_output.evalue = error_text
            deepnote_output.traceback = [error_text]

        return deepnote_output

    def convert_to_vscode(self, output: DeepnoteOutput) -> List[HostOutputItem]:
        """Convert a Deepnote error output to a single host error item."""
        message = output.evalue or output.text or "Error"
        name = output.ename or "Error"

        payload: Dict[str, Any] = {
            "name": name,
            "message": message,
        }
        if output.ename:
            payload["ename"] = output.ename
        if output.evalue:
            payload["evalue"] = output.evalue
        if output.traceback is not None:
            payload["traceback"] = output.traceback
            if isinstance(output.traceback, list) and output.traceback:
                joined = f"\n{TRACEBACK_LINE}\n".join(output.traceback)
                payload["stack"] = (
                    f"{name}: {output.evalue or 'Unknown error'}\n"
                    f"{TRACEBACK_START}\n{joined}\n{TRACEBACK_END}"
                )
        if output.error is not None:
            payload["deepnoteError"] = output.error

        return [HostOutputItem.error(payload)]
