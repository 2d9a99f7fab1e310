"""Package-wide constants shared by the codec, handlers and converter."""

# Reserved cell metadata key holding Deepnote-only block fields. Double
# underscore prefix keeps it clear of host and third-party metadata keys.
POCKET_KEY = "__deepnotePocket"

# Block fields carried in the pocket, in the order they are written.
POCKET_FIELDS = ("id", "type", "sortingKey", "executionCount")

DEFAULT_BLOCK_TYPE = "code"
MARKDOWN_BLOCK_TYPE = "markdown"

# Cell metadata key for a block's outputReference.
OUTPUT_REFERENCE_KEY = "deepnoteOutputReference"

# Host output metadata key for the execution count of an output.
EXECUTION_COUNT_KEY = "executionCount"

# Host MIME types
TEXT_PLAIN = "text/plain"
TEXT_HTML = "text/html"
APPLICATION_JSON = "application/json"
STDOUT_MIME = "application/vnd.code.notebook.stdout"
STDERR_MIME = "application/vnd.code.notebook.stderr"
ERROR_MIME = "application/vnd.code.notebook.error"

# Deepnote output types
EXECUTE_RESULT = "execute_result"
DISPLAY_DATA = "display_data"
STREAM = "stream"
ERROR = "error"

# Item hint marking a stdout item that came from a stream without a name.
UNNAMED_STREAM_HINT = "unnamed_stream"

# Cell metadata key for block keys the model does not know (e.g. blockGroup).
BLOCK_EXTRA_KEY = "deepnoteBlockExtra"

# Host output metadata key for output fields the host items cannot carry
# (unknown keys, and the text of a rich output that also has data).
OUTPUT_EXTRA_KEY = "deepnoteOutputExtra"
