"""Data models for host notebook cells and Deepnote blocks.

Host records mirror what a notebook editor keeps in memory (cells with an
open metadata mapping, outputs made of MIME-tagged byte payloads). Deepnote
records mirror the .deepnote file shape; their to_dict()/from_dict() use the
wire spelling of keys (sortingKey, executionCount, output_type) and keep
unknown keys so nothing is silently dropped on a round trip.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .constants import (
    APPLICATION_JSON,
    DEFAULT_BLOCK_TYPE,
    ERROR_MIME,
    STDERR_MIME,
    STDOUT_MIME,
    TEXT_PLAIN,
)
from .content import encode_text
from .errors import InvalidProjectError


class CellKind(Enum):
    """Kind of a host notebook cell."""
    CODE = "code"
    MARKUP = "markup"


@dataclass
class HostOutputItem:
    """A single MIME-tagged payload within a host output.

    Attributes:
        mime: MIME type of the payload.
        data: Raw payload bytes.
        hints: Round-trip markers that must not leak into output metadata.
    """

    mime: str
    data: bytes
    hints: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def text(cls, value: str, mime: str = TEXT_PLAIN) -> "HostOutputItem":
        """Create a UTF-8 text item."""
        return cls(mime=mime, data=encode_text(value))

    @classmethod
    def json(cls, value: Any, mime: str = APPLICATION_JSON) -> "HostOutputItem":
        """Create a JSON item from a serializable value."""
        return cls(mime=mime, data=encode_text(json.dumps(value)))

    @classmethod
    def stdout(cls, value: str) -> "HostOutputItem":
        return cls(mime=STDOUT_MIME, data=encode_text(value))

    @classmethod
    def stderr(cls, value: str) -> "HostOutputItem":
        return cls(mime=STDERR_MIME, data=encode_text(value))

    @classmethod
    def error(cls, payload: Dict[str, Any]) -> "HostOutputItem":
        """Create an error item from a JSON-serializable error description."""
        return cls(mime=ERROR_MIME, data=encode_text(json.dumps(payload)))


@dataclass
class HostOutput:
    """An ordered collection of output items produced by one cell output."""

    items: List[HostOutputItem] = field(default_factory=list)
    metadata: Optional[Dict[str, Any]] = None


@dataclass
class HostCell:
    """A host notebook cell.

    Attributes:
        kind: Code or markup.
        value: Source text.
        language_id: Editor language of the source.
        metadata: Open metadata mapping, or None when the cell has none.
        outputs: Outputs in display order.
        execution_order: Execution counter reported by the editor, if any.
    """

    kind: CellKind
    value: str = ""
    language_id: str = "python"
    metadata: Optional[Dict[str, Any]] = None
    outputs: List[HostOutput] = field(default_factory=list)
    execution_order: Optional[int] = None


@dataclass
class HostNotebook:
    """Cells plus notebook-level metadata, as handed to the host editor."""

    cells: List[HostCell] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)


# Keys of DeepnoteOutput that map to dataclass attributes, in wire order.
_OUTPUT_FIELDS = (
    "output_type", "name", "text", "data", "execution_count",
    "metadata", "ename", "evalue", "traceback", "error",
)


@dataclass
class DeepnoteOutput:
    """An output attached to a Deepnote block.

    Attributes:
        output_type: execute_result, display_data, stream or error.
        data: MIME type -> processed content, for rich outputs.
        text: Plain text fallback, or stream text.
        execution_count: Execution counter for execute_result outputs.
        metadata: Output metadata.
        name: Stream name (stdout/stderr) for stream outputs.
        ename: Exception name for error outputs.
        evalue: Exception value for error outputs.
        traceback: Traceback lines for error outputs.
        error: Deepnote-specific error payload.
        extra: Unknown keys, preserved verbatim.
    """

    output_type: str
    data: Optional[Dict[str, Any]] = None
    text: Optional[str] = None
    execution_count: Optional[int] = None
    metadata: Optional[Dict[str, Any]] = None
    name: Optional[str] = None
    ename: Optional[str] = None
    evalue: Optional[str] = None
    traceback: Optional[List[str]] = None
    error: Optional[Any] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the Deepnote wire shape, omitting unset fields."""
        result: Dict[str, Any] = {}
        for key in _OUTPUT_FIELDS:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        result.update(self.extra)
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeepnoteOutput":
        """Create from the Deepnote wire shape."""
        known = {key: data.get(key) for key in _OUTPUT_FIELDS if key != "output_type"}
        return cls(
            output_type=data.get("output_type", ""),
            extra={k: v for k, v in data.items() if k not in _OUTPUT_FIELDS},
            **known,
        )


_BLOCK_KEYS = (
    "id", "type", "sortingKey", "executionCount", "content",
    "outputs", "metadata", "outputReference",
)


@dataclass
class DeepnoteBlock:
    """The Deepnote unit of notebook content.

    Attributes:
        id: Globally unique, immutable block identity.
        sorting_key: Lexicographic ordering token.
        type: Block kind tag.
        content: Source text.
        execution_count: Execution counter, None when absent.
        outputs: Outputs, None when the block produced nothing.
        metadata: Non-pocket cell metadata, passed through verbatim.
        output_reference: Reference to externally stored outputs.
        extra: Unknown keys (e.g. blockGroup), preserved verbatim.
    """

    id: str
    sorting_key: str
    type: str = DEFAULT_BLOCK_TYPE
    content: str = ""
    execution_count: Optional[int] = None
    outputs: Optional[List[DeepnoteOutput]] = None
    metadata: Optional[Dict[str, Any]] = None
    output_reference: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the Deepnote wire shape, omitting unset optional fields."""
        result: Dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "sortingKey": self.sorting_key,
            "content": self.content,
        }
        if self.execution_count is not None:
            result["executionCount"] = self.execution_count
        if self.outputs is not None:
            result["outputs"] = [output.to_dict() for output in self.outputs]
        if self.metadata is not None:
            result["metadata"] = self.metadata
        if self.output_reference is not None:
            result["outputReference"] = self.output_reference
        result.update(self.extra)
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeepnoteBlock":
        """Create from the Deepnote wire shape."""
        outputs = data.get("outputs")
        return cls(
            id=data["id"],
            sorting_key=data.get("sortingKey", ""),
            type=data.get("type", DEFAULT_BLOCK_TYPE),
            content=data.get("content") or "",
            execution_count=data.get("executionCount"),
            outputs=[DeepnoteOutput.from_dict(o) for o in outputs] if outputs is not None else None,
            metadata=data.get("metadata"),
            output_reference=data.get("outputReference"),
            extra={k: v for k, v in data.items() if k not in _BLOCK_KEYS},
        )


_NOTEBOOK_KEYS = ("id", "name", "blocks", "executionMode", "isModule", "workingDirectory")


@dataclass
class DeepnoteNotebook:
    """A notebook inside a Deepnote project."""

    id: str
    name: str
    blocks: List[DeepnoteBlock] = field(default_factory=list)
    execution_mode: str = "block"
    is_module: bool = False
    working_directory: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "blocks": [block.to_dict() for block in self.blocks],
            "executionMode": self.execution_mode,
            "isModule": self.is_module,
        }
        if self.working_directory is not None:
            result["workingDirectory"] = self.working_directory
        result.update(self.extra)
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeepnoteNotebook":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            blocks=[DeepnoteBlock.from_dict(b) for b in data.get("blocks") or []],
            execution_mode=data.get("executionMode", "block"),
            is_module=data.get("isModule", False),
            working_directory=data.get("workingDirectory"),
            extra={k: v for k, v in data.items() if k not in _NOTEBOOK_KEYS},
        )


_PROJECT_KEYS = ("id", "name", "notebooks", "settings", "initNotebookId")


@dataclass
class DeepnoteProject:
    """A parsed .deepnote file.

    Attributes:
        id: Project id.
        name: Project name.
        notebooks: Notebooks in file order.
        version: File format version.
        settings: Project settings, passed through.
        init_notebook_id: Id of the project's init notebook, if any.
        metadata: File-level metadata (createdAt, modifiedAt, ...).
        project_extra: Unknown keys of the project mapping.
        extra: Unknown top-level keys.
    """

    id: str
    name: str
    notebooks: List[DeepnoteNotebook] = field(default_factory=list)
    version: str = "1.0"
    settings: Dict[str, Any] = field(default_factory=dict)
    init_notebook_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    project_extra: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)

    def find_notebook(self, notebook_id: str) -> Optional[DeepnoteNotebook]:
        for notebook in self.notebooks:
            if notebook.id == notebook_id:
                return notebook
        return None

    def to_dict(self) -> Dict[str, Any]:
        project: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
        }
        if self.init_notebook_id is not None:
            project["initNotebookId"] = self.init_notebook_id
        project["notebooks"] = [notebook.to_dict() for notebook in self.notebooks]
        project["settings"] = self.settings
        project.update(self.project_extra)

        result: Dict[str, Any] = {
            "metadata": self.metadata,
            "project": project,
            "version": self.version,
        }
        result.update(self.extra)
        return result

    @classmethod
    def from_dict(cls, data: Any) -> "DeepnoteProject":
        """Create from a parsed .deepnote document.

        Raises:
            InvalidProjectError: If the document has no project or notebooks.
        """
        if not isinstance(data, dict):
            raise InvalidProjectError("document is not a mapping")
        project = data.get("project")
        if not isinstance(project, dict):
            raise InvalidProjectError("no project found")
        notebooks = project.get("notebooks")
        if not isinstance(notebooks, list):
            raise InvalidProjectError("no notebooks found")

        return cls(
            id=str(project.get("id", "")),
            name=project.get("name", ""),
            notebooks=[DeepnoteNotebook.from_dict(nb) for nb in notebooks],
            version=str(data.get("version", "1.0")),
            settings=project.get("settings") or {},
            init_notebook_id=project.get("initNotebookId"),
            metadata=data.get("metadata") or {},
            project_extra={k: v for k, v in project.items() if k not in _PROJECT_KEYS},
            extra={k: v for k, v in data.items() if k not in ("metadata", "project", "version")},
        )
