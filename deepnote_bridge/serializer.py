"""In-memory (de)serialization of Deepnote project notebooks.

Turns the bytes of a .deepnote YAML document into a HostNotebook for one of
its notebooks, and writes an edited HostNotebook back into a copy of the
project. Reading and writing files is left to the caller.

Usage:
    serializer = DeepnoteNotebookSerializer()
    project = serializer.parse_project(raw_bytes)
    notebook = serializer.deserialize_notebook(raw_bytes)
    ...  # host edits notebook.cells
    new_bytes = serializer.serialize_notebook(notebook, project)
"""

import copy
import logging
from datetime import datetime, timezone
from typing import Optional, Union

import yaml

from .config import BridgeConfig
from .converter import DeepnoteDataConverter
from .errors import DeepnoteFormatError, InvalidProjectError, NotebookNotFoundError
from .models import DeepnoteNotebook, DeepnoteProject, HostNotebook

logger = logging.getLogger(__name__)


def _utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC timestamp with milliseconds."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class DeepnoteNotebookSerializer:
    """Converts between .deepnote YAML content and host notebooks."""

    def __init__(
        self,
        converter: Optional[DeepnoteDataConverter] = None,
        config: Optional[BridgeConfig] = None,
    ):
        self._converter = converter or DeepnoteDataConverter(config)

    def get_converter(self) -> DeepnoteDataConverter:
        return self._converter

    def parse_project(self, content: Union[bytes, str]) -> DeepnoteProject:
        """Parse .deepnote YAML content into a project.

        Raises:
            InvalidProjectError: If the content is not valid YAML or has no notebooks.
        """
        try:
            text = content.decode("utf-8") if isinstance(content, bytes) else content
            data = yaml.safe_load(text)
        except (UnicodeDecodeError, yaml.YAMLError) as e:
            raise InvalidProjectError(f"cannot parse YAML: {e}") from e
        return DeepnoteProject.from_dict(data)

    def deserialize_notebook(
        self,
        content: Union[bytes, str],
        notebook_id: Optional[str] = None,
    ) -> HostNotebook:
        """Convert one notebook of a .deepnote document to host cells.

        Args:
            content: Raw .deepnote YAML.
            notebook_id: Notebook to open. Defaults to find_default_notebook().

        Returns:
            Host notebook whose metadata records project and notebook identity.

        Raises:
            DeepnoteFormatError: If the document or the notebook is unusable.
        """
        logger.debug("Deserializing Deepnote notebook")
        try:
            project = self.parse_project(content)

            if not project.notebooks:
                raise InvalidProjectError("project contains no notebooks")

            if notebook_id:
                notebook = project.find_notebook(notebook_id)
            else:
                notebook = self.find_default_notebook(project)

            if notebook is None:
                raise NotebookNotFoundError(notebook_id, [nb.id for nb in project.notebooks])
        except DeepnoteFormatError as e:
            logger.error("Error deserializing Deepnote notebook: %s", e)
            raise

        cells = self._converter.convert_blocks_to_cells(notebook.blocks)
        logger.debug("Converted %d cells from notebook %s", len(cells), notebook.id)

        return HostNotebook(
            cells=cells,
            metadata={
                "deepnoteProjectId": project.id,
                "deepnoteProjectName": project.name,
                "deepnoteNotebookId": notebook.id,
                "deepnoteNotebookName": notebook.name,
                "deepnoteVersion": project.version,
                "name": notebook.name,
                "display_name": notebook.name,
            },
        )

    def serialize_notebook(
        self,
        notebook: HostNotebook,
        original: DeepnoteProject,
        notebook_id: Optional[str] = None,
    ) -> bytes:
        """Write a host notebook back into a copy of its project.

        The original project is not modified.

        Args:
            notebook: Host notebook produced by deserialize_notebook().
            original: Project the notebook was opened from.
            notebook_id: Overrides the notebook id recorded in the metadata.

        Returns:
            UTF-8 YAML of the updated project.

        Raises:
            DeepnoteFormatError: If the notebook cannot be matched to the project.
        """
        try:
            project_id = notebook.metadata.get("deepnoteProjectId")
            if project_id and project_id != original.id:
                raise InvalidProjectError(
                    f"notebook belongs to project {project_id}, not {original.id}"
                )

            target_id = notebook_id or notebook.metadata.get("deepnoteNotebookId")
            if not target_id:
                raise NotebookNotFoundError(None)

            updated = copy.deepcopy(original)
            target = updated.find_notebook(target_id)
            if target is None:
                raise NotebookNotFoundError(target_id, [nb.id for nb in updated.notebooks])
        except DeepnoteFormatError as e:
            logger.error("Error serializing Deepnote notebook: %s", e)
            raise

        target.blocks = self._converter.convert_cells_to_blocks(notebook.cells)
        updated.metadata["modifiedAt"] = _utc_timestamp()

        return yaml.safe_dump(
            updated.to_dict(),
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
            indent=2,
            width=float("inf"),
        ).encode("utf-8")

    def find_default_notebook(self, project: DeepnoteProject) -> Optional[DeepnoteNotebook]:
        """Pick the notebook to open when none is requested.

        The first notebook by name, skipping the project's init notebook
        unless it is the only one.
        """
        if not project.notebooks:
            return None

        by_name = sorted(project.notebooks, key=lambda nb: nb.name)
        without_init = [nb for nb in by_name if nb.id != project.init_notebook_id]

        return (without_init or by_name)[0]
