#!/usr/bin/env python3
"""deepnote_bridge developer CLI.

Inspects how a .deepnote file converts to host cells and whether it survives
a blocks -> cells -> blocks round trip. Nothing is written to disk.

Usage:
    # Show the blocks of the default notebook
    python -m deepnote_bridge inspect project.deepnote

    # Show a specific notebook
    python -m deepnote_bridge inspect project.deepnote --notebook <id>

    # Check that every block survives a round trip (exit status 1 if not)
    python -m deepnote_bridge roundtrip project.deepnote
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from .config import load_config
from .errors import DeepnoteBridgeError
from .models import DeepnoteBlock, DeepnoteNotebook, DeepnoteProject
from .serializer import DeepnoteNotebookSerializer

logger = logging.getLogger(__name__)


def _select_notebook(
    serializer: DeepnoteNotebookSerializer,
    project: DeepnoteProject,
    notebook_id: Optional[str],
) -> Optional[DeepnoteNotebook]:
    if notebook_id:
        return project.find_notebook(notebook_id)
    return serializer.find_default_notebook(project)


def _output_summary(block: DeepnoteBlock) -> str:
    if not block.outputs:
        return ""
    parts = []
    for output in block.outputs:
        if output.data:
            parts.append(f"{output.output_type}[{', '.join(output.data)}]")
        else:
            parts.append(output.output_type)
    return "\n".join(parts)


def render_blocks(notebook: DeepnoteNotebook) -> Table:
    """Render a notebook's blocks as a table."""
    table = Table(
        title=escape(f"{notebook.name} ({notebook.id})"),
        show_header=True,
        header_style="bold",
        padding=(0, 1),
    )

    table.add_column("Sorting key", style="bold", no_wrap=True)
    table.add_column("Id", style="dim", no_wrap=True)
    table.add_column("Type")
    table.add_column("Exec", justify="right")
    table.add_column("Outputs")

    for block in sorted(notebook.blocks, key=lambda b: b.sorting_key):
        table.add_row(
            Text(block.sorting_key),
            Text(block.id),
            Text(block.type),
            "" if block.execution_count is None else str(block.execution_count),
            Text(_output_summary(block)),
        )

    return table


def find_roundtrip_differences(before: List[DeepnoteBlock], after: List[DeepnoteBlock]) -> List[str]:
    """Describe blocks whose identity, ordering or output data changed."""
    differences = []
    after_by_id = {block.id: block for block in after}

    for block in before:
        converted = after_by_id.get(block.id)
        if converted is None:
            differences.append(f"{block.id}: block id was not preserved")
            continue
        if converted.type != block.type:
            differences.append(f"{block.id}: type {block.type!r} -> {converted.type!r}")
        if converted.sorting_key != block.sorting_key:
            differences.append(f"{block.id}: sorting key {block.sorting_key!r} -> {converted.sorting_key!r}")
        if converted.execution_count != block.execution_count:
            differences.append(
                f"{block.id}: execution count {block.execution_count} -> {converted.execution_count}"
            )

        original_data = [o.data or {} for o in block.outputs or []]
        converted_data = [o.data or {} for o in converted.outputs or []]
        if original_data != converted_data:
            differences.append(f"{block.id}: output data changed")

    return differences


def _cmd_inspect(args, console: Console) -> int:
    serializer = DeepnoteNotebookSerializer(config=args.config)
    project = serializer.parse_project(Path(args.file).read_bytes())

    notebook = _select_notebook(serializer, project, args.notebook)
    if notebook is None:
        console.print(f"[red]Notebook not found: {escape(str(args.notebook))}[/red]")
        return 1

    console.print(render_blocks(notebook))
    return 0


def _cmd_roundtrip(args, console: Console) -> int:
    serializer = DeepnoteNotebookSerializer(config=args.config)
    converter = serializer.get_converter()
    project = serializer.parse_project(Path(args.file).read_bytes())

    notebook = _select_notebook(serializer, project, args.notebook)
    if notebook is None:
        console.print(f"[red]Notebook not found: {escape(str(args.notebook))}[/red]")
        return 1

    cells = converter.convert_blocks_to_cells(notebook.blocks)
    blocks = converter.convert_cells_to_blocks(cells)

    differences = find_roundtrip_differences(notebook.blocks, blocks)
    if not differences:
        console.print(Text(f"{len(blocks)} blocks round-tripped unchanged", style="green"))
        return 0

    for line in differences:
        console.print(Text(line, style="yellow"))
    console.print(Text(f"{len(differences)} difference(s)", style="bold red"))
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="python -m deepnote_bridge",
        description="Inspect Deepnote <-> notebook cell conversion",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m deepnote_bridge inspect project.deepnote
  python -m deepnote_bridge roundtrip project.deepnote --notebook <id>
        """,
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        metavar="PATH",
        help="Config file (JSON or YAML); defaults to $DEEPNOTE_BRIDGE_CONFIG",
    )
    parser.add_argument(
        "--env-file",
        help="Path to .env file (default: .env)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    for name, help_text in (
        ("inspect", "Show the blocks of a notebook"),
        ("roundtrip", "Convert blocks to cells and back, report differences"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("file", help="Path to a .deepnote file")
        sub.add_argument("--notebook", metavar="ID", help="Notebook id (default: first by name)")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    console = Console()

    try:
        args.config = load_config(args.config_path, env_file=args.env_file)
        if not args.verbose:
            args.config.apply_logging()

        if args.command == "inspect":
            return _cmd_inspect(args, console)
        return _cmd_roundtrip(args, console)
    except (DeepnoteBridgeError, OSError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
