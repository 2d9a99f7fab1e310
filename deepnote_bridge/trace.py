"""Opt-in trace file for conversion decisions.

The MIME registry and the output handlers record which processor handled
an item, and which items were skipped or degraded, without going through
the host application's logging setup.

The trace file is named by DEEPNOTE_BRIDGE_TRACE_LOG (BridgeConfig.trace_log
is exported there by BridgeConfig.apply_logging()). Nothing is written while
the variable is unset or empty.

Usage:
    from deepnote_bridge.trace import trace

    trace("RichOutputHandler", "skipping application/vnd.code.notebook.stdout")
    trace("RichOutputHandler", "image/png degraded", include_traceback=True)
"""

import os
import traceback as _traceback_module
from datetime import datetime
from typing import List, Optional, Set

TRACE_ENV_VAR = "DEEPNOTE_BRIDGE_TRACE_LOG"

# Directories already created for trace files in this process.
_created_dirs: Set[str] = set()


def _prepare_directory(trace_path: str) -> None:
    directory = os.path.dirname(os.path.abspath(trace_path))
    if directory in _created_dirs:
        return
    os.makedirs(directory, exist_ok=True)
    _created_dirs.add(directory)


def _format_lines(component: str, msg: str, include_traceback: bool) -> List[str]:
    stamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
    prefix = f"[{stamp}] [{component}]"
    lines = [f"{prefix} {msg}\n"]
    if include_traceback:
        exc_text = _traceback_module.format_exc()
        # format_exc() outside an except block yields "NoneType: None"
        if exc_text.strip() not in ("", "NoneType: None"):
            lines.append(f"{prefix} Traceback:\n{exc_text}\n")
    return lines


def resolve_trace_path(*env_vars: str) -> Optional[str]:
    """Return the first non-empty value among the given environment variables.

    Returns:
        A trace file path, or None when tracing is off.
    """
    for name in env_vars:
        value = os.environ.get(name)
        if value:
            return value
    return None


def trace_write(
    component: str,
    msg: str,
    trace_path: Optional[str],
    *,
    include_traceback: bool = False,
) -> None:
    """Append one trace entry to trace_path.

    Missing parent directories are created. I/O errors are dropped so a
    broken trace destination cannot fail a conversion.

    Args:
        component: Tag identifying the writer (e.g. "MimeRegistry").
        msg: Message text.
        trace_path: Target file; None or empty skips the write.
        include_traceback: Append the exception currently being handled.
    """
    if not trace_path:
        return
    lines = _format_lines(component, msg, include_traceback)
    try:
        _prepare_directory(trace_path)
        with open(trace_path, "a", encoding="utf-8") as f:
            f.writelines(lines)
    except OSError:
        pass


def trace(component: str, msg: str, *, include_traceback: bool = False) -> None:
    """Write to the file named by DEEPNOTE_BRIDGE_TRACE_LOG, if any."""
    trace_write(
        component,
        msg,
        resolve_trace_path(TRACE_ENV_VAR),
        include_traceback=include_traceback,
    )
