"""Tests for the trace file writer."""

from deepnote_bridge.mime import MimeTypeProcessorRegistry
from deepnote_bridge.trace import TRACE_ENV_VAR, resolve_trace_path, trace, trace_write


class TestResolveTracePath:
    """Tests for resolve_trace_path()."""

    def test_unset_disables(self):
        assert resolve_trace_path(TRACE_ENV_VAR) is None

    def test_empty_disables(self, monkeypatch):
        monkeypatch.setenv(TRACE_ENV_VAR, "")

        assert resolve_trace_path(TRACE_ENV_VAR) is None

    def test_first_non_empty_wins(self, monkeypatch):
        monkeypatch.setenv("FIRST_TRACE", "")
        monkeypatch.setenv("SECOND_TRACE", "/tmp/second.log")

        assert resolve_trace_path("FIRST_TRACE", "SECOND_TRACE") == "/tmp/second.log"


class TestTraceWrite:
    """Tests for trace_write() and trace()."""

    def test_writes_component_tagged_line(self, tmp_path):
        path = tmp_path / "nested" / "trace.log"

        trace_write("Component", "hello", str(path))

        content = path.read_text()
        assert "[Component] hello" in content

    def test_none_path_is_noop(self, tmp_path):
        trace_write("Component", "hello", None)

        assert list(tmp_path.iterdir()) == []

    def test_unwritable_path_never_raises(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        trace_write("Component", "hello", str(blocker / "trace.log"))

    def test_includes_traceback(self, tmp_path):
        path = tmp_path / "trace.log"
        try:
            raise RuntimeError("kaboom")
        except RuntimeError:
            trace_write("Component", "failed", str(path), include_traceback=True)

        content = path.read_text()
        assert "Traceback" in content
        assert "kaboom" in content

    def test_trace_disabled_by_default(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        trace("Component", "hello")

        assert list(tmp_path.iterdir()) == []

    def test_registry_writes_when_enabled(self, tmp_path, monkeypatch):
        path = tmp_path / "trace.log"
        monkeypatch.setenv(TRACE_ENV_VAR, str(path))

        MimeTypeProcessorRegistry().process_for_deepnote("x", "text/plain")

        assert "[MimeRegistry] process_for_deepnote: text/plain -> text" in path.read_text()
