"""Pytest fixtures for deepnote_bridge tests."""

import os

import pytest

SAMPLE_PROJECT = """\
metadata:
  createdAt: '2025-01-01T00:00:00.000Z'
  modifiedAt: '2025-01-01T00:00:00.000Z'
project:
  id: project-1
  name: Sample project
  initNotebookId: nb-init
  notebooks:
    - id: nb-init
      name: Init
      executionMode: block
      isModule: false
      blocks:
        - id: init-block
          type: code
          sortingKey: a0
          content: '%pip install pandas'
    - id: nb-analysis
      name: Analysis
      executionMode: block
      isModule: false
      blocks:
        - id: block-b
          type: code
          sortingKey: a1
          executionCount: 2
          content: print("hi")
          metadata:
            custom: value
          outputs:
            - output_type: stream
              name: stdout
              text: "hi\\n"
        - id: block-a
          type: markdown
          sortingKey: a0
          content: '# Title'
          blockGroup: group-1
        - id: block-c
          type: code
          sortingKey: a2
          executionCount: 3
          content: df
          outputs:
            - output_type: execute_result
              execution_count: 3
              data:
                text/plain: '   x'
                text/html: <table></table>
              metadata:
                text/html:
                  isolated: true
  settings:
    requirements: []
version: '1.0'
"""


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Remove DEEPNOTE_BRIDGE_* variables so host settings cannot leak in.

    Tracing stays disabled unless a test opts in.
    """
    for name in list(os.environ):
        if name.startswith("DEEPNOTE_BRIDGE_"):
            monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def sample_project_yaml():
    """A two-notebook .deepnote document as bytes."""
    return SAMPLE_PROJECT.encode("utf-8")


@pytest.fixture
def sample_project_file(tmp_path, sample_project_yaml):
    """The sample project written to a .deepnote file."""
    path = tmp_path / "sample.deepnote"
    path.write_bytes(sample_project_yaml)
    return path
