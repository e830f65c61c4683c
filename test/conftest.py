"""Pytest configuration and shared fixtures for lydep tests.

Fixtures build small LilyPond project trees on disk:
- make_project: factory writing {relative path: content} into a fresh directory
- score_project: a complete multi-movement score in the default layout
"""

import sys
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Dict, Generator

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from lydep.color_utils import set_color_enabled  # noqa: E402


@pytest.fixture(autouse=True)
def plain_output() -> Generator[None, None, None]:
    """Disable color codes so assertions see plain text."""
    set_color_enabled(False)
    yield
    set_color_enabled(True)


@pytest.fixture
def temp_dir() -> Generator[str, None, None]:
    """Create a temporary directory for tests.

    Scope: function (default)
    Use for: File I/O operations that need isolation
    """
    tmpdir = tempfile.mkdtemp(prefix="lydep_test_")
    yield tmpdir
    shutil.rmtree(tmpdir, ignore_errors=True)


ProjectFactory = Callable[[Dict[str, str]], str]


@pytest.fixture
def make_project(temp_dir: str) -> ProjectFactory:
    """Factory writing a project tree and returning its root directory."""

    def _make(files: Dict[str, str]) -> str:
        root = Path(temp_dir) / "project"
        root.mkdir(exist_ok=True)
        for rel_path, content in files.items():
            path = root / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return str(root)

    return _make


SCORE_FILES: Dict[str, str] = {
    "Score.ly": '\\version "2.24.0"\n\\include "parts/header.ily"\n\\include "articulate.ly"\n\\include "parts/all-notes.ily"\n',
    "parts/header.ily": '\\header { title = "Concerto" }\n',
    "parts/all-notes.ily": '\\include "notes-oboe.ily"\n\\include "notes-violin.ily"\n',
    "parts/notes-oboe.ily": '\\include "../shared/dynamics.ily"\noboe = { c4 d e f }\n',
    "parts/notes-violin.ily": "violin = { g4 a b c }\n",
    "shared/dynamics.ily": "pp = #(make-dynamic-script \"pp\")\n",
    "parts/Score-movement-1.ly": '\\include "header.ily"\n\\include "notes-oboe.ily"\n',
    "parts/Score-part-oboe.ly": '\\include "header.ily" \\include "notes-oboe.ily"\n',
    "parts/Score-midi-1.ly": '\\include "all-notes.ily"\n\\include "articulate.ly"\n',
}


@pytest.fixture
def score_project(make_project: ProjectFactory) -> str:
    """A complete score: main file, one movement, one part, one midi file.

    Include graph (articulate.ly is a LilyPond library file):
        Score.ly -> parts/header.ily, parts/all-notes.ily
        parts/all-notes.ily -> parts/notes-oboe.ily, parts/notes-violin.ily
        parts/notes-oboe.ily -> shared/dynamics.ily
        parts/Score-movement-1.ly, parts/Score-part-oboe.ly -> parts/header.ily, parts/notes-oboe.ily
        parts/Score-midi-1.ly -> parts/all-notes.ily
    """
    return make_project(SCORE_FILES)
