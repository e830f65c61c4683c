#!/usr/bin/env python3
"""Tests for lydep/dependency_utils.py"""

import os

import pytest

from lydep.constants import SourceReadError
from lydep.dependency_utils import is_local_file, read_source_file, resolve_dependencies, resolve_include_targets


class TestResolveDependencies:
    """Tests for resolve_dependencies function."""

    def test_library_include_is_dropped(self, make_project) -> None:
        """A local fragment is kept and a library file (articulate.ly) is silently excluded."""
        root = make_project(
            {
                "parts/violin-part-1.ly": '\\include "shared/dynamics.ily"\n\\include "articulate.ly"\n',
                "parts/shared/dynamics.ily": "pp = \\pp\n",
            }
        )
        assert resolve_dependencies(root, "./parts/violin-part-1.ly") == ["./parts/shared/.dynamics.ily.record"]

    def test_parent_directory_reference(self, make_project) -> None:
        root = make_project({"root/score.ly": '\\include "../lib/x.ly"\n', "lib/x.ly": "x = { c }\n"})
        assert resolve_include_targets(root, "./root/score.ly") == ["./lib/x.ly"]
        assert resolve_dependencies(root, "./root/score.ly") == ["./lib/.x.ly.record"]

    def test_nested_reference_inside_subdirectory(self, make_project) -> None:
        root = make_project({"root/score.ly": '\\include "sub/../lib/x.ly"\n', "root/lib/x.ly": "x = { c }\n", "root/sub/keep.txt": ""})
        assert resolve_include_targets(root, "./root/score.ly") == ["./root/lib/x.ly"]
        assert resolve_dependencies(root, "./root/score.ly") == ["./root/lib/.x.ly.record"]

    def test_sorted_and_deduplicated(self, make_project) -> None:
        root = make_project(
            {
                "score.ly": '\\include "z.ily"\n\\include "a.ily"\n\\include "z.ily"\n\\include "./a.ily"\n',
                "a.ily": "",
                "z.ily": "",
            }
        )
        assert resolve_dependencies(root, "./score.ly") == ["./.a.ily.record", "./.z.ily.record"]

    def test_no_includes(self, make_project) -> None:
        root = make_project({"score.ly": "{ c'4 }\n"})
        assert resolve_dependencies(root, "./score.ly") == []

    def test_directory_is_not_a_local_file(self, make_project) -> None:
        root = make_project({"score.ly": '\\include "parts"\n', "parts/x.ily": ""})
        assert resolve_dependencies(root, "./score.ly") == []

    def test_custom_record_suffix(self, make_project) -> None:
        root = make_project({"score.ly": '\\include "a.ily"\n', "a.ily": ""})
        assert resolve_dependencies(root, "./score.ly", record_suffix=".lydep") == ["./.a.ily.lydep"]

    def test_independent_of_working_directory(self, make_project, monkeypatch: pytest.MonkeyPatch, temp_dir: str) -> None:
        """Resolution uses the explicit root, never the process working directory."""
        root = make_project({"score.ly": '\\include "a.ily"\n', "a.ily": ""})
        monkeypatch.chdir(temp_dir)
        assert resolve_dependencies(root, "./score.ly") == ["./.a.ily.record"]

    def test_existence_filter_matches_filesystem(self, score_project: str) -> None:
        """Every reference is kept exactly when it names an existing file."""
        targets = resolve_include_targets(score_project, "./Score.ly")
        assert targets == ["./parts/all-notes.ily", "./parts/header.ily"]
        for target in targets:
            assert os.path.isfile(os.path.join(score_project, target))


class TestReadSourceFile:
    """Tests for read_source_file function."""

    def test_reads_content(self, make_project) -> None:
        root = make_project({"score.ly": "content\n"})
        assert read_source_file(root, "./score.ly") == "content\n"

    def test_invalid_utf8_is_replaced(self, make_project) -> None:
        root = make_project({})
        with open(os.path.join(root, "latin1.ly"), "wb") as f:
            f.write(b'\\include "a.ily" % caf\xe9\n')
        assert read_source_file(root, "./latin1.ly").startswith('\\include "a.ily"')

    def test_missing_file_raises(self, make_project) -> None:
        root = make_project({})
        with pytest.raises(SourceReadError) as exc_info:
            read_source_file(root, "./missing.ly")
        assert exc_info.value.path == "./missing.ly"
        assert exc_info.value.exit_code == 2


class TestIsLocalFile:
    """Tests for is_local_file function."""

    def test_existing_file(self, make_project) -> None:
        root = make_project({"parts/a.ily": ""})
        assert is_local_file(root, "./parts/a.ily")

    def test_unnormalized_path_resolved_by_filesystem(self, make_project) -> None:
        root = make_project({"parts/a.ily": "", "shared/b.ily": ""})
        assert is_local_file(root, "./parts/../shared/b.ily")

    def test_missing_file(self, make_project) -> None:
        root = make_project({})
        assert not is_local_file(root, "./articulate.ly")


class TestProjectRootBoundary:
    """References climbing above the project root are never local."""

    def test_existing_file_above_root_is_dropped(self, make_project, temp_dir: str) -> None:
        root = make_project({"Score.ly": '\\include "../outside.ily"\n'})
        with open(os.path.join(temp_dir, "outside.ily"), "w", encoding="utf-8") as f:
            f.write("x = { c }\n")
        assert not is_local_file(root, "./../outside.ily")
        assert resolve_include_targets(root, "./Score.ly") == []

    def test_climb_out_through_subdirectory(self, make_project, temp_dir: str) -> None:
        root = make_project({"parts/a.ly": '\\include "../../outside.ily"\n'})
        with open(os.path.join(temp_dir, "outside.ily"), "w", encoding="utf-8") as f:
            f.write("")
        assert resolve_dependencies(root, "./parts/a.ly") == []

    def test_sibling_directory_sharing_name_prefix(self, make_project, temp_dir: str) -> None:
        root = make_project({"Score.ly": '\\include "../project-shared/x.ily"\n'})
        os.makedirs(os.path.join(temp_dir, "project-shared"))
        with open(os.path.join(temp_dir, "project-shared", "x.ily"), "w", encoding="utf-8") as f:
            f.write("")
        assert resolve_include_targets(root, "./Score.ly") == []

    def test_parent_reference_staying_inside_root(self, make_project) -> None:
        root = make_project({"parts/a.ly": '\\include "../shared/b.ily"\n', "shared/b.ily": ""})
        assert resolve_include_targets(root, "./parts/a.ly") == ["./shared/b.ily"]


class TestDoubledSeparators:
    """A reference written with "//" resolves to the enumerated path."""

    def test_doubled_slash_collapsed(self, make_project) -> None:
        root = make_project({"parts/a.ly": '\\include "sub//x.ily"\n', "parts/sub/x.ily": ""})
        assert resolve_include_targets(root, "./parts/a.ly") == ["./parts/sub/x.ily"]
