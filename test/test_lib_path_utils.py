#!/usr/bin/env python3
"""Tests for lydep/path_utils.py"""

import pytest

from lydep.path_utils import join_include, normalize_include_path, output_name, record_name, strip_project_prefix, to_project_path


class TestNormalizeIncludePath:
    """Tests for collapsing /X/../ segments."""

    def test_single_parent_segment(self) -> None:
        assert normalize_include_path("./parts/../shared/dynamics.ily") == "./shared/dynamics.ily"

    def test_nested_parent_segments_reach_fixpoint(self) -> None:
        """Nested segments must all collapse, not only the first pass."""
        assert normalize_include_path("./a/b/c/../../../lib/x.ly") == "./lib/x.ly"

    def test_separate_parent_segments(self) -> None:
        assert normalize_include_path("./a/../b/c/../d.ily") == "./b/d.ily"

    def test_leading_parent_without_component_is_kept(self) -> None:
        assert normalize_include_path("../lib/x.ly") == "../lib/x.ly"
        assert normalize_include_path("./../lib/x.ly") == "./../lib/x.ly"

    def test_parent_of_parent_is_not_collapsed(self) -> None:
        """"/../../" must not treat ".." as a real component."""
        assert normalize_include_path("./x/../../lib/y.ly") == "./../lib/y.ly"

    def test_current_directory_segments(self) -> None:
        assert normalize_include_path("./parts/./notes.ily") == "./parts/notes.ily"
        assert normalize_include_path("./parts/./../notes.ily") == "./notes.ily"

    def test_repeated_separators(self) -> None:
        assert normalize_include_path("./parts/sub//x.ily") == "./parts/sub/x.ily"
        assert normalize_include_path("./parts///../x.ily") == "./x.ily"

    def test_plain_path_unchanged(self) -> None:
        assert normalize_include_path("./parts/notes.ily") == "./parts/notes.ily"

    @pytest.mark.parametrize(
        "path",
        ["./a/b/../../c.ly", "./a/../../b.ly", "./p/q/./../r/../s.ily", "../x/../y.ly", "./a/b/c/d/../../../../e.ly", "./a//b/..//c.ly"],
    )
    def test_normalization_is_idempotent(self, path: str) -> None:
        once = normalize_include_path(path)
        assert normalize_include_path(once) == once
        assert "/./" not in once
        assert "//" not in once


class TestJoinInclude:
    """Tests for join_include."""

    def test_joins_with_slash(self) -> None:
        assert join_include("./parts", "notes.ily") == "./parts/notes.ily"

    def test_relative_reference_kept_verbatim(self) -> None:
        assert join_include("./root", "../lib/x.ly") == "./root/../lib/x.ly"


class TestRecordName:
    """Tests for dependency record naming."""

    def test_record_in_subdirectory(self) -> None:
        assert record_name("./shared/dynamics.ily") == "./shared/.dynamics.ily.record"

    def test_record_without_directory(self) -> None:
        assert record_name("score.ly") == ".score.ly.record"

    def test_custom_suffix(self) -> None:
        assert record_name("./Score.ly", ".lydep") == "./.Score.ly.lydep"

    def test_extension_is_part_of_record_name(self) -> None:
        """x.ly and x.ily live side by side and must not share a record."""
        assert record_name("./parts/x.ly") != record_name("./parts/x.ily")

    def test_record_names_are_injective(self) -> None:
        sources = ["./a.ly", "./a.ily", "./parts/a.ly", "./parts/a.ily", "./parts/sub/a.ly", "./b.ly"]
        assert len({record_name(source) for source in sources}) == len(sources)


class TestProjectPaths:
    """Tests for ./ prefix handling."""

    def test_to_project_path_adds_prefix(self) -> None:
        assert to_project_path("parts/x.ly") == "./parts/x.ly"

    def test_to_project_path_keeps_existing_prefix(self) -> None:
        assert to_project_path("./parts/x.ly") == "./parts/x.ly"

    def test_to_project_path_uses_forward_slashes(self) -> None:
        assert to_project_path("parts\\x.ly") == "./parts/x.ly"

    def test_strip_project_prefix(self) -> None:
        assert strip_project_prefix("./parts/x.ly") == "parts/x.ly"
        assert strip_project_prefix("parts/x.ly") == "parts/x.ly"


class TestOutputName:
    """Tests for output file naming."""

    def test_output_is_basename_with_new_extension(self) -> None:
        assert output_name("./parts/Score-part-oboe.ly", "pdf") == "Score-part-oboe.pdf"

    def test_midi_extension(self) -> None:
        assert output_name("./parts/Score-midi-1.ly", "midi") == "Score-midi-1.midi"

    def test_only_trailing_ly_replaced(self) -> None:
        assert output_name("./my.lyrics.ly", "pdf") == "my.lyrics.pdf"
