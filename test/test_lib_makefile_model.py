#!/usr/bin/env python3
"""Tests for lydep/makefile_model.py"""

import logging

import pytest

from lydep.makefile_model import (
    PHONY,
    Makefile,
    Rule,
    Section,
    make_escape,
    recipe_argument,
    render_makefile,
    render_rule,
    shell_double_quote,
    shell_quote,
    special_rule,
)


class TestRule:
    """Tests for Rule construction."""

    def test_target_is_first_target(self) -> None:
        assert Rule(targets=("test", "check")).target == "test"

    def test_string_targets_rejected(self) -> None:
        with pytest.raises(TypeError):
            Rule(targets="all")  # type: ignore[arg-type]

    def test_string_prerequisites_rejected(self) -> None:
        with pytest.raises(TypeError):
            Rule(targets=("all",), prerequisites="main")  # type: ignore[arg-type]

    def test_empty_targets_rejected(self) -> None:
        with pytest.raises(ValueError):
            Rule(targets=())


class TestRenderRule:
    """Tests for render_rule function."""

    def test_rule_without_prerequisites(self) -> None:
        assert render_rule(Rule(targets=("main",))) == "main:\n"

    def test_single_line_prerequisites(self) -> None:
        assert render_rule(Rule(targets=("all",), prerequisites=("main", "parts"))) == "all: main parts\n"

    def test_multiline_prerequisites(self) -> None:
        rule = Rule(targets=("parts",), prerequisites=("a.pdf", "b.pdf"), multiline=True)
        assert render_rule(rule) == "parts: \\\n\t\ta.pdf \\\n\t\tb.pdf\n"

    def test_recipe_lines_are_tab_indented(self) -> None:
        rule = Rule(targets=("quicktest", "quickcheck"), recipe=("./a.sh", "./b.sh"))
        assert render_rule(rule) == "quicktest quickcheck:\n\t./a.sh\n\t./b.sh\n"

    def test_secondary_declaration_precedes_rule(self) -> None:
        rule = Rule(targets=("./.a.ily.record",), prerequisites=("./a.ily",), recipe=("@touch $@",), secondary=True, multiline=True)
        assert render_rule(rule) == ".SECONDARY: ./.a.ily.record\n./.a.ily.record: \\\n\t\t./a.ily\n\t@touch $@\n"

    def test_special_rule(self) -> None:
        assert render_rule(special_rule(PHONY, ["all", "clean"])) == ".PHONY: all clean\n"


class TestRenderMakefile:
    """Tests for render_makefile function."""

    def test_blocks_separated_by_blank_line(self) -> None:
        makefile = Makefile(
            header=["# generated"],
            preamble=["LY ?= lilypond"],
            sections=[Section("Targets", (Rule(targets=("all",)), Rule(targets=("clean",), recipe=("rm x",))))],
        )
        assert render_makefile(makefile) == "# generated\n\nLY ?= lilypond\n\n# Targets\nall:\nclean:\n\trm x\n"

    def test_empty_section_keeps_title(self) -> None:
        assert render_makefile(Makefile(sections=[Section("Empty")])) == "# Empty\n"


class TestMakefileLookup:
    """Tests for Makefile.find_rule and all_rules."""

    def test_find_rule_by_any_target(self) -> None:
        rule = Rule(targets=("test", "check"), prerequisites=("quicktest",))
        makefile = Makefile(sections=[Section("a", (Rule(targets=("all",)),)), Section("b", (rule,))])
        assert makefile.find_rule("check") is rule
        assert [r.target for r in makefile.all_rules()] == ["all", "test"]

    def test_find_missing_rule(self) -> None:
        with pytest.raises(KeyError):
            Makefile().find_rule("all")


class TestMakeEscape:
    """Tests for make_escape function."""

    def test_dollar_doubled(self) -> None:
        assert make_escape("./$weird.ly") == "./$$weird.ly"

    def test_plain_path_unchanged(self) -> None:
        assert make_escape("./parts/a.ily") == "./parts/a.ily"

    def test_space_escaped(self) -> None:
        assert make_escape("./parts/my score.ly") == "./parts/my\\ score.ly"

    def test_hash_escaped(self) -> None:
        assert make_escape("./Sonata #2.ly") == "./Sonata\\ \\#2.ly"

    def test_colon_escaped(self) -> None:
        assert make_escape("./take:1.ily") == "./take\\:1.ily"

    def test_unescapable_character_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="lydep.makefile_model"):
            assert make_escape("./a;b.ly") == "./a;b.ly"
        assert "cannot escape" in caplog.text

    def test_plain_path_does_not_warn(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="lydep.makefile_model"):
            make_escape("./my score.ly")
        assert caplog.text == ""


class TestShellQuoting:
    """Quoting of paths placed on recipe lines."""

    def test_plain_word_unquoted(self) -> None:
        assert shell_quote("./parts/a-part-1.ly") == "./parts/a-part-1.ly"

    def test_space_single_quoted(self) -> None:
        assert shell_quote("./my score.ly") == "'./my score.ly'"

    def test_embedded_single_quote(self) -> None:
        assert shell_quote("./it's.ly") == "'./it'\\''s.ly'"

    def test_double_quote_escapes_expansions(self) -> None:
        assert shell_double_quote('a "b" $c `d`.pdf') == '"a \\"b\\" \\$c \\`d\\`.pdf"'

    def test_recipe_argument_doubles_dollar_for_make(self) -> None:
        assert recipe_argument("./$x.ly") == "'./$$x.ly'"
        assert recipe_argument("$x.pdf", shell_double_quote) == '"\\$$x.pdf"'
