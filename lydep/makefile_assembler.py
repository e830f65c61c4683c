#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ****************************************************************************************************************************************************
# * BSD 3-Clause License
# *
# * Copyright (c) 2025, Mana Battery
# * All rights reserved.
# *
# * Redistribution and use in source and binary forms, with or without modification, are permitted provided that the following conditions are met:
# *
# * 1. Redistributions of source code must retain the above copyright notice, this list of conditions and the following disclaimer.
# * 2. Redistributions in binary form must reproduce the above copyright notice, this list of conditions and the following disclaimer in the
# *    documentation and/or other materials provided with the distribution.
# * 3. Neither the name of the copyright holder nor the names of its contributors may be used to endorse or promote products derived from this
# *    software without specific prior written permission.
# *
# * THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO,
# * THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR
# * CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO,
# * PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# * LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# * EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
# ****************************************************************************************************************************************************
"""Assembly of the complete generated Makefile.

The whole document is built and rendered in memory first; write_makefile()
then replaces the previous Makefile in one rename, so a failed run never
leaves a truncated Makefile behind.
"""

import os
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .constants import (
    DIAGNOSTIC_PATTERNS,
    LY_VARIABLE,
    LYFLAGS_VARIABLE,
    MAKEFILE_BANNER,
    PAPERSIZE_VARIABLE,
    GenerationError,
    IncludeCycleError,
    MakefileWriteError,
)
from .file_utils import find_source_files
from .graph_utils import build_dependency_graph, find_include_cycle, scan_include_graph
from .layout import MAIN_OUTPUT_EXTENSION, ProjectLayout, match_group, resolve_main
from .makefile_model import PHONY, Makefile, Rule, Section, make_escape, render_makefile, special_rule
from .path_utils import output_name
from .rule_emitter import clean_commands, depgraph_rules, entry_point_rule, metatarget_rule

logger = logging.getLogger(__name__)

METATARGETS_TITLE = "Metatargets, for convenience"
ENTRY_POINTS_TITLE = "LilyPond entry points"
DEPGRAPH_TITLE = "LilyPond dependency graph"

QUICKTEST_TARGETS: Tuple[str, ...] = ("quicktest", "quickcheck")
TEST_TARGETS: Tuple[str, ...] = ("test", "check")


@dataclass
class GenerationResult:
    """Everything produced by one generation run.

    Attributes:
        makefile: The structured document
        sources: Enumerated source files
        include_map: Direct local includes of every scanned file
        outputs: Rendered output name -> score file producing it, in entry point order
    """

    makefile: Makefile
    sources: List[str] = field(default_factory=list)
    include_map: Dict[str, List[str]] = field(default_factory=dict)
    outputs: Dict[str, str] = field(default_factory=dict)

    def render(self) -> str:
        """Serialize the Makefile to text."""
        return render_makefile(self.makefile)


def build_header(generator_name: str) -> List[str]:
    return [MAKEFILE_BANNER, f'# Run "{generator_name}" to regenerate']


def build_preamble(layout: ProjectLayout) -> List[str]:
    """LilyPond invocation with overridable flags and an optional paper size."""
    return [
        f"{LY_VARIABLE} ?= {layout.lilypond_command} $({LYFLAGS_VARIABLE})",
        f"ifdef {PAPERSIZE_VARIABLE}",
        f'\t{LYFLAGS_VARIABLE} += -dpaper-size=\\"$({PAPERSIZE_VARIABLE})\\"',
        "endif",
    ]


def consistency_check_command(paper_size: str) -> str:
    """Rebuild everything with one paper size and fail if LilyPond reports anything."""
    patterns = " ".join(f"-e {pattern}" for pattern in DIAGNOSTIC_PATTERNS)
    return f"! $(MAKE) all -B {PAPERSIZE_VARIABLE}={paper_size} 2>&1 | grep -F {patterns} >&2"


def _add_output(outputs: Dict[str, str], output: str, source: str) -> bool:
    """Register an output; a second source for the same output name is ignored."""
    existing = outputs.get(output)
    if existing is None:
        outputs[output] = source
        return True
    if existing != source:
        logger.warning("%s and %s both render to %s; keeping %s", existing, source, output, existing)
    return False


def build_metatargets(layout: ProjectLayout, main: Optional[str], groups: List[Tuple[str, str, List[str]]]) -> Section:
    """Phony aggregates plus the quicktest, test and clean targets."""
    group_names = [name for name, _, _ in groups]
    rules = [
        special_rule(PHONY, ["all", "main"] + group_names),
        special_rule(PHONY, ["quicktest", "test", "quickcheck", "check", "clean"]),
        Rule(targets=("all",), prerequisites=tuple(["main"] + group_names)),
        Rule(targets=("main",), prerequisites=(make_escape(output_name(main, MAIN_OUTPUT_EXTENSION)),) if main else ()),
    ]
    rules.extend(metatarget_rule(name, extension, files) for name, extension, files in groups)
    rules.append(Rule(targets=QUICKTEST_TARGETS, recipe=tuple(layout.check_scripts)))
    rules.append(Rule(targets=TEST_TARGETS, prerequisites=(QUICKTEST_TARGETS[0],), recipe=tuple(consistency_check_command(size) for size in layout.paper_sizes)))

    clean: List[str] = []
    if main:
        clean.extend(clean_commands(MAIN_OUTPUT_EXTENSION, [main]))
    for _, extension, files in groups:
        clean.extend(clean_commands(extension, files))
    # Outputs shared between groups are removed once
    rules.append(Rule(targets=("clean",), recipe=tuple(dict.fromkeys(clean))))

    return Section(METATARGETS_TITLE, tuple(rules))


def build_entry_points(layout: ProjectLayout, main: Optional[str], groups: List[Tuple[str, str, List[str]]], outputs: Dict[str, str]) -> Section:
    """One LilyPond rule per renderable score, main score first."""
    candidates: List[Tuple[str, str]] = []
    if main:
        candidates.append((output_name(main, MAIN_OUTPUT_EXTENSION), main))
    for _, extension, files in groups:
        candidates.extend((output_name(source, extension), source) for source in files)

    rules = [entry_point_rule(output, source, layout) for output, source in candidates if _add_output(outputs, output, source)]
    return Section(ENTRY_POINTS_TITLE, tuple(rules))


def assemble_makefile(root_dir: str, layout: ProjectLayout, generator_name: str, strict: bool = False, check_cycles: bool = True) -> GenerationResult:
    """Generate the complete Makefile for a LilyPond project.

    Args:
        root_dir: Project root directory; every path in the Makefile is relative to it
        layout: Naming conventions and boilerplate settings
        generator_name: Command shown in the "regenerate" banner
        strict: Warn about malformed \\include directives
        check_cycles: Reject include graphs containing a cycle

    Returns:
        GenerationResult holding the document and the data it was built from

    Raises:
        SourceReadError: If a source file cannot be read
        IncludeCycleError: If check_cycles is set and the includes form a cycle
        ConfigurationError: If the configured main score does not exist
        GenerationError: If the project tree cannot be traversed
    """
    try:
        main = resolve_main(root_dir, layout)
        groups = [(group.name, group.extension, match_group(root_dir, group)) for group in layout.groups]
        sources = find_source_files(root_dir, layout.source_extensions, layout.exclude)
    except OSError as e:
        raise GenerationError(f"Cannot traverse {root_dir}: {e}") from e

    # Renderable scores are graph roots even if an exclude pattern matched them
    renderable = ([main] if main else []) + [path for _, _, files in groups for path in files]
    roots = list(dict.fromkeys(sources + renderable))
    include_map = scan_include_graph(root_dir, roots, strict=strict)

    if check_cycles:
        cycle = find_include_cycle(build_dependency_graph(include_map))
        if cycle is not None:
            raise IncludeCycleError(cycle)

    outputs: Dict[str, str] = {}
    makefile = Makefile(header=build_header(generator_name), preamble=build_preamble(layout))
    makefile.sections.append(build_metatargets(layout, main, groups))
    makefile.sections.append(build_entry_points(layout, main, groups, outputs))
    makefile.sections.append(Section(DEPGRAPH_TITLE, tuple(depgraph_rules(root_dir, include_map, layout))))

    logger.info("Generated %d entry points and %d dependency records", len(outputs), len(include_map))
    return GenerationResult(makefile=makefile, sources=sources, include_map=include_map, outputs=outputs)


def write_makefile(text: str, path: str) -> None:
    """Replace the Makefile at path with text.

    Uses atomic write (temp file + rename) so readers see either the old or
    the new Makefile, never a partial one.

    Raises:
        MakefileWriteError: If the file cannot be written
    """
    temp_path = path + ".tmp"
    try:
        with open(temp_path, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
        os.replace(temp_path, path)
    except OSError as e:
        if os.path.exists(temp_path):
            try:
                os.remove(temp_path)
            except OSError:
                logger.debug("Could not remove %s", temp_path)
        raise MakefileWriteError(f"Cannot write {path}: {e}") from e

    logger.debug("Wrote %s (%d bytes)", path, len(text.encode("utf-8")))
