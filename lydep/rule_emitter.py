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
"""Emission of Makefile rules from the include graph and the project layout.

Three kinds of rules are produced:

- record rules: ".x.ly.record" depends on "x.ly" and on the records of the
  files x.ly includes. make follows the record-to-record chain, so a change to
  any file in the include closure reaches every output built from it without
  the generator computing the closure itself.
- entry points: "x.pdf" depends on the record of "x.ly" and runs $(LY) on it.
- metatargets: phony aggregates such as "parts" listing the outputs of a group.
"""

import logging
from typing import Dict, List, Optional, Sequence

from .constants import LY_VARIABLE, RECORD_TOUCH_RECIPE
from .dependency_utils import resolve_dependencies
from .layout import ProjectLayout
from .makefile_model import Rule, make_escape, recipe_argument, shell_double_quote
from .path_utils import output_name, record_name

logger = logging.getLogger(__name__)


def record_rule(root_dir: str, source: str, layout: ProjectLayout, includes: Optional[Sequence[str]] = None) -> Rule:
    """Emit the rule building a source file's dependency record.

    The record is declared .SECONDARY so that make keeps it across partial
    builds instead of deleting it as an intermediate file.

    Args:
        root_dir: Project root directory
        source: Project path of the source file
        layout: Project layout (record suffix, touch_records)
        includes: Already resolved direct local includes; resolved from disk when None

    Returns:
        Rule for the record of source
    """
    suffix = layout.record_suffix
    if includes is None:
        dependencies = resolve_dependencies(root_dir, source, record_suffix=suffix)
    else:
        dependencies = sorted({record_name(target, suffix) for target in includes})

    return Rule(
        targets=(make_escape(record_name(source, suffix)),),
        prerequisites=tuple(make_escape(path) for path in [source] + dependencies),
        recipe=(RECORD_TOUCH_RECIPE,) if layout.touch_records else (),
        secondary=True,
        multiline=True,
    )


def depgraph_rules(root_dir: str, include_map: Dict[str, List[str]], layout: ProjectLayout) -> List[Rule]:
    """Emit record rules for every scanned file, in sorted path order."""
    return [record_rule(root_dir, source, layout, includes=include_map[source]) for source in sorted(include_map)]


def entry_point_rule(output: str, source: str, layout: ProjectLayout) -> Rule:
    """Emit the rule rendering output from source with LilyPond.

    The output depends only on the source's record, which in turn depends on
    everything the source includes.
    """
    return Rule(
        targets=(make_escape(output),),
        prerequisites=(make_escape(record_name(source, layout.record_suffix)),),
        recipe=(f"$({LY_VARIABLE}) {recipe_argument(source)}",),
    )


def metatarget_rule(name: str, extension: str, sources: Sequence[str]) -> Rule:
    """Emit an aggregate target over the outputs of a group of score files."""
    return Rule(
        targets=(name,),
        prerequisites=tuple(make_escape(output_name(source, extension)) for source in sources),
        multiline=True,
    )


def clean_commands(extension: str, sources: Sequence[str]) -> List[str]:
    """Recipe lines removing the outputs of a group of score files."""
    return [f"$(RM) {recipe_argument(output_name(source, extension), shell_double_quote)}" for source in sources]
