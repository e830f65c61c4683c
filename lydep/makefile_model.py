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
"""Structured representation of the generated Makefile.

Rules are collected as immutable Rule objects and only turned into text by
render_makefile(), so the emitters can be tested without string matching.
"""

import re
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Sequence, Tuple

logger = logging.getLogger(__name__)

PHONY = ".PHONY"
SECONDARY = ".SECONDARY"

_CONTINUATION = " \\\n\t\t"

# Characters make cannot take literally in a target or prerequisite, with their escapes
_MAKE_ESCAPES = (("$", "$$"), ("#", "\\#"), (" ", "\\ "), (":", "\\:"))
# Characters with no escape in a rule line (";" starts a recipe, "%" and globs are patterns)
_UNESCAPABLE = re.compile(r"[;=%*?\[\]\t\n]")
# Shell words that need no quoting
_SHELL_SAFE = re.compile(r"[a-zA-Z0-9/.,_+-]+\Z")


@dataclass(frozen=True)
class Rule:
    """A single Makefile rule.

    Attributes:
        targets: One or more targets sharing the rule ("test check")
        prerequisites: Prerequisites in emission order
        recipe: Recipe lines, without the leading tab
        secondary: Declare the target .SECONDARY so make never deletes it as an intermediate
        multiline: Put each prerequisite on its own continuation line
    """

    targets: Tuple[str, ...]
    prerequisites: Tuple[str, ...] = ()
    recipe: Tuple[str, ...] = ()
    secondary: bool = False
    multiline: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.targets, str) or isinstance(self.prerequisites, str) or isinstance(self.recipe, str):
            raise TypeError("targets, prerequisites and recipe must be sequences of str, not str")
        if not self.targets:
            raise ValueError("a rule needs at least one target")

    @property
    def target(self) -> str:
        """First target, used when a rule is addressed by name."""
        return self.targets[0]


@dataclass(frozen=True)
class Section:
    """A titled block of rules, rendered under a "# title" comment."""

    title: str
    rules: Tuple[Rule, ...] = ()


@dataclass
class Makefile:
    """The complete generated document."""

    header: List[str] = field(default_factory=list)
    preamble: List[str] = field(default_factory=list)
    sections: List[Section] = field(default_factory=list)

    def find_rule(self, target: str) -> Rule:
        """Return the first rule producing target.

        Raises:
            KeyError: If no rule has that target
        """
        for section in self.sections:
            for rule in section.rules:
                if target in rule.targets:
                    return rule
        raise KeyError(target)

    def all_rules(self) -> List[Rule]:
        """All rules of all sections, in document order."""
        return [rule for section in self.sections for rule in section.rules]


def special_rule(name: str, targets: Sequence[str]) -> Rule:
    """Declaration such as ".PHONY: all clean" expressed as a rule."""
    return Rule(targets=(name,), prerequisites=tuple(targets))


def make_escape(path: str) -> str:
    """Escape a file name for use as a Makefile target or prerequisite.

    "$", "#", spaces and ":" are escaped. Characters make has no escape for
    are kept and reported, since the rule will not match that file.
    """
    if _UNESCAPABLE.search(path):
        logger.warning("%r contains characters make cannot escape; its rules will not work", path)
    for char, escaped in _MAKE_ESCAPES:
        path = path.replace(char, escaped)
    return path


def shell_quote(word: str) -> str:
    """Quote a word for a recipe line; plain paths are left unquoted."""
    if _SHELL_SAFE.match(word):
        return word
    return "'{0}'".format(word.replace("'", "'\\''"))


def shell_double_quote(word: str) -> str:
    """Quote a word in double quotes, escaping what the shell expands inside them."""
    for char in "\\\"$`":
        word = word.replace(char, "\\" + char)
    return f'"{word}"'


def recipe_argument(path: str, quote: Callable[[str], str] = shell_quote) -> str:
    """Shell-quote a path and protect its "$" from make expansion."""
    return quote(path).replace("$", "$$")


def render_rule(rule: Rule) -> str:
    """Render one rule, including its .SECONDARY declaration."""
    lines = []
    if rule.secondary:
        lines.append(f"{SECONDARY}: {' '.join(rule.targets)}\n")

    head = " ".join(rule.targets) + ":"
    if rule.multiline:
        head += "".join(_CONTINUATION + prerequisite for prerequisite in rule.prerequisites)
    elif rule.prerequisites:
        head += " " + " ".join(rule.prerequisites)
    lines.append(head + "\n")

    lines.extend(f"\t{command}\n" for command in rule.recipe)
    return "".join(lines)


def render_makefile(makefile: Makefile) -> str:
    """Serialize a Makefile; blocks are separated by a single blank line."""
    blocks = []
    if makefile.header:
        blocks.append("".join(f"{line}\n" for line in makefile.header))
    if makefile.preamble:
        blocks.append("".join(f"{line}\n" for line in makefile.preamble))
    for section in makefile.sections:
        blocks.append(f"# {section.title}\n" + "".join(render_rule(rule) for rule in section.rules))
    return "\n".join(blocks)
