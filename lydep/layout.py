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
"""Project layout conventions for Makefile generation.

The layout says which file is the main score, which filename patterns form the
output groups (movements, parts, midi) and which commands the convenience
targets run. It is plain configuration: nothing in the dependency resolver
depends on it.

Example usage:
    from lydep.layout import ProjectLayout, load_layout

    layout = load_layout("lydep.json")  # or ProjectLayout() for the defaults
    for group in layout.groups:
        print(group.name, group.pattern, group.extension)
"""

import os
import glob
import json
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from .constants import (
    DEFAULT_LILYPOND_COMMAND,
    PRIMARY_EXTENSION,
    RECORD_SUFFIX,
    SOURCE_EXTENSIONS,
    ConfigurationError,
)
from .path_utils import to_project_path

logger = logging.getLogger(__name__)

MAIN_OUTPUT_EXTENSION = "pdf"

# Phony targets the generated Makefile always defines
RESERVED_TARGETS = frozenset({"all", "main", "clean", "quicktest", "quickcheck", "test", "check"})


@dataclass(frozen=True)
class OutputGroup:
    """A class of score files selected by filename pattern.

    Attributes:
        name: Metatarget name ("movements")
        pattern: Glob relative to the project root ("parts/*-movement-*.ly")
        extension: Extension of the rendered output ("pdf", "midi")
    """

    name: str
    pattern: str
    extension: str

    @classmethod
    def parse(cls, spec: str) -> "OutputGroup":
        """Parse a NAME:GLOB:EXT command-line group value.

        Raises:
            ConfigurationError: If the value does not have three non-empty fields
        """
        parts = spec.split(":")
        if len(parts) != 3 or not all(parts):
            raise ConfigurationError(f"Invalid group '{spec}', expected NAME:GLOB:EXT (e.g. parts:parts/*-part-*.ly:pdf)")
        name, pattern, extension = parts
        return cls(name=name, pattern=pattern, extension=extension.lstrip("."))


DEFAULT_GROUPS: Tuple[OutputGroup, ...] = (
    OutputGroup("movements", "parts/*-movement-*.ly", "pdf"),
    OutputGroup("parts", "parts/*-part-*.ly", "pdf"),
    OutputGroup("midi", "parts/*-midi-*.ly", "midi"),
)

DEFAULT_CHECK_SCRIPTS: Tuple[str, ...] = ("./assert_barchecks.sh", "./assert_consistent_marks.sh")
DEFAULT_PAPER_SIZES: Tuple[str, ...] = ("a4", "letter")


@dataclass(frozen=True)
class ProjectLayout:
    """Immutable naming conventions and boilerplate settings.

    Attributes:
        main: Main score relative to the root; None means auto-detect
        groups: Output groups in metatarget order
        check_scripts: Commands run by quicktest/quickcheck
        paper_sizes: Paper sizes the test target renders everything with
        lilypond_command: Base LilyPond invocation for the LY variable
        source_extensions: Extensions of files tracked in the dependency graph
        record_suffix: Suffix of dependency record files
        exclude: Glob patterns of source files left out of the graph
        touch_records: Give record rules an "@touch $@" recipe
    """

    main: Optional[str] = None
    groups: Tuple[OutputGroup, ...] = DEFAULT_GROUPS
    check_scripts: Tuple[str, ...] = DEFAULT_CHECK_SCRIPTS
    paper_sizes: Tuple[str, ...] = DEFAULT_PAPER_SIZES
    lilypond_command: str = DEFAULT_LILYPOND_COMMAND
    source_extensions: Tuple[str, ...] = SOURCE_EXTENSIONS
    record_suffix: str = RECORD_SUFFIX
    exclude: Tuple[str, ...] = field(default_factory=tuple)
    touch_records: bool = True

    def __post_init__(self) -> None:
        names = [group.name for group in self.groups]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ConfigurationError(f"Duplicate group names: {', '.join(duplicates)}")
        reserved = sorted(RESERVED_TARGETS.intersection(names))
        if reserved:
            raise ConfigurationError(f"Group names {', '.join(reserved)} clash with built-in targets")

    def with_overrides(self, **overrides: Any) -> "ProjectLayout":
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes) if changes else self


def _as_str_tuple(data: Dict[str, Any], key: str) -> Optional[Tuple[str, ...]]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigurationError(f"'{key}' must be a list of strings")
    return tuple(value)


def layout_from_dict(data: Dict[str, Any]) -> ProjectLayout:
    """Build a layout from parsed JSON; missing keys keep their defaults.

    Raises:
        ConfigurationError: On unknown keys or values of the wrong type
    """
    known = {"main", "groups", "check_scripts", "paper_sizes", "lilypond_command", "source_extensions", "record_suffix", "exclude", "touch_records"}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigurationError(f"Unknown layout keys: {', '.join(unknown)}")

    groups = None
    if "groups" in data:
        try:
            groups = tuple(OutputGroup(name=g["name"], pattern=g["pattern"], extension=str(g["extension"]).lstrip(".")) for g in data["groups"])
        except (KeyError, TypeError) as e:
            raise ConfigurationError(f"Each group needs 'name', 'pattern' and 'extension': {e}") from e

    for key in ("main", "lilypond_command", "record_suffix"):
        if key in data and not isinstance(data[key], str):
            raise ConfigurationError(f"'{key}' must be a string")
    if "touch_records" in data and not isinstance(data["touch_records"], bool):
        raise ConfigurationError("'touch_records' must be true or false")

    return ProjectLayout().with_overrides(
        main=data.get("main"),
        groups=groups,
        check_scripts=_as_str_tuple(data, "check_scripts"),
        paper_sizes=_as_str_tuple(data, "paper_sizes"),
        lilypond_command=data.get("lilypond_command"),
        source_extensions=_as_str_tuple(data, "source_extensions"),
        record_suffix=data.get("record_suffix"),
        exclude=_as_str_tuple(data, "exclude"),
        touch_records=data.get("touch_records"),
    )


def load_layout(config_path: str) -> ProjectLayout:
    """Load a layout from a JSON configuration file.

    Raises:
        ConfigurationError: If the file cannot be read or is not a valid layout
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read layout file {config_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_path} must contain a JSON object")
    logger.debug("Loaded layout from %s", config_path)
    return layout_from_dict(data)


def match_group(root_dir: str, group: OutputGroup) -> List[str]:
    """Return the project paths of the files matched by a group, sorted."""
    matches = glob.glob(os.path.join(glob.escape(root_dir), group.pattern))
    paths = sorted(to_project_path(os.path.relpath(match, root_dir)) for match in matches if os.path.isfile(match))
    logger.debug("Group %s (%s): %d files", group.name, group.pattern, len(paths))
    return paths


def resolve_main(root_dir: str, layout: ProjectLayout) -> Optional[str]:
    """Return the main score as a project path.

    A configured main file must exist. Without one, the single .ly file at the
    top of the project is used; zero or several candidates mean no main score.

    Raises:
        ConfigurationError: If the configured main score does not exist
    """
    if layout.main is not None:
        if not os.path.isfile(os.path.join(root_dir, layout.main)):
            raise ConfigurationError(f"Main score {layout.main} not found in {root_dir}")
        return to_project_path(layout.main)

    candidates = sorted(name for name in os.listdir(root_dir) if name.endswith(PRIMARY_EXTENSION) and os.path.isfile(os.path.join(root_dir, name)))
    if len(candidates) == 1:
        return to_project_path(candidates[0])
    if candidates:
        logger.warning("Several top-level scores (%s); set the main score explicitly", ", ".join(candidates))
    return None
