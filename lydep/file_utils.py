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
"""Source tree traversal and filtering."""

import os
import fnmatch
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import DefaultDict, Dict, List, Sequence, Tuple

from .constants import SOURCE_EXTENSIONS, SourceKind
from .path_utils import strip_project_prefix, to_project_path

logger = logging.getLogger(__name__)


@dataclass
class ExclusionStatistics:
    """Statistics about exclude-pattern filtering.

    Attributes:
        total_excluded: Number of files removed
        by_pattern: Files matched per pattern (first matching pattern wins)
        unused_patterns: Patterns that matched nothing, usually a typo
    """

    total_excluded: int = 0
    by_pattern: Dict[str, List[str]] = field(default_factory=dict)
    unused_patterns: List[str] = field(default_factory=list)


def exclude_sources_by_patterns(sources: Sequence[str], exclude_patterns: Sequence[str]) -> Tuple[List[str], ExclusionStatistics]:
    """Exclude source files matching any of the provided glob patterns.

    Patterns are matched with fnmatch against the path relative to the
    project root, without the leading "./" (e.g. "drafts/*", "*/old-*.ily").

    Args:
        sources: Project paths to filter
        exclude_patterns: Glob patterns to exclude

    Returns:
        Tuple of (kept sources in input order, exclusion statistics)
    """
    stats = ExclusionStatistics()
    if not exclude_patterns:
        return list(sources), stats

    matched: DefaultDict[str, List[str]] = defaultdict(list)
    kept: List[str] = []

    for source in sources:
        rel_path = strip_project_prefix(source)
        for pattern in exclude_patterns:
            if fnmatch.fnmatch(rel_path, pattern):
                matched[pattern].append(source)
                break
        else:
            kept.append(source)

    stats.total_excluded = len(sources) - len(kept)
    stats.by_pattern = {pattern: matched[pattern] for pattern in exclude_patterns if matched[pattern]}
    stats.unused_patterns = [pattern for pattern in exclude_patterns if not matched[pattern]]

    logger.info("Excluded %s source files using %s patterns", stats.total_excluded, len(exclude_patterns))
    for pattern in stats.unused_patterns:
        logger.warning("Exclude pattern '%s' matched no source files", pattern)

    return kept, stats


def _raise_walk_error(error: OSError) -> None:
    raise error


def find_source_files(root_dir: str, extensions: Sequence[str] = SOURCE_EXTENSIONS, exclude_patterns: Sequence[str] = ()) -> List[str]:
    """Enumerate every LilyPond source file below root_dir.

    Both score files and include-only fragments are returned, so that
    fragments that are never rendered still get their own includes tracked.

    Args:
        root_dir: Project root directory
        extensions: File extensions to collect
        exclude_patterns: Glob patterns of files to leave out

    Returns:
        "./"-prefixed project paths sorted by code point

    Raises:
        OSError: If a directory of the tree cannot be listed
    """
    sources: List[str] = []
    suffixes = tuple(extensions)

    for dirpath, dirnames, filenames in os.walk(root_dir, onerror=_raise_walk_error):
        dirnames.sort()
        rel_dir = os.path.relpath(dirpath, root_dir)
        for filename in filenames:
            if filename.endswith(suffixes):
                rel_path = filename if rel_dir == os.curdir else os.path.join(rel_dir, filename)
                sources.append(to_project_path(rel_path))

    sources.sort()
    sources, _ = exclude_sources_by_patterns(sources, exclude_patterns)
    logger.debug("Found %d source files under %s", len(sources), root_dir)
    return sources


def count_by_kind(sources: Sequence[str]) -> Dict[SourceKind, int]:
    """Count score and fragment files, for the generation summary."""
    counts = {kind: 0 for kind in SourceKind}
    for source in sources:
        try:
            counts[SourceKind.from_path(source)] += 1
        except ValueError:
            logger.debug("Unclassified source extension: %s", source)
    return counts
