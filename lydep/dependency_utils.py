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
"""Resolution of direct local include dependencies for LilyPond sources."""

import os
import logging
import posixpath
from typing import List

from .constants import ENCODING, RECORD_SUFFIX, SourceReadError
from .include_parser import parse_includes_from_content
from .path_utils import join_include, normalize_include_path, record_name, strip_project_prefix

logger = logging.getLogger(__name__)


def read_source_file(root_dir: str, source: str) -> str:
    """Read a project source file.

    Args:
        root_dir: Project root directory
        source: Project path of the file ("./parts/x.ly")

    Returns:
        File content; undecodable bytes are replaced rather than rejected

    Raises:
        SourceReadError: If the file cannot be opened or read
    """
    path = os.path.join(root_dir, strip_project_prefix(source))
    try:
        with open(path, "r", encoding=ENCODING, errors="replace") as f:
            return f.read()
    except OSError as e:
        raise SourceReadError(source, e.strerror or str(e)) from e


def is_inside_root(root_dir: str, path: str) -> bool:
    """Check that a project path does not climb out of root_dir with "..".

    The check is lexical, so a symlinked directory inside the tree still
    counts as local.
    """
    root = os.path.normpath(os.path.abspath(root_dir))
    full = os.path.normpath(os.path.join(root, strip_project_prefix(path)))
    return full == root or full.startswith(root.rstrip(os.sep) + os.sep)


def is_local_file(root_dir: str, path: str) -> bool:
    """Check whether a joined include path names a regular file in the project tree.

    A file reached through "../" above the root is never local, even if it
    exists: it would become a record written outside the project.
    """
    if not is_inside_root(root_dir, path):
        return False
    return os.path.isfile(os.path.join(root_dir, strip_project_prefix(path)))


def resolve_include_targets(root_dir: str, source: str, strict: bool = False) -> List[str]:
    """Resolve the direct local includes of a source file.

    References that do not exist under root_dir are library files supplied by
    LilyPond's own search path (e.g. "articulate.ly") and are left out.

    Args:
        root_dir: Project root directory
        source: Project path of the including file
        strict: Warn about malformed \\include directives

    Returns:
        Sorted, deduplicated list of normalized project paths
    """
    content = read_source_file(root_dir, source)
    base_dir = posixpath.dirname(source) or "."

    targets = set()
    for reference in parse_includes_from_content(content, strict=strict, source=source):
        candidate = join_include(base_dir, reference)
        # Existence is checked on the joined path before it is rewritten
        if not is_local_file(root_dir, candidate):
            logger.debug("%s: %s not found locally, treating as library include", source, reference)
            continue
        targets.add(normalize_include_path(candidate))

    return sorted(targets)


def resolve_dependencies(root_dir: str, source: str, record_suffix: str = RECORD_SUFFIX, strict: bool = False) -> List[str]:
    """Return the dependency records a source file's own record depends on.

    Args:
        root_dir: Project root directory
        source: Project path of the including file
        record_suffix: Suffix of dependency record files
        strict: Warn about malformed \\include directives

    Returns:
        Sorted, deduplicated list of dependency record paths
    """
    records = {record_name(target, record_suffix) for target in resolve_include_targets(root_dir, source, strict=strict)}
    return sorted(records)
