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
"""Path helpers for include resolution and dependency record naming.

Every path handled here is a POSIX-style project path relative to the project
root (normally with a leading "./"). These functions never touch the
filesystem.
"""

import re
import posixpath

from .constants import PRIMARY_EXTENSION, PROJECT_PATH_PREFIX, RECORD_PREFIX, RECORD_SUFFIX

# "/X/../" where X is one real component (not empty, "." or "..")
_PARENT_SEGMENT = re.compile(r"/(?!\.\.?/)[^/]+/\.\./")
_CURRENT_SEGMENT = re.compile(r"/\./")
_REPEATED_SEPARATOR = re.compile(r"//+")


def normalize_include_path(path: str) -> str:
    """Collapse "/X/../" segments of a joined include path.

    The rewrite is repeated until no collapsible segment remains, so nested
    segments such as "a/b/../../c" are fully reduced. A leading "../" with no
    component before it is kept as is. Repeated separators ("a//b") and inner
    "/./" segments are dropped first so that "x/./../y" reduces like "x/../y".

    Args:
        path: Joined include path, e.g. "./parts/../shared/dynamics.ily"

    Returns:
        Path with all collapsible parent segments removed

    Example:
        >>> normalize_include_path("./parts/sub/../../shared/x.ily")
        './shared/x.ily'
    """
    previous = None
    while previous != path:
        previous = path
        path = _REPEATED_SEPARATOR.sub("/", path)
        path = _CURRENT_SEGMENT.sub("/", path)
        path = _PARENT_SEGMENT.sub("/", path, count=1)
    return path


def join_include(base_dir: str, reference: str) -> str:
    """Prefix an include reference with the directory of the including file."""
    return f"{base_dir}/{reference}"


def to_project_path(relative_path: str) -> str:
    """Express a root-relative path in "./" form, using forward slashes."""
    relative_path = relative_path.replace("\\", "/")
    if relative_path.startswith(PROJECT_PATH_PREFIX):
        return relative_path
    return PROJECT_PATH_PREFIX + relative_path


def strip_project_prefix(path: str) -> str:
    """Inverse of to_project_path for matching and display."""
    return path[len(PROJECT_PATH_PREFIX) :] if path.startswith(PROJECT_PATH_PREFIX) else path


def record_name(path: str, suffix: str = RECORD_SUFFIX) -> str:
    """Return the dependency record path of a source file.

    "dir/name.ext" becomes "dir/.name.ext.record"; the record lives next to the
    source it describes.

    Args:
        path: Source file path
        suffix: Record suffix (default: ".record")

    Returns:
        Record file path
    """
    directory, filename = posixpath.split(path)
    hidden = f"{RECORD_PREFIX}{filename}{suffix}"
    return posixpath.join(directory, hidden) if directory else hidden


def output_name(source: str, extension: str) -> str:
    """Map a score file to the rendered output LilyPond writes in the working directory.

    LilyPond writes its output next to where it is run, so only the basename is
    kept: "./parts/x-part-1.ly" with extension "pdf" gives "x-part-1.pdf".
    """
    basename = posixpath.basename(source)
    if basename.endswith(PRIMARY_EXTENSION):
        basename = basename[: -len(PRIMARY_EXTENSION)]
    return f"{basename}.{extension}"
