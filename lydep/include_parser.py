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
"""Extraction of \\include directives from LilyPond source text."""

import re
import logging
from typing import List

logger = logging.getLogger(__name__)

# Single pass over the whole file. Comments and string literals are matched
# (and dropped) so that directives inside them are never reported.
_TOKEN_PATTERN = re.compile(
    r"""
    (?P<block_comment>%\{.*?%\})
    | (?P<line_comment>%[^\n]*)
    | (?P<include>(?<![\\\w-])\\include(?![\w-])(?:\s*"(?P<path>[^"\n]+)")?)
    | (?P<string>"(?:[^"\\\n]|\\.)*")
    """,
    re.VERBOSE | re.DOTALL,
)


def parse_includes_from_content(content: str, strict: bool = False, source: str = "<content>") -> List[str]:
    """Parse \\include directives from LilyPond file content.

    The content is scanned as one stream, so several directives on one line
    and a path placed on the line after the keyword are all found. Directives
    inside % comments, %{ %} blocks or string literals are ignored, as are
    keywords that are only part of a longer command (\\includes, \\myinclude).

    Args:
        content: File content to parse
        strict: If True, log a warning for each \\include without a quoted path
        source: Name used in warning messages

    Returns:
        List of raw include paths in order of appearance (not resolved)

    Example:
        >>> content = '''
        ... \\include "english.ly" \\include "../shared/dynamics.ily"
        ... % \\include "old.ily"
        ... '''
        >>> parse_includes_from_content(content)
        ['english.ly', '../shared/dynamics.ily']
    """
    includes: List[str] = []

    for match in _TOKEN_PATTERN.finditer(content):
        if match.group("include") is None:
            continue

        path = match.group("path")
        if path is not None:
            includes.append(path)
        elif strict:
            line = content.count("\n", 0, match.start()) + 1
            logger.warning("%s:%d: \\include without a quoted path, skipped", source, line)
        else:
            logger.debug("%s: malformed \\include skipped", source)

    return includes
