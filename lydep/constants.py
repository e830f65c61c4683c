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
"""Shared constants and exceptions for the lydep tools.

This module provides the file conventions, Makefile boilerplate strings and the
exception hierarchy used across the generator and the impact tool, so the
naming rules live in exactly one place.
"""

import enum
from typing import Tuple

# =============================================================================
# Exit Codes
# =============================================================================

EXIT_SUCCESS = 0
EXIT_INVALID_ARGS = 1
EXIT_RUNTIME_ERROR = 2
EXIT_KEYBOARD_INTERRUPT = 130

# =============================================================================
# Source File Conventions
# =============================================================================

PRIMARY_EXTENSION = ".ly"  # Renderable score files
FRAGMENT_EXTENSION = ".ily"  # Include-only fragments
SOURCE_EXTENSIONS: Tuple[str, ...] = (PRIMARY_EXTENSION, FRAGMENT_EXTENSION)

# Dependency record sidecar: dir/name.ext -> dir/.name.ext<RECORD_SUFFIX>
RECORD_PREFIX = "."
RECORD_SUFFIX = ".record"

# All project paths are emitted relative to the project root with this prefix
PROJECT_PATH_PREFIX = "./"

ENCODING = "utf-8"


class SourceKind(enum.Enum):
    """Kind of a LilyPond source file, inferred from its extension."""

    PRIMARY = "primary"
    FRAGMENT = "fragment"

    @classmethod
    def from_path(cls, path: str) -> "SourceKind":
        """Classify a path by extension.

        Raises:
            ValueError: If the extension is not a LilyPond source extension
        """
        if path.endswith(FRAGMENT_EXTENSION):
            return cls.FRAGMENT
        if path.endswith(PRIMARY_EXTENSION):
            return cls.PRIMARY
        raise ValueError(f"Not a LilyPond source file: {path}")


# =============================================================================
# Makefile Boilerplate
# =============================================================================

MAKEFILE_NAME = "Makefile"
MAKEFILE_BANNER = "# AUTOGENERATED MAKEFILE --- DO NOT EDIT"

DEFAULT_LILYPOND_COMMAND = "lilypond -dno-point-and-click"
LY_VARIABLE = "LY"
LYFLAGS_VARIABLE = "LYFLAGS"
PAPERSIZE_VARIABLE = "PAPERSIZE"

# Patterns grepped from LilyPond output by the cross-configuration check
DIAGNOSTIC_PATTERNS: Tuple[str, ...] = ("err", "warn")

RECORD_TOUCH_RECIPE = "@touch $@"

# =============================================================================
# Exception Classes
# =============================================================================


class LyDepError(Exception):
    """Base exception for all lydep errors.

    All lydep exceptions carry an exit_code attribute that indicates
    what exit code the program should use when this error is caught at the
    main entry point.
    """

    def __init__(self, message: str, exit_code: int = EXIT_RUNTIME_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


# Validation errors (EXIT_INVALID_ARGS)
class ValidationError(LyDepError):
    """Raised when input validation fails (arguments, paths, etc)."""

    def __init__(self, message: str):
        super().__init__(message, EXIT_INVALID_ARGS)


class ProjectDirectoryError(ValidationError):
    """Raised when the project directory is missing or not a directory."""


class ArgumentError(ValidationError):
    """Raised when command-line arguments are invalid."""


class ConfigurationError(ValidationError):
    """Raised when a layout configuration file or override is invalid."""


# Generation errors (EXIT_RUNTIME_ERROR)
class GenerationError(LyDepError):
    """Raised when the Makefile cannot be generated."""


class SourceReadError(GenerationError):
    """Raised when a source file cannot be read during include extraction."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot read {path}: {reason}")
        self.path = path


class IncludeCycleError(GenerationError):
    """Raised when the include graph contains a cycle."""

    def __init__(self, cycle: Tuple[str, ...]):
        super().__init__("Circular include detected: " + " -> ".join(cycle))
        self.cycle = cycle


class MakefileWriteError(GenerationError):
    """Raised when the generated Makefile cannot be written."""
