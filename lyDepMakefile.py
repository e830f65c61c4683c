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
"""Generate a Makefile with a semantic dependency graph for a LilyPond project.

Version: 1.0.0

PURPOSE:
    Writes a Makefile that renders every score of a multi-file LilyPond project
    and re-renders only the outputs whose sources, or anything they \\include,
    changed since the last build.

WHAT IT DOES:
    - Scans every .ly and .ily file for \\include "path" directives
    - Keeps includes that exist in the project tree; anything else is a LilyPond
      library file (e.g. articulate.ly) and is not tracked
    - Emits one dependency record rule per file (.name.ly.record), chained so
      make follows includes of includes
    - Emits entry points for the main score and the movement, part and midi files
    - Emits all/main/group metatargets plus quicktest, test and clean

METHOD:
    Textual scan of the sources; no LilyPond run is needed. Each record depends
    on its file and on the records of the files it includes directly, so the
    transitive closure is left to make.

REQUIREMENTS:
    - Python 3.9+
    - networkx: pip install networkx (include cycle detection)
    - colorama, packaging

COMPLEMENTARY TOOLS:
    - lyDepImpact.py: Which outputs re-render when a given file changes

EXAMPLES:
    # Regenerate the Makefile of the project in the current directory
    ./lyDepMakefile.py

    # Project elsewhere, print the Makefile instead of writing it
    ./lyDepMakefile.py ../Mozart-KV488-lys -o -

    # Custom output groups
    ./lyDepMakefile.py --group scores:scores/*.ly:pdf --group audio:audio/*.ly:midi

    # Layout from a JSON file, warn about malformed \\include directives
    ./lyDepMakefile.py --config lydep.json --strict
"""
import os
import sys
import argparse
import logging
from typing import List, Optional

from lydep.package_verification import require_package

require_package("networkx", "include graph analysis")

# pylint: disable=wrong-import-position
from lydep.color_utils import format_path, print_error, print_info, print_success, print_warning, set_color_enabled, should_use_color
from lydep.constants import (
    EXIT_INVALID_ARGS,
    EXIT_KEYBOARD_INTERRUPT,
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    MAKEFILE_NAME,
    LyDepError,
    ProjectDirectoryError,
    SourceKind,
)
from lydep.file_utils import count_by_kind
from lydep.layout import OutputGroup, ProjectLayout, load_layout
from lydep.makefile_assembler import assemble_makefile, write_makefile

GENERATOR_NAME = "lyDepMakefile.py"
STDOUT_OUTPUT = "-"


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse and return command line arguments.

    Args:
        argv: Argument list (default: sys.argv[1:])

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description="Generate a Makefile with a LilyPond include dependency graph.",
        epilog="""
Every path in the generated Makefile is relative to PROJECT_DIR, so run make
from there. Layout options given on the command line override the --config file.

Default groups:
  movements  parts/*-movement-*.ly  -> pdf
  parts      parts/*-part-*.ly      -> pdf
  midi       parts/*-midi-*.ly      -> midi
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("project_directory", metavar="PROJECT_DIR", nargs="?", default=".", help="LilyPond project root (default: current directory)")

    parser.add_argument("-o", "--output", metavar="FILE", help=f"Makefile to write (default: PROJECT_DIR/{MAKEFILE_NAME}, '-' for stdout)")

    parser.add_argument("--config", metavar="FILE", help="JSON layout file (main, groups, check_scripts, paper_sizes, exclude, ...)")

    parser.add_argument("--main", metavar="FILE", help="Main score relative to PROJECT_DIR (default: the only top-level .ly file)")

    parser.add_argument(
        "--group",
        action="append",
        metavar="NAME:GLOB:EXT",
        help="Output group (can be used multiple times, replaces the default groups). Example: parts:parts/*-part-*.ly:pdf",
    )

    parser.add_argument("--check-script", action="append", metavar="CMD", help="Command run by 'make quicktest' (can be used multiple times)")

    parser.add_argument("--paper-size", action="append", metavar="SIZE", help="Paper size rendered by 'make test' (can be used multiple times, default: a4 letter)")

    parser.add_argument(
        "--exclude",
        action="append",
        metavar="PATTERN",
        help='Leave source files matching glob pattern out of the graph (can be used multiple times). Example: "drafts/*"',
    )

    parser.add_argument("--no-touch-records", action="store_true", help="Emit record rules without the '@touch $@' recipe")

    parser.add_argument("--strict", action="store_true", help="Warn about \\include directives without a quoted path")

    parser.add_argument("--allow-cycles", action="store_true", help="Do not reject circular includes")

    parser.add_argument("--no-color", action="store_true", help="Disable colored output")

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", action="store_true", help="Enable verbose debug logging")
    verbosity.add_argument("--quiet", action="store_true", help="Only log warnings and errors")

    return parser.parse_args(argv)


def validate_arguments(args: argparse.Namespace) -> str:
    """Validate the project directory.

    Returns:
        Absolute project directory

    Raises:
        ProjectDirectoryError: If the project directory does not exist
    """
    project_dir = os.path.abspath(args.project_directory)
    if not os.path.isdir(project_dir):
        raise ProjectDirectoryError(f"'{args.project_directory}' is not a directory")
    logging.info("Project directory: %s", project_dir)
    return project_dir


def build_layout(args: argparse.Namespace) -> ProjectLayout:
    """Combine the --config file and command-line overrides.

    Raises:
        ConfigurationError: If the config file or a --group value is invalid
    """
    layout = load_layout(args.config) if args.config else ProjectLayout()
    return layout.with_overrides(
        main=args.main,
        groups=tuple(OutputGroup.parse(spec) for spec in args.group) if args.group else None,
        check_scripts=tuple(args.check_script) if args.check_script else None,
        paper_sizes=tuple(args.paper_size) if args.paper_size else None,
        exclude=tuple(args.exclude) if args.exclude else None,
        touch_records=False if args.no_touch_records else None,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the Makefile generator.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    args = parse_arguments(argv)

    level = logging.DEBUG if args.verbose else logging.WARNING if args.quiet else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
    logging.getLogger().setLevel(level)
    set_color_enabled(should_use_color(sys.stderr, args.no_color))

    project_dir = validate_arguments(args)
    layout = build_layout(args)

    result = assemble_makefile(project_dir, layout, GENERATOR_NAME, strict=args.strict, check_cycles=not args.allow_cycles)
    text = result.render()

    if args.output == STDOUT_OUTPUT:
        sys.stdout.write(text)
        return EXIT_SUCCESS

    output_path = args.output or os.path.join(project_dir, MAKEFILE_NAME)
    write_makefile(text, output_path)

    if not args.quiet:
        counts = count_by_kind(result.sources)
        if not result.outputs:
            print_warning("No renderable scores found; only metatargets were generated")
        print_success(f"Wrote {format_path(output_path)}")
        print_info(
            f"  {len(result.outputs)} entry points, {len(result.include_map)} dependency records "
            f"({counts[SourceKind.PRIMARY]} .ly, {counts[SourceKind.FRAGMENT]} .ily)"
        )
    return EXIT_SUCCESS


def run(argv: Optional[List[str]] = None) -> int:
    """Run main() and map failures to exit codes."""
    try:
        return main(argv)
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        print_warning("Interrupted by user", prefix=False)
        return EXIT_KEYBOARD_INTERRUPT
    except LyDepError as e:
        logging.debug("Generation failed", exc_info=True)
        print_error(str(e))
        return e.exit_code
    except ValueError as e:
        print_error(f"Validation error: {e}")
        return EXIT_INVALID_ARGS
    except OSError as e:
        logging.critical("Unexpected I/O error: %s", e, exc_info=True)
        print_error(str(e))
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(run())
