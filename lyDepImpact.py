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
"""Show which rendered outputs a change to LilyPond source files would rebuild.

Version: 1.0.0

PURPOSE:
    Quick answer to "if I edit this .ily, what will make re-render?" using the
    same include graph lyDepMakefile.py puts into the Makefile.

WHAT IT DOES:
    - Scans the project exactly like lyDepMakefile.py (same layout options)
    - Walks the include graph backwards from each given file
    - Lists the entry point outputs (pdf, midi) whose score includes the file,
      directly or through other includes
    - With --deps, also lists everything each given file includes transitively

EXAMPLES:
    # Which outputs depend on the shared dynamics?
    ./lyDepImpact.py . shared/dynamics.ily

    # Several files at once, plus their own include closure
    ./lyDepImpact.py ../Mozart-KV488-lys parts/notes-oboe.ily parts/header.ily --deps
"""
import os
import sys
import argparse
import logging
from typing import Dict, List, Optional

from lydep.package_verification import require_package

require_package("networkx", "include graph analysis")

# pylint: disable=wrong-import-position
from lydep.color_utils import Colors, colored, format_path, print_error, print_warning, set_color_enabled, should_use_color
from lydep.constants import EXIT_INVALID_ARGS, EXIT_KEYBOARD_INTERRUPT, EXIT_RUNTIME_ERROR, EXIT_SUCCESS, LyDepError, ProjectDirectoryError
from lydep.graph_utils import affected_sources, build_dependency_graph, transitive_includes
from lydep.layout import OutputGroup, ProjectLayout, load_layout
from lydep.makefile_assembler import assemble_makefile
from lydep.path_utils import to_project_path

GENERATOR_NAME = "lyDepMakefile.py"


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse and return command line arguments."""
    parser = argparse.ArgumentParser(
        description="Show which LilyPond outputs are rebuilt when source files change.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("project_directory", metavar="PROJECT_DIR", help="LilyPond project root")
    parser.add_argument("files", metavar="FILE", nargs="+", help="Changed source files, relative to PROJECT_DIR")
    parser.add_argument("--deps", action="store_true", help="Also list the transitive includes of each file")
    parser.add_argument("--config", metavar="FILE", help="JSON layout file, as for lyDepMakefile.py")
    parser.add_argument("--main", metavar="FILE", help="Main score relative to PROJECT_DIR")
    parser.add_argument("--group", action="append", metavar="NAME:GLOB:EXT", help="Output group (can be used multiple times)")
    parser.add_argument("--exclude", action="append", metavar="PATTERN", help="Leave matching source files out (can be used multiple times)")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose debug logging")

    return parser.parse_args(argv)


def to_project_file(project_dir: str, path: str) -> str:
    """Express a command-line file argument as a "./" project path."""
    if os.path.isabs(path):
        path = os.path.relpath(path, project_dir)
    return to_project_path(os.path.normpath(path))


def impacted_outputs(outputs: Dict[str, str], affected: List[str]) -> List[str]:
    """Outputs whose score is among the affected files, in entry point order."""
    affected_set = set(affected)
    return [output for output, source in outputs.items() if source in affected_set]


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the impact tool.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    args = parse_arguments(argv)

    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
    logging.getLogger().setLevel(level)
    set_color_enabled(should_use_color(sys.stdout, args.no_color))

    project_dir = os.path.abspath(args.project_directory)
    if not os.path.isdir(project_dir):
        raise ProjectDirectoryError(f"'{args.project_directory}' is not a directory")

    layout = load_layout(args.config) if args.config else ProjectLayout()
    layout = layout.with_overrides(
        main=args.main,
        groups=tuple(OutputGroup.parse(spec) for spec in args.group) if args.group else None,
        exclude=tuple(args.exclude) if args.exclude else None,
    )

    result = assemble_makefile(project_dir, layout, GENERATOR_NAME)
    graph = build_dependency_graph(result.include_map)

    for path in args.files:
        changed = to_project_file(project_dir, path)
        print(colored(f"Changed: {changed}", Colors.BRIGHT))
        if changed not in graph:
            print_warning(f"{changed} is not a tracked source file")
            continue

        outputs = impacted_outputs(result.outputs, sorted(affected_sources(graph, [changed])))
        if outputs:
            print(f"  Rebuilds {len(outputs)} output{'s' if len(outputs) != 1 else ''}:")
            for output in outputs:
                print(f"    {format_path(output)}  {colored('(' + result.outputs[output] + ')', Colors.DIM)}")
        else:
            print(colored("  No rendered output depends on it", Colors.GREEN))

        if args.deps:
            includes = sorted(transitive_includes(graph, changed))
            print(f"  Includes {len(includes)} local file{'s' if len(includes) != 1 else ''}:")
            for include in includes:
                print(f"    {include}")

    return EXIT_SUCCESS


def run(argv: Optional[List[str]] = None) -> int:
    """Run main() and map failures to exit codes."""
    try:
        return main(argv)
    except KeyboardInterrupt:
        print_warning("Interrupted by user", prefix=False)
        return EXIT_KEYBOARD_INTERRUPT
    except LyDepError as e:
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
