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
"""Include graph construction and queries using NetworkX."""

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple

import networkx as nx

from .dependency_utils import resolve_include_targets

logger = logging.getLogger(__name__)


def scan_include_graph(root_dir: str, sources: Sequence[str], strict: bool = False) -> Dict[str, List[str]]:
    """Resolve the direct local includes of every source file.

    Files that are included but were not enumerated (an excluded file, or a
    local file with another extension) are scanned too, so every record named
    as a prerequisite also gets a rule.

    Args:
        root_dir: Project root directory
        sources: Project paths to start from
        strict: Warn about malformed \\include directives

    Returns:
        Mapping of each scanned file to its sorted direct local includes
    """
    include_map: Dict[str, List[str]] = {}
    pending = list(sources)

    while pending:
        source = pending.pop()
        if source in include_map:
            continue
        targets = resolve_include_targets(root_dir, source, strict=strict)
        include_map[source] = targets
        pending.extend(target for target in targets if target not in include_map)

    extra = sorted(set(include_map) - set(sources))
    if extra:
        logger.info("Tracking %d included files outside the source list: %s", len(extra), ", ".join(extra))

    edge_count = sum(len(targets) for targets in include_map.values())
    logger.info("Built include graph with %s direct local includes between %s files", edge_count, len(include_map))
    return include_map


def build_dependency_graph(include_map: Dict[str, Iterable[str]]) -> "nx.DiGraph[Any]":
    """Build a NetworkX directed graph; an edge A -> B means A includes B.

    Args:
        include_map: Mapping of files to their direct includes

    Returns:
        NetworkX DiGraph
    """
    G: nx.DiGraph[str] = nx.DiGraph()
    G.add_nodes_from(include_map)
    G.add_edges_from((source, target) for source, targets in include_map.items() for target in targets)

    logger.debug("Built graph with %s nodes and %s edges", G.number_of_nodes(), G.number_of_edges())
    return G


def find_include_cycle(graph: "nx.DiGraph[Any]") -> Optional[Tuple[str, ...]]:
    """Find one include cycle, if any.

    Returns:
        The files of the cycle with the first repeated at the end
        (("a.ily", "b.ily", "a.ily")), or None for an acyclic graph
    """
    if nx.is_directed_acyclic_graph(graph):
        return None
    # Start from the smallest node that is on a cycle so the report is stable
    for node in sorted(graph.nodes()):
        try:
            edges = nx.find_cycle(graph, source=node)
        except nx.NetworkXNoCycle:
            continue
        cycle = [edges[0][0]] + [target for _, target in edges]
        return tuple(cycle)
    return None


def transitive_includes(graph: "nx.DiGraph[Any]", source: str) -> Set[str]:
    """All files a source depends on through any chain of includes."""
    if source not in graph:
        return set()
    return set(nx.descendants(graph, source))


def affected_sources(graph: "nx.DiGraph[Any]", changed: Iterable[str]) -> Set[str]:
    """Files whose include closure contains any of the changed files, including the changed files themselves.

    Args:
        graph: Include graph
        changed: Project paths of modified files

    Returns:
        Set of project paths that must be considered out of date
    """
    affected: Set[str] = set()
    for path in changed:
        if path not in graph:
            logger.warning("%s is not part of the include graph", path)
            continue
        affected.add(path)
        affected.update(nx.ancestors(graph, path))
    return affected
