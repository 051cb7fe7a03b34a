"""Reference graph analysis across the formulas of one worksheet."""

import logging
from collections import deque
from typing import Optional

from .references import reference_contains, split_sheet

logger = logging.getLogger(__name__)


def build_reference_graph(formulas: dict[str, list[str]]) -> dict[str, list[str]]:
    """
    Build edges from each formula cell to the formula cells it references.

    Args:
        formulas: Formula cell coordinate -> references used by that formula.
            Sheet-qualified references are ignored.

    Returns:
        Adjacency list keyed by formula cell, in input order
    """
    graph: dict[str, list[str]] = {cell: [] for cell in formulas}
    for cell, references in formulas.items():
        local_refs = [ref for ref in references if split_sheet(ref)[0] is None]
        for other in formulas:
            if other == cell:
                continue
            if any(reference_contains(ref, other) for ref in local_refs):
                graph[cell].append(other)
    return graph


def _strongly_connected(graph: dict[str, list[str]]) -> list[list[str]]:
    """Iterative Tarjan; components come back in discovery order."""
    index_of: dict[str, int] = {}
    lowlink: dict[str, int] = {}
    on_stack: set[str] = set()
    stack: list[str] = []
    components: list[list[str]] = []
    counter = 0

    for root in graph:
        if root in index_of:
            continue
        work = [(root, iter(graph[root]))]
        index_of[root] = lowlink[root] = counter
        counter += 1
        stack.append(root)
        on_stack.add(root)

        while work:
            node, successors = work[-1]
            advanced = False
            for succ in successors:
                if succ not in index_of:
                    index_of[succ] = lowlink[succ] = counter
                    counter += 1
                    stack.append(succ)
                    on_stack.add(succ)
                    work.append((succ, iter(graph[succ])))
                    advanced = True
                    break
                if succ in on_stack:
                    lowlink[node] = min(lowlink[node], index_of[succ])
            if advanced:
                continue

            work.pop()
            if work:
                parent = work[-1][0]
                lowlink[parent] = min(lowlink[parent], lowlink[node])

            if lowlink[node] == index_of[node]:
                component = []
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    component.append(member)
                    if member == node:
                        break
                components.append(list(reversed(component)))

    return components


def _cycle_through(start: str, members: set[str], graph: dict[str, list[str]]) -> Optional[list[str]]:
    """Shortest cycle from ``start`` back to itself inside one component."""
    previous: dict[str, str] = {}
    queue = deque([start])
    seen = {start}
    while queue:
        node = queue.popleft()
        for succ in graph[node]:
            if succ not in members:
                continue
            if succ == start:
                path = [node]
                while path[-1] != start:
                    path.append(previous[path[-1]])
                return list(reversed(path))
            if succ not in seen:
                seen.add(succ)
                previous[succ] = node
                queue.append(succ)
    return None


def find_reference_cycles(formulas: dict[str, list[str]]) -> list[list[str]]:
    """
    Find circular references of length two or more between formula cells.

    Self-references are reported by the validator and are not repeated here.

    Returns:
        One cycle per strongly connected group, as an ordered list of cells
        starting from the group's first cell
    """
    graph = build_reference_graph(formulas)
    cycles = []
    for component in _strongly_connected(graph):
        if len(component) < 2:
            continue
        start = min(component, key=list(graph).index)
        cycle = _cycle_through(start, set(component), graph)
        if cycle:
            logger.debug(f"Reference cycle found: {' -> '.join(cycle)}")
            cycles.append(cycle)
    return cycles
