"""
Layered (top-to-bottom) layout for the visible part of a family tree.

Couples share a rank: each spouse pair is collapsed into one wide unit
whose partner is drawn directly to the right of the primary person.
"""

from typing import Any, Iterable, Sequence

import networkx as nx

NODE_WIDTH = 220
NODE_HEIGHT = 80
SPOUSE_GAP = 40
NODE_SEP = 60
RANK_SEP = 100
MARGIN_X = 40
MARGIN_Y = 40

ORDER_SWEEPS = 6


def pair_spouses(spouse_pairs: Iterable[tuple[str, str]]) -> tuple[dict[str, str], list[str]]:
    """
    Returns (partner -> primary, primaries in pairing order).

    First come, first served: a person who is already part of a unit is
    never paired again, so every unit holds at most two people.
    """
    partner_of: dict[str, str] = {}
    primaries: list[str] = []
    paired: set[str] = set()

    for a, b in spouse_pairs:
        if a == b or a in paired or b in paired:
            continue
        primaries.append(a)
        partner_of[b] = a
        paired.update((a, b))

    return partner_of, primaries


def _break_cycles(graph: nx.DiGraph) -> None:
    while True:
        try:
            cycle = nx.find_cycle(graph)
        except nx.NetworkXNoCycle:
            return
        source, target = cycle[-1][:2]
        graph.remove_edge(source, target)


def assign_ranks(graph: nx.DiGraph) -> dict[str, int]:
    """Longest path from the roots, then roots pulled down next to their children."""
    rank: dict[str, int] = {}
    for node in nx.topological_sort(graph):
        preds = list(graph.predecessors(node))
        rank[node] = max(rank[p] + 1 for p in preds) if preds else 0

    for node in graph.nodes:
        if graph.in_degree(node) == 0 and graph.out_degree(node) > 0:
            rank[node] = min(rank[s] for s in graph.successors(node)) - 1

    return rank


def _order_layers(graph: nx.DiGraph, rank: dict[str, int]) -> dict[int, list[str]]:
    layers: dict[int, list[str]] = {}
    for node in graph.nodes:
        layers.setdefault(rank[node], []).append(node)

    position = {node: i for layer in layers.values() for i, node in enumerate(layer)}
    ordered_ranks = sorted(layers)

    def sort_layer(layer: list[str], neighbours) -> list[str]:
        def key(item):
            index, node = item
            seen = [position[n] for n in neighbours(node)]
            return (sum(seen) / len(seen) if seen else index, index)

        return [node for _, node in sorted(enumerate(layer), key=key)]

    for sweep in range(ORDER_SWEEPS):
        if sweep % 2 == 0:
            walk, neighbours = ordered_ranks[1:], graph.predecessors
        else:
            walk, neighbours = list(reversed(ordered_ranks))[1:], graph.successors

        for r in walk:
            layers[r] = sort_layer(layers[r], neighbours)
            for i, node in enumerate(layers[r]):
                position[node] = i

    return layers


def layout(
    person_ids: Sequence[str],
    parent_child_edges: Iterable[tuple[str, str]],
    spouse_pairs: Iterable[tuple[str, str]],
    direction: str = "TB",
) -> dict[str, Any]:
    """
    Compute top-left positions for every person.

    Returns {"positions": {person_id: {"x", "y"}}, "width", "height"}.
    """
    if not person_ids:
        return {"positions": {}, "width": 0, "height": 0}

    known = set(person_ids)
    partner_of, primaries = pair_spouses(
        (a, b) for a, b in spouse_pairs if a in known and b in known
    )
    primary_set = set(primaries)

    graph = nx.DiGraph()
    for pid in person_ids:
        if pid not in partner_of:
            graph.add_node(pid)

    for parent, child in parent_child_edges:
        src = partner_of.get(parent, parent)
        tgt = partner_of.get(child, child)
        if src == tgt or src not in graph or tgt not in graph:
            continue
        graph.add_edge(src, tgt)

    _break_cycles(graph)

    rank = assign_ranks(graph)
    layers = _order_layers(graph, rank)

    def width_of(unit: str) -> int:
        return 2 * NODE_WIDTH + SPOUSE_GAP if unit in primary_set else NODE_WIDTH

    # Centre every unit under its parents, pushing right to avoid overlaps
    centre: dict[str, float] = {}
    for r in sorted(layers):
        cursor = 0.0
        for unit in layers[r]:
            w = width_of(unit)
            placed = [centre[p] for p in graph.predecessors(unit) if p in centre]
            want = sum(placed) / len(placed) if placed else cursor + w / 2
            centre[unit] = max(want, cursor + w / 2)
            cursor = centre[unit] + w / 2 + NODE_SEP

    shift = MARGIN_X - min(centre[u] - width_of(u) / 2 for u in centre)
    max_rank = max(rank.values())

    positions: dict[str, dict[str, float]] = {}
    right_edge = 0.0
    for unit, c in centre.items():
        left = c - width_of(unit) / 2 + shift
        level = max_rank - rank[unit] if direction == "BT" else rank[unit]
        top = MARGIN_Y + level * (NODE_HEIGHT + RANK_SEP)

        positions[unit] = {"x": left, "y": top}
        right_edge = max(right_edge, left + width_of(unit))

    for partner, primary in partner_of.items():
        base = positions[primary]
        positions[partner] = {"x": base["x"] + NODE_WIDTH + SPOUSE_GAP, "y": base["y"]}

    return {
        "positions": positions,
        "width": right_edge + MARGIN_X,
        "height": 2 * MARGIN_Y + (max_rank + 1) * NODE_HEIGHT + max_rank * RANK_SEP,
    }
