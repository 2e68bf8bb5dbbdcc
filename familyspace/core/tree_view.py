"""
Which people a tree view shows, and how the visible graph is drawn.

The view is centred on an optional focus person and expanded breadth-first
across parent, child and spouse edges up to a number of generations.
"""

from collections import deque
from typing import Any, Callable, Iterable, Optional, Sequence

from familyspace.core.layout import layout


def _adjacency(relationships: Iterable) -> tuple[dict, dict, list]:
    children_of: dict[str, list[str]] = {}
    parents_of: dict[str, list[str]] = {}
    spouse_edges: list[tuple[str, str]] = []

    for rel in relationships:
        if rel.type == "PARENT_CHILD":
            children_of.setdefault(rel.from_id, []).append(rel.to_id)
            parents_of.setdefault(rel.to_id, []).append(rel.from_id)
        elif rel.type == "SPOUSE":
            spouse_edges.append((rel.from_id, rel.to_id))

    return children_of, parents_of, spouse_edges


def visible_person_ids(
    person_ids: Iterable[str],
    relationships: Iterable,
    focus_person_id: Optional[str],
    layout_mode: str = "mixed",
    generations: int = 5,
) -> set[str]:
    """
    Without a (known) focus person everyone is visible.

    Otherwise: BFS from the focus. Spouses join at the same depth, parents
    are one generation up and children one generation down. "ancestors"
    never walks to children, "descendants" never walks to parents. Items
    at depth >= generations are shown but not expanded.
    """
    person_ids = list(person_ids)
    if not focus_person_id or focus_person_id not in set(person_ids):
        return set(person_ids)

    children_of, parents_of, spouse_edges = _adjacency(relationships)

    visible: set[str] = set()
    expanded: set[tuple[str, str]] = set()
    queue = deque([(focus_person_id, 0, "down")])

    while queue:
        pid, depth, direction = queue.popleft()
        if (pid, direction) in expanded:
            continue
        expanded.add((pid, direction))
        visible.add(pid)

        if depth >= generations:
            continue

        for a, b in spouse_edges:
            if a == pid:
                visible.add(b)
                queue.append((b, depth, direction))
            if b == pid:
                visible.add(a)
                queue.append((a, depth, direction))

        if layout_mode != "descendants":
            for parent in parents_of.get(pid, []):
                queue.append((parent, depth + 1, "up"))

        if layout_mode != "ancestors":
            for child in children_of.get(pid, []):
                queue.append((child, depth + 1, "down"))

    return visible


def _parent_child_edge(rel, parent_gender: Optional[str]) -> dict[str, Any]:
    adoptive = rel.subtype in ("adoptive", "guardian")
    if adoptive:
        line = "adoptive"
    elif parent_gender == "male":
        line = "paternal"
    else:
        line = "maternal"

    return {
        "id": rel.id,
        "source": rel.from_id,
        "target": rel.to_id,
        "kind": "parent_child",
        "subtype": rel.subtype,
        "line": line,
        "dashed": adoptive,
        "label": rel.subtype if rel.subtype and rel.subtype != "biological" else None,
    }


def _spouse_edge(rel) -> dict[str, Any]:
    if rel.subtype == "partner":
        label = "Partner"
    elif rel.start_year:
        label = str(rel.start_year)
    else:
        label = None

    return {
        "id": rel.id,
        "source": rel.from_id,
        "target": rel.to_id,
        "kind": "spouse",
        "subtype": rel.subtype,
        "line": "spouse",
        "dashed": True,
        "label": label,
    }


def build_tree_view(
    people: Sequence,
    relationships: Sequence,
    focus_person_id: Optional[str] = None,
    layout_mode: str = "mixed",
    generations: int = 5,
    serialize_person: Callable[[Any], dict] = lambda p: {"id": p.id},
    can_edit: Callable[[str], bool] = lambda pid: False,
) -> dict[str, Any]:
    direction = "BT" if layout_mode == "ancestors" else "TB"

    out: dict[str, Any] = {
        "focus_person_id": focus_person_id,
        "layout_mode": layout_mode,
        "generations": generations,
        "direction": direction,
        "nodes": [],
        "edges": [],
        "width": 0,
        "height": 0,
    }

    if not people:
        return out

    person_by_id = {p.id: p for p in people}
    visible = visible_person_ids(
        person_by_id.keys(), relationships, focus_person_id, layout_mode, generations
    )
    ordered = [p.id for p in people if p.id in visible]

    children_of, parents_of, _ = _adjacency(relationships)

    edges: list[dict[str, Any]] = []
    parent_child_pairs: list[tuple[str, str]] = []
    spouse_pairs: list[tuple[str, str]] = []

    for rel in relationships:
        if rel.from_id not in visible or rel.to_id not in visible:
            continue
        if rel.type == "PARENT_CHILD":
            parent = person_by_id.get(rel.from_id)
            edges.append(_parent_child_edge(rel, parent.gender if parent else None))
            parent_child_pairs.append((rel.from_id, rel.to_id))
        elif rel.type == "SPOUSE":
            edges.append(_spouse_edge(rel))
            spouse_pairs.append((rel.from_id, rel.to_id))

    laid = layout(ordered, parent_child_pairs, spouse_pairs, direction)

    out["nodes"] = [
        {
            "id": pid,
            "person": serialize_person(person_by_id[pid]),
            "position": laid["positions"].get(pid, {"x": 0, "y": 0}),
            "focused": pid == focus_person_id,
            "has_children": bool(children_of.get(pid)),
            "has_parents": bool(parents_of.get(pid)),
            "can_edit": can_edit(pid),
        }
        for pid in ordered
    ]
    out["edges"] = edges
    out["width"] = laid["width"]
    out["height"] = laid["height"]
    return out
