"""Descendant ("branch") traversal over PARENT_CHILD edges."""

from typing import Iterable

import networkx as nx
from sqlalchemy.orm import Session

from familyspace.models.relationship import Relationship


def parent_child_graph(edges: Iterable[tuple[str, str]]) -> nx.DiGraph:
    """Build a parent -> child DiGraph from (parent_id, child_id) pairs."""
    graph = nx.DiGraph()
    graph.add_edges_from(edges)
    return graph


def descendants_of(edges: Iterable[tuple[str, str]], person_id: str) -> set[str]:
    """
    Every person reachable from person_id by walking parent -> child edges.

    The start person is only included if a cycle leads back to it.
    """
    graph = parent_child_graph(edges)
    if person_id not in graph:
        return set()

    found = set(nx.descendants(graph, person_id))

    # nx.descendants never returns the source; a cycle through it still counts
    if any(graph.has_edge(n, person_id) for n in found | {person_id}):
        found.add(person_id)

    return found


def load_parent_child_edges(db: Session, space_id: str) -> list[tuple[str, str]]:
    rows = (
        db.query(Relationship.from_id, Relationship.to_id)
        .filter(
            Relationship.space_id == space_id,
            Relationship.type == "PARENT_CHILD",
        )
        .all()
    )
    return [(from_id, to_id) for from_id, to_id in rows]


def get_descendant_ids(db: Session, space_id: str, person_id: str) -> set[str]:
    return descendants_of(load_parent_child_edges(db, space_id), person_id)


def get_branch_ids(db: Session, space_id: str, person_id: str) -> set[str]:
    """A person plus all of their descendants: what a claimer may edit."""
    ids = get_descendant_ids(db, space_id, person_id)
    ids.add(person_id)
    return ids


def would_create_cycle(db: Session, space_id: str, parent_id: str, child_id: str) -> bool:
    """True if adding parent -> child would make someone their own ancestor."""
    if parent_id == child_id:
        return True
    return parent_id in get_descendant_ids(db, space_id, child_id)
