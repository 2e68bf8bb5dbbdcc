from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from familyspace.config import settings
from familyspace.database import get_db
from familyspace.auth import get_optional_user
from familyspace.models.user import User
from familyspace.models.person import Person
from familyspace.models.relationship import Relationship
from familyspace.core.branch import get_descendant_ids
from familyspace.core.permissions import EditScope, require_space
from familyspace.core.person_visibility import serialize_person
from familyspace.core.tree_view import build_tree_view
from familyspace.routers.people_router import require_person_in_space
from familyspace.schemas.relationship_schema import RelationshipOut

router = APIRouter(prefix="/spaces/{space_id}/tree", tags=["Family Tree"])


def _load_tree(db: Session, space_id: str) -> tuple[list[Person], list[Relationship]]:
    people = (
        db.query(Person)
        .filter(Person.space_id == space_id)
        .order_by(Person.first_name.asc())
        .all()
    )
    relationships = (
        db.query(Relationship)
        .filter(Relationship.space_id == space_id)
        .order_by(Relationship.created_at.asc())
        .all()
    )
    return people, relationships


# ============================================================
# FULL TREE DATA (public)
# ============================================================

@router.get("")
def get_tree(
    space_id: str,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    space = require_space(db, space_id)
    people, relationships = _load_tree(db, space.id)
    scope = EditScope(db, space.id, current_user)

    return {
        "space_id": space.id,
        "people": [
            serialize_person(p, is_member=scope.is_member, can_edit=scope.can_edit(p.id))
            for p in people
        ],
        "relationships": [
            RelationshipOut.model_validate(r).model_dump() for r in relationships
        ],
    }


# ============================================================
# FOCUSED VIEW + LAYOUT (public)
# ============================================================

@router.get("/view")
def get_tree_view(
    space_id: str,
    focus_person_id: Optional[str] = None,
    layout_mode: Literal["mixed", "ancestors", "descendants"] = "mixed",
    generations: int = Query(settings.DEFAULT_GENERATIONS, ge=1, le=settings.MAX_GENERATIONS),
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    """
    Nodes (with positions) and edges for the visible part of the tree.
    An unknown focus person falls back to showing everyone.
    """
    space = require_space(db, space_id)
    people, relationships = _load_tree(db, space.id)
    scope = EditScope(db, space.id, current_user)

    view = build_tree_view(
        people,
        relationships,
        focus_person_id=focus_person_id,
        layout_mode=layout_mode,
        generations=generations,
        serialize_person=lambda p: serialize_person(
            p, is_member=scope.is_member, can_edit=scope.can_edit(p.id)
        ),
        can_edit=scope.can_edit,
    )
    view["space_id"] = space.id
    return view


# ============================================================
# BRANCH (public)
# ============================================================

@router.get("/branch/{person_id}")
def get_branch(
    space_id: str,
    person_id: str,
    db: Session = Depends(get_db),
):
    space = require_space(db, space_id)
    person = require_person_in_space(db, space.id, person_id)

    return {
        "person_id": person.id,
        "descendant_ids": sorted(get_descendant_ids(db, space.id, person.id)),
    }
