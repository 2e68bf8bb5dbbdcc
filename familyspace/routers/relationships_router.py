import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from familyspace.database import get_db
from familyspace.auth import get_current_user
from familyspace.models.user import User
from familyspace.models.relationship import Relationship
from familyspace.core.branch import would_create_cycle
from familyspace.core.permissions import (
    check_edit_permission,
    require_space,
    require_writable_space,
)
from familyspace.routers.people_router import require_person_in_space
from familyspace.schemas.relationship_schema import (
    RelationshipCreate,
    RelationshipOut,
    SUBTYPES,
    DEFAULT_SUBTYPE,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/spaces/{space_id}/relationships", tags=["Relationships"])


def _find_duplicate(db: Session, space_id: str, payload: RelationshipCreate):
    same_direction = and_(
        Relationship.from_id == payload.from_id,
        Relationship.to_id == payload.to_id,
    )

    if payload.type == "SPOUSE":
        reverse = and_(
            Relationship.from_id == payload.to_id,
            Relationship.to_id == payload.from_id,
        )
        match = or_(same_direction, reverse)
    else:
        match = same_direction

    return db.query(Relationship).filter(
        Relationship.space_id == space_id,
        Relationship.type == payload.type,
        match,
    ).first()


# ============================================================
# CREATE RELATIONSHIP
# ============================================================

@router.post("", response_model=RelationshipOut, status_code=201)
def create_relationship(
    space_id: str,
    payload: RelationshipCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    space = require_writable_space(db, space_id)

    if payload.from_id == payload.to_id:
        raise HTTPException(400, "A person cannot be related to themselves")

    require_person_in_space(db, space.id, payload.from_id)
    require_person_in_space(db, space.id, payload.to_id)

    # Edit rights are checked against the "from" person (the parent for PARENT_CHILD)
    check_edit_permission(db, space.id, current_user, payload.from_id)

    subtype = payload.subtype or DEFAULT_SUBTYPE[payload.type]
    if subtype not in SUBTYPES[payload.type]:
        raise HTTPException(400, f"Invalid subtype '{subtype}' for {payload.type}")

    if (
        payload.start_year is not None
        and payload.end_year is not None
        and payload.end_year < payload.start_year
    ):
        raise HTTPException(400, "end_year cannot be before start_year")

    if _find_duplicate(db, space.id, payload):
        raise HTTPException(409, "This relationship already exists")

    if payload.type == "PARENT_CHILD" and would_create_cycle(
        db, space.id, payload.from_id, payload.to_id
    ):
        raise HTTPException(400, "A person cannot be their own ancestor")

    rel = Relationship(
        space_id=space.id,
        type=payload.type,
        subtype=subtype,
        from_id=payload.from_id,
        to_id=payload.to_id,
        start_year=payload.start_year,
        end_year=payload.end_year,
        created_at=datetime.utcnow(),
    )

    db.add(rel)
    db.commit()
    db.refresh(rel)

    logger.info(
        "space %s: %s %s -> %s added by %s",
        space.id, rel.type, rel.from_id, rel.to_id, current_user.id,
    )
    return rel


# ============================================================
# LIST (public)
# ============================================================

@router.get("", response_model=list[RelationshipOut])
def list_relationships(
    space_id: str,
    db: Session = Depends(get_db),
):
    space = require_space(db, space_id)
    return (
        db.query(Relationship)
        .filter(Relationship.space_id == space.id)
        .order_by(Relationship.created_at.asc())
        .all()
    )


# ============================================================
# DELETE RELATIONSHIP
# ============================================================

@router.delete("/{relationship_id}")
def delete_relationship(
    space_id: str,
    relationship_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    space = require_writable_space(db, space_id)

    rel = db.query(Relationship).filter(
        Relationship.id == relationship_id,
        Relationship.space_id == space.id,
    ).first()
    if not rel:
        raise HTTPException(404, "Relationship not found")

    check_edit_permission(db, space.id, current_user, rel.from_id)

    db.delete(rel)
    db.commit()

    logger.info("space %s: relationship %s deleted by %s", space.id, relationship_id, current_user.id)
    return {"status": "deleted", "id": relationship_id}
