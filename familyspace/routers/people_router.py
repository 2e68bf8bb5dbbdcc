import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import or_
from sqlalchemy.orm import Session

from familyspace.config import settings
from familyspace.database import get_db
from familyspace.auth import get_current_user, get_optional_user
from familyspace.models.user import User
from familyspace.models.person import Person
from familyspace.models.relationship import Relationship
from familyspace.models.claim_request import ClaimRequest
from familyspace.core.permissions import (
    EditScope,
    check_edit_permission,
    require_can_add_people,
    require_space,
    require_writable_space,
)
from familyspace.core.person_visibility import serialize_person
from familyspace.schemas.person_schema import PersonCreate, PersonUpdate, PersonOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/spaces/{space_id}/people", tags=["People"])

# Columns that can never be null, so an explicit null in an update is ignored
NOT_NULL_FIELDS = ("first_name", "last_name", "is_private", "hide_birth_year")


# ============================================================
# HELPERS
# ============================================================

def require_person_in_space(db: Session, space_id: str, person_id: str) -> Person:
    person = db.query(Person).filter(
        Person.id == person_id,
        Person.space_id == space_id,
    ).first()
    if not person:
        raise HTTPException(404, "Person not found")
    return person


def _claimed_by(db: Session, person_id: str) -> Optional[str]:
    row = db.query(User.id).filter(User.person_id == person_id).first()
    return row[0] if row else None


def _person_out(db: Session, person: Person, viewer: Optional[User]) -> dict:
    scope = EditScope(db, person.space_id, viewer)
    return serialize_person(
        person,
        is_member=scope.is_member,
        can_edit=scope.can_edit(person.id),
        claimed_by_user_id=_claimed_by(db, person.id),
    )


# ============================================================
# CREATE PERSON
# ============================================================

@router.post("", response_model=PersonOut, status_code=201)
def create_person(
    space_id: str,
    payload: PersonCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    space = require_writable_space(db, space_id)
    require_can_add_people(db, space.id, current_user)

    person = Person(space_id=space.id, **payload.model_dump())

    db.add(person)
    db.commit()
    db.refresh(person)

    logger.info("user %s added person %s to space %s", current_user.id, person.id, space.id)
    return _person_out(db, person, current_user)


# ============================================================
# LIST (public)
# ============================================================

@router.get("", response_model=list[PersonOut])
def list_people(
    space_id: str,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    space = require_space(db, space_id)
    scope = EditScope(db, space.id, current_user)

    people = (
        db.query(Person)
        .filter(Person.space_id == space.id)
        .order_by(Person.first_name.asc())
        .all()
    )

    return [
        serialize_person(p, is_member=scope.is_member, can_edit=scope.can_edit(p.id))
        for p in people
    ]


# ============================================================
# SEARCH (public)
# ============================================================

@router.get("/search", response_model=list[PersonOut])
def search_people(
    space_id: str,
    query: str = "",
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    space = require_space(db, space_id)

    q = (query or "").strip()
    if not q:
        return []

    # % and _ are matched literally
    escaped = q.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    pattern = f"%{escaped}%"
    people = (
        db.query(Person)
        .filter(Person.space_id == space.id)
        .filter(
            or_(
                Person.first_name.ilike(pattern, escape="\\"),
                Person.last_name.ilike(pattern, escape="\\"),
                Person.first_name_ar.ilike(pattern, escape="\\"),
                Person.last_name_ar.ilike(pattern, escape="\\"),
                Person.nickname.ilike(pattern, escape="\\"),
            )
        )
        .order_by(Person.first_name.asc())
        .limit(settings.SEARCH_LIMIT)
        .all()
    )

    scope = EditScope(db, space.id, current_user)
    return [
        serialize_person(p, is_member=scope.is_member, can_edit=scope.can_edit(p.id))
        for p in people
    ]


# ============================================================
# GET ONE (public)
# ============================================================

@router.get("/{person_id}", response_model=PersonOut)
def get_person(
    space_id: str,
    person_id: str,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    space = require_space(db, space_id)
    person = require_person_in_space(db, space.id, person_id)
    return _person_out(db, person, current_user)


# ============================================================
# UPDATE
# ============================================================

@router.put("/{person_id}", response_model=PersonOut)
def update_person(
    space_id: str,
    person_id: str,
    payload: PersonUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    space = require_writable_space(db, space_id)
    person = require_person_in_space(db, space.id, person_id)

    check_edit_permission(db, space.id, current_user, person.id)

    changes = payload.model_dump(exclude_unset=True)
    for field in NOT_NULL_FIELDS:
        if field in changes and changes[field] is None:
            del changes[field]

    birth_year = changes.get("birth_year", person.birth_year)
    death_year = changes.get("death_year", person.death_year)
    if birth_year is not None and death_year is not None and death_year < birth_year:
        raise HTTPException(400, "death_year cannot be before birth_year")

    for field, value in changes.items():
        setattr(person, field, value)

    person.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(person)

    return _person_out(db, person, current_user)


# ============================================================
# DELETE
# ============================================================

@router.delete("/{person_id}")
def delete_person(
    space_id: str,
    person_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    space = require_writable_space(db, space_id)
    person = require_person_in_space(db, space.id, person_id)

    check_edit_permission(db, space.id, current_user, person.id)

    # ------------------------------------------------------------
    # STEP 1: Remove every relationship touching this person
    # ------------------------------------------------------------
    removed = db.query(Relationship).filter(
        Relationship.space_id == space.id,
        or_(
            Relationship.from_id == person.id,
            Relationship.to_id == person.id,
        ),
    ).delete(synchronize_session=False)

    # ------------------------------------------------------------
    # STEP 2: Detach whoever claimed this person, drop their claims
    # ------------------------------------------------------------
    db.query(User).filter(User.person_id == person.id).update(
        {"person_id": None}, synchronize_session=False
    )
    db.query(ClaimRequest).filter(ClaimRequest.person_id == person.id).delete(
        synchronize_session=False
    )

    # ------------------------------------------------------------
    # STEP 3: Delete the person
    # ------------------------------------------------------------
    db.delete(person)
    db.commit()

    logger.info(
        "user %s deleted person %s (%d relationships) from space %s",
        current_user.id, person_id, removed, space.id,
    )
    return {"status": "deleted", "id": person_id, "relationships_removed": removed}
