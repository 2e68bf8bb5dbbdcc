import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from familyspace.core.branch import get_branch_ids
from familyspace.models.family_space import FamilySpace
from familyspace.models.membership import Membership
from familyspace.models.person import Person
from familyspace.models.user import User

logger = logging.getLogger(__name__)

ROLE_RANK = {"VIEWER": 0, "EDITOR": 1, "OWNER": 2}


def get_membership(db: Session, space_id: str, user_id: str) -> Optional[Membership]:
    return db.query(Membership).filter(
        Membership.space_id == space_id,
        Membership.user_id == user_id,
    ).first()


def require_space(db: Session, space_id: str) -> FamilySpace:
    space = db.query(FamilySpace).filter(FamilySpace.id == space_id).first()
    if not space:
        raise HTTPException(404, "Family space not found")
    return space


def require_writable_space(db: Session, space_id: str) -> FamilySpace:
    space = require_space(db, space_id)
    if space.is_archived:
        raise HTTPException(400, "This family space has been archived")
    return space


def require_membership(
    db: Session,
    space_id: str,
    user: User,
    min_role: str = "VIEWER",
) -> Membership:
    membership = get_membership(db, space_id, user.id)
    if not membership:
        logger.warning("user %s is not a member of space %s", user.id, space_id)
        raise HTTPException(403, "Not a member of this space")

    if ROLE_RANK.get(membership.role, -1) < ROLE_RANK[min_role]:
        logger.warning(
            "user %s has role %s in space %s, needs %s",
            user.id, membership.role, space_id, min_role,
        )
        raise HTTPException(403, "Insufficient permissions")

    return membership


def is_editor(membership: Optional[Membership]) -> bool:
    return membership is not None and ROLE_RANK.get(membership.role, -1) >= ROLE_RANK["EDITOR"]


def claimed_person_in_space(db: Session, space_id: str, user: Optional[User]) -> Optional[str]:
    """The id of the person this user claimed, if that person lives in this space."""
    if user is None or not user.person_id:
        return None

    in_space = db.query(Person.id).filter(
        Person.id == user.person_id,
        Person.space_id == space_id,
    ).first()

    return user.person_id if in_space else None


def effective_role(db: Session, space_id: str, user: Optional[User]) -> str:
    """
    Role shown to the caller. CLAIMER is never stored: it is derived when a
    plain viewer (or a non-member) has a claimed person in this space.
    """
    if user is None:
        return "VIEWER"

    membership = get_membership(db, space_id, user.id)
    role = membership.role if membership else "VIEWER"

    if role == "VIEWER" and claimed_person_in_space(db, space_id, user):
        return "CLAIMER"

    return role


class EditScope:
    """What a caller may edit in one space, resolved once per request."""

    def __init__(self, db: Session, space_id: str, user: Optional[User]):
        self.membership = get_membership(db, space_id, user.id) if user else None
        self.all_people = is_editor(self.membership)
        self.claimed_person_id = claimed_person_in_space(db, space_id, user)

        self.branch_ids: set[str] = set()
        if not self.all_people and self.claimed_person_id:
            self.branch_ids = get_branch_ids(db, space_id, self.claimed_person_id)

    @property
    def is_member(self) -> bool:
        return self.membership is not None

    def can_edit(self, person_id: str) -> bool:
        return self.all_people or person_id in self.branch_ids


def check_edit_permission(
    db: Session,
    space_id: str,
    user: User,
    person_id: str,
) -> Optional[Membership]:
    """
    Owners and editors can edit anyone in the space.
    A claimer can edit their own person and its descendants.
    """
    scope = EditScope(db, space_id, user)

    if scope.all_people:
        return scope.membership

    if not scope.claimed_person_id:
        logger.warning("user %s has no edit permission in space %s", user.id, space_id)
        raise HTTPException(403, "No edit permission")

    if person_id not in scope.branch_ids:
        logger.warning(
            "user %s tried to edit %s outside their branch in space %s",
            user.id, person_id, space_id,
        )
        raise HTTPException(403, "Can only edit your own branch")

    return scope.membership


def require_can_add_people(db: Session, space_id: str, user: User) -> None:
    if is_editor(get_membership(db, space_id, user.id)):
        return

    # Claimers can add relatives; linking them is checked per relationship
    if claimed_person_in_space(db, space_id, user):
        return

    raise HTTPException(403, "No permission to add people")
