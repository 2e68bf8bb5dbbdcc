import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from familyspace.database import get_db
from familyspace.auth import get_current_user, get_optional_user
from familyspace.models.user import User
from familyspace.models.family_space import FamilySpace
from familyspace.models.membership import Membership
from familyspace.models.person import Person
from familyspace.models.join_request import JoinRequest
from familyspace.core.permissions import (
    EditScope,
    effective_role,
    get_membership,
    require_membership,
    require_space,
    require_writable_space,
)
from familyspace.core.person_visibility import serialize_person
from familyspace.utils.names import mask_email
from familyspace.schemas.space_schema import (
    FamilySpaceCreate,
    FamilySpaceUpdate,
    FamilySpaceOut,
    FamilySpaceDetailOut,
    MySpaceOut,
    SpaceMemberOut,
    MemberRoleUpdate,
    JoinRequestAccept,
    JoinRequestOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/spaces", tags=["Family Spaces"])


# --------------------------------------------------
# HELPERS
# --------------------------------------------------
def _owner_count(db: Session, space_id: str) -> int:
    return db.query(Membership).filter(
        Membership.space_id == space_id,
        Membership.role == "OWNER",
    ).count()


def _require_member_row(db: Session, space_id: str, user_id: str) -> Membership:
    member = get_membership(db, space_id, user_id)
    if not member:
        raise HTTPException(404, "Member not found")
    return member


def _serialize_join_request(req: JoinRequest, user: User) -> dict:
    return {
        "request_id": req.id,
        "space_id": req.space_id,
        "user_id": user.id,
        "user_name": user.name,
        "email": user.email,
        "status": req.status,
        "created_at": req.created_at,
    }


# --------------------------------------------------
# CREATE FAMILY SPACE
# --------------------------------------------------
@router.post("", response_model=FamilySpaceOut, status_code=201)
def create_space(
    payload: FamilySpaceCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    name = payload.name.strip()
    if not name:
        raise HTTPException(400, "Space name cannot be empty")

    space = FamilySpace(
        name=name,
        description=payload.description,
        created_at=datetime.utcnow(),
    )
    db.add(space)
    db.flush()

    db.add(
        Membership(
            user_id=current_user.id,
            space_id=space.id,
            role="OWNER",
        )
    )
    db.commit()
    db.refresh(space)

    logger.info("user %s created space %s", current_user.id, space.id)
    return space


# --------------------------------------------------
# LIST MY FAMILY SPACES
# --------------------------------------------------
@router.get("/mine", response_model=list[MySpaceOut])
def my_spaces(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rows = (
        db.query(FamilySpace, Membership)
        .join(Membership, Membership.space_id == FamilySpace.id)
        .filter(Membership.user_id == current_user.id)
        .order_by(Membership.created_at.desc())
        .all()
    )

    space_ids = [space.id for space, _ in rows]

    people_counts = dict(
        db.query(Person.space_id, func.count(Person.id))
        .filter(Person.space_id.in_(space_ids))
        .group_by(Person.space_id)
        .all()
    ) if space_ids else {}

    member_counts = dict(
        db.query(Membership.space_id, func.count(Membership.id))
        .filter(Membership.space_id.in_(space_ids))
        .group_by(Membership.space_id)
        .all()
    ) if space_ids else {}

    return [
        {
            "id": space.id,
            "name": space.name,
            "description": space.description,
            "created_at": space.created_at,
            "is_archived": space.is_archived,
            "role": membership.role,
            "people_count": people_counts.get(space.id, 0),
            "member_count": member_counts.get(space.id, 0),
        }
        for space, membership in rows
    ]


# --------------------------------------------------
# SPACE DETAIL (public)
# --------------------------------------------------
@router.get("/{space_id}", response_model=FamilySpaceDetailOut)
def get_space(
    space_id: str,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    """
    Public read. Anonymous callers see the space as VIEWER.
    """
    space = require_space(db, space_id)

    people = (
        db.query(Person)
        .filter(Person.space_id == space.id)
        .order_by(Person.first_name.asc())
        .all()
    )

    rows = (
        db.query(Membership, User)
        .join(User, User.id == Membership.user_id)
        .filter(Membership.space_id == space.id)
        .order_by(Membership.created_at.asc())
        .all()
    )

    scope = EditScope(db, space.id, current_user)

    return {
        "id": space.id,
        "name": space.name,
        "description": space.description,
        "created_at": space.created_at,
        "is_archived": space.is_archived,
        "people": [
            serialize_person(p, is_member=scope.is_member, can_edit=scope.can_edit(p.id))
            for p in people
        ],
        "members": [
            {"user_id": user.id, "name": user.name, "role": member.role}
            for member, user in rows
        ],
        "people_count": len(people),
        "my_role": effective_role(db, space.id, current_user),
        "claimed_person_id": scope.claimed_person_id,
        "is_logged_in": current_user is not None,
    }


# --------------------------------------------------
# UPDATE SPACE (OWNER ONLY)
# --------------------------------------------------
@router.put("/{space_id}", response_model=FamilySpaceOut)
def update_space(
    space_id: str,
    payload: FamilySpaceUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    space = require_writable_space(db, space_id)
    require_membership(db, space.id, current_user, "OWNER")

    if payload.name is not None:
        new_name = payload.name.strip()
        if not new_name:
            raise HTTPException(400, "Space name cannot be empty")
        space.name = new_name

    if payload.description is not None:
        space.description = payload.description.strip() or None

    db.commit()
    db.refresh(space)
    return space


# --------------------------------------------------
# DELETE / ARCHIVE SPACE (OWNER ONLY)
# --------------------------------------------------
@router.delete("/{space_id}")
def archive_space(
    space_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    space = require_space(db, space_id)
    require_membership(db, space.id, current_user, "OWNER")

    if space.is_archived:
        return {"status": "already_archived"}

    space.is_archived = True
    space.archived_at = datetime.utcnow()
    db.commit()

    logger.info("user %s archived space %s", current_user.id, space.id)
    return {"status": "archived"}


# --------------------------------------------------
# MEMBERS
# --------------------------------------------------
@router.get("/{space_id}/members", response_model=list[SpaceMemberOut])
def list_members(
    space_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    space = require_space(db, space_id)
    me = require_membership(db, space.id, current_user)

    rows = (
        db.query(Membership, User)
        .join(User, User.id == Membership.user_id)
        .filter(Membership.space_id == space.id)
        .order_by(Membership.created_at.asc())
        .all()
    )

    # Only owners see full email addresses
    show_email = me.role == "OWNER"

    return [
        {
            "id": member.id,
            "user_id": user.id,
            "user_name": user.name,
            "email": user.email if show_email else mask_email(user.email),
            "role": member.role,
            "joined_at": member.created_at,
        }
        for member, user in rows
    ]


@router.post("/{space_id}/members/{user_id}/role")
def change_member_role(
    space_id: str,
    user_id: str,
    payload: MemberRoleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    space = require_writable_space(db, space_id)
    require_membership(db, space.id, current_user, "OWNER")

    member = _require_member_row(db, space.id, user_id)

    if member.role == "OWNER" and payload.role != "OWNER" and _owner_count(db, space.id) <= 1:
        raise HTTPException(400, "Cannot demote the last owner")

    member.role = payload.role
    db.commit()

    logger.info("space %s: user %s is now %s", space.id, user_id, payload.role)
    return {"status": "ok", "user_id": user_id, "role": member.role}


@router.post("/{space_id}/members/{user_id}/remove")
def remove_member(
    space_id: str,
    user_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    space = require_writable_space(db, space_id)
    require_membership(db, space.id, current_user, "OWNER")

    member = get_membership(db, space.id, user_id)
    if not member:
        return {"status": "ok"}

    if member.role == "OWNER" and _owner_count(db, space.id) <= 1:
        raise HTTPException(400, "Cannot remove the last owner")

    db.delete(member)
    db.commit()

    logger.info("space %s: removed member %s", space.id, user_id)
    return {"status": "ok"}


@router.post("/{space_id}/leave")
def leave_space(
    space_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    space = require_writable_space(db, space_id)

    member = get_membership(db, space.id, current_user.id)
    if not member:
        return {"status": "ok"}

    if member.role == "OWNER" and _owner_count(db, space.id) <= 1:
        raise HTTPException(400, "Cannot leave as the last owner")

    db.delete(member)
    db.commit()

    logger.info("space %s: user %s left", space.id, current_user.id)
    return {"status": "ok"}


# --------------------------------------------------
# JOIN REQUESTS
# --------------------------------------------------
@router.post("/{space_id}/join-request")
def request_to_join(
    space_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    space = require_writable_space(db, space_id)

    if get_membership(db, space.id, current_user.id):
        return {"status": "already_member"}

    pending = db.query(JoinRequest).filter(
        JoinRequest.space_id == space.id,
        JoinRequest.user_id == current_user.id,
        JoinRequest.status == "pending",
    ).first()
    if pending:
        return {"status": "already_requested", "request_id": pending.id}

    req = JoinRequest(
        space_id=space.id,
        user_id=current_user.id,
        status="pending",
        created_at=datetime.utcnow(),
    )
    db.add(req)
    db.commit()

    return {"status": "requested", "request_id": req.id}


@router.get("/{space_id}/join-requests", response_model=list[JoinRequestOut])
def list_join_requests(
    space_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    space = require_space(db, space_id)
    require_membership(db, space.id, current_user, "OWNER")

    rows = (
        db.query(JoinRequest, User)
        .join(User, User.id == JoinRequest.user_id)
        .filter(
            JoinRequest.space_id == space.id,
            JoinRequest.status == "pending",
        )
        .order_by(JoinRequest.created_at.asc())
        .all()
    )

    return [_serialize_join_request(req, user) for req, user in rows]


def _load_join_request(db: Session, request_id: str) -> JoinRequest:
    req = db.query(JoinRequest).filter(JoinRequest.id == request_id).first()
    if not req:
        raise HTTPException(404, "Request not found")
    return req


@router.post("/join-requests/{request_id}/accept")
def accept_join_request(
    request_id: str,
    payload: Optional[JoinRequestAccept] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    req = _load_join_request(db, request_id)

    space = require_writable_space(db, req.space_id)
    require_membership(db, space.id, current_user, "OWNER")

    if req.status != "pending":
        return {"status": req.status}

    role = payload.role if payload else "VIEWER"

    req.status = "accepted"
    req.responded_at = datetime.utcnow()

    if not get_membership(db, space.id, req.user_id):
        db.add(
            Membership(
                user_id=req.user_id,
                space_id=space.id,
                role=role,
            )
        )

    db.commit()

    logger.info("space %s: accepted join request %s as %s", space.id, req.id, role)
    return {"status": "accepted", "role": role}


@router.post("/join-requests/{request_id}/decline")
def decline_join_request(
    request_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    req = _load_join_request(db, request_id)

    space = require_writable_space(db, req.space_id)
    require_membership(db, space.id, current_user, "OWNER")

    if req.status != "pending":
        return {"status": req.status}

    req.status = "declined"
    req.responded_at = datetime.utcnow()
    db.commit()

    return {"status": "declined"}


@router.post("/join-requests/{request_id}/cancel")
def cancel_join_request(
    request_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    req = _load_join_request(db, request_id)

    if req.user_id != current_user.id:
        raise HTTPException(403, "Not authorised")

    require_writable_space(db, req.space_id)

    if req.status != "pending":
        return {"status": req.status}

    req.status = "cancelled"
    req.responded_at = datetime.utcnow()
    db.commit()

    return {"status": "cancelled"}
