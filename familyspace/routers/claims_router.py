import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from familyspace.database import get_db
from familyspace.auth import get_current_user
from familyspace.models.user import User
from familyspace.models.person import Person
from familyspace.models.claim_request import ClaimRequest
from familyspace.core.permissions import (
    get_membership,
    require_membership,
    require_space,
    require_writable_space,
)
from familyspace.routers.people_router import require_person_in_space
from familyspace.utils.names import full_name
from familyspace.schemas.claim_schema import ClaimOut, PendingClaimOut, MyClaimOut

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Claims"])


def _now() -> datetime:
    return datetime.utcnow()


def _claim_in_space(db: Session, space_id: str, claim_id: str) -> ClaimRequest:
    row = (
        db.query(ClaimRequest)
        .join(Person, Person.id == ClaimRequest.person_id)
        .filter(
            ClaimRequest.id == claim_id,
            Person.space_id == space_id,
        )
        .first()
    )
    if not row:
        raise HTTPException(404, "Claim not found")
    return row


# ============================================================
# SUBMIT CLAIM
# ============================================================

@router.post("/spaces/{space_id}/people/{person_id}/claim", response_model=ClaimOut, status_code=201)
def submit_claim(
    space_id: str,
    person_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    space = require_writable_space(db, space_id)
    person = require_person_in_space(db, space.id, person_id)

    pending = db.query(ClaimRequest).filter(
        ClaimRequest.user_id == current_user.id,
        ClaimRequest.person_id == person.id,
        ClaimRequest.status == "PENDING",
    ).first()
    if pending:
        raise HTTPException(400, "You already have a pending claim for this person")

    already_claimed = db.query(User).filter(User.person_id == person.id).first()
    if already_claimed:
        raise HTTPException(400, "This person has already been claimed")

    claim = ClaimRequest(
        user_id=current_user.id,
        person_id=person.id,
        status="PENDING",
        created_at=_now(),
    )
    db.add(claim)
    db.commit()
    db.refresh(claim)

    logger.info("user %s claimed person %s in space %s", current_user.id, person.id, space.id)
    return claim


# ============================================================
# PENDING CLAIMS (OWNER)
# ============================================================

@router.get("/spaces/{space_id}/claims", response_model=list[PendingClaimOut])
def pending_claims(
    space_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    space = require_space(db, space_id)
    require_membership(db, space.id, current_user, "OWNER")

    rows = (
        db.query(ClaimRequest, User, Person)
        .join(User, User.id == ClaimRequest.user_id)
        .join(Person, Person.id == ClaimRequest.person_id)
        .filter(
            Person.space_id == space.id,
            ClaimRequest.status == "PENDING",
        )
        .order_by(ClaimRequest.created_at.desc())
        .all()
    )

    return [
        {
            "id": claim.id,
            "status": claim.status,
            "created_at": claim.created_at,
            "user": {"id": user.id, "name": user.name, "email": user.email},
            "person": {
                "id": person.id,
                "first_name": person.first_name,
                "last_name": person.last_name,
                "first_name_ar": person.first_name_ar,
                "last_name_ar": person.last_name_ar,
            },
        }
        for claim, user, person in rows
    ]


# ============================================================
# APPROVE / REJECT (OWNER)
# ============================================================

@router.post("/spaces/{space_id}/claims/{claim_id}/approve")
def approve_claim(
    space_id: str,
    claim_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    space = require_writable_space(db, space_id)
    require_membership(db, space.id, current_user, "OWNER")

    claim = _claim_in_space(db, space.id, claim_id)
    if claim.status != "PENDING":
        raise HTTPException(404, "Claim not found or already processed")

    holder = db.query(User).filter(User.person_id == claim.person_id).first()
    if holder and holder.id != claim.user_id:
        raise HTTPException(409, "This person has already been claimed")

    claimant = db.query(User).filter(User.id == claim.user_id).first()
    if not claimant:
        raise HTTPException(404, "User not found")

    now = _now()

    # ------------------------------------------------------------
    # Link the user to the person and close the claim together
    # ------------------------------------------------------------
    claimant.person_id = claim.person_id
    claim.status = "APPROVED"
    claim.responded_at = now

    # Nobody else can hold this person any more
    db.query(ClaimRequest).filter(
        ClaimRequest.person_id == claim.person_id,
        ClaimRequest.id != claim.id,
        ClaimRequest.status == "PENDING",
    ).update({"status": "REJECTED", "responded_at": now}, synchronize_session=False)

    db.commit()

    logger.info(
        "space %s: claim %s approved, user %s is person %s",
        space.id, claim.id, claimant.id, claim.person_id,
    )
    return {"status": "approved", "user_id": claimant.id, "person_id": claim.person_id}


@router.post("/spaces/{space_id}/claims/{claim_id}/reject")
def reject_claim(
    space_id: str,
    claim_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    space = require_writable_space(db, space_id)
    require_membership(db, space.id, current_user, "OWNER")

    claim = _claim_in_space(db, space.id, claim_id)
    if claim.status != "PENDING":
        return {"status": claim.status.lower()}

    claim.status = "REJECTED"
    claim.responded_at = _now()
    db.commit()

    logger.info("space %s: claim %s rejected", space.id, claim.id)
    return {"status": "rejected"}


# ============================================================
# CLAIMANT SIDE
# ============================================================

@router.post("/claims/{claim_id}/cancel")
def cancel_claim(
    claim_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    claim = db.query(ClaimRequest).filter(ClaimRequest.id == claim_id).first()
    if not claim:
        raise HTTPException(404, "Claim not found")

    if claim.user_id != current_user.id:
        raise HTTPException(403, "Not authorised")

    person = db.query(Person).filter(Person.id == claim.person_id).first()
    if person:
        require_writable_space(db, person.space_id)

    if claim.status != "PENDING":
        return {"status": claim.status.lower()}

    claim.status = "CANCELLED"
    claim.responded_at = _now()
    db.commit()
    return {"status": "cancelled"}


@router.get("/claims/mine", response_model=list[MyClaimOut])
def my_claims(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rows = (
        db.query(ClaimRequest, Person)
        .join(Person, Person.id == ClaimRequest.person_id)
        .filter(ClaimRequest.user_id == current_user.id)
        .order_by(ClaimRequest.created_at.desc())
        .all()
    )

    return [
        {
            "id": claim.id,
            "user_id": claim.user_id,
            "person_id": claim.person_id,
            "status": claim.status,
            "created_at": claim.created_at,
            "responded_at": claim.responded_at,
            "space_id": person.space_id,
            "person_name": full_name(person),
        }
        for claim, person in rows
    ]


# ============================================================
# UNCLAIM
# ============================================================

@router.post("/spaces/{space_id}/people/{person_id}/unclaim")
def unclaim_person(
    space_id: str,
    person_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Detach the user linked to this person.
    Allowed for that user themselves, or for an owner of the space.
    """
    space = require_writable_space(db, space_id)
    person = require_person_in_space(db, space.id, person_id)

    holder = db.query(User).filter(User.person_id == person.id).first()
    if not holder:
        return {"status": "not_claimed"}

    if holder.id != current_user.id:
        membership = get_membership(db, space.id, current_user.id)
        if not membership or membership.role != "OWNER":
            raise HTTPException(403, "Not authorised")

    holder.person_id = None
    db.commit()

    logger.info("space %s: user %s detached from person %s", space.id, holder.id, person.id)
    return {"status": "unclaimed", "user_id": holder.id}
