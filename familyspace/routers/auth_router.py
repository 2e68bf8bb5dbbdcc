import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, EmailStr
from typing import Optional

from familyspace.database import get_db
from familyspace.auth import (
    register_user,
    authenticate_user,
    create_access_token,
    get_current_user,
)
from familyspace.models.user import User
from familyspace.models.person import Person


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


# ---------- Pydantic request models ----------

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    name: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


# ----------------- REGISTER ------------------

@router.post("/register", status_code=201)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    if len(payload.password) < 8:
        raise HTTPException(
            status_code=400,
            detail="Password must be at least 8 characters long",
        )
    try:
        user = register_user(
            db,
            email=payload.email,
            password=payload.password,
            name=payload.name,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info("registered user %s", user.id)

    return {
        "message": "Registration successful",
        "user_id": user.id,
    }


# ------------------- LOGIN -------------------

@router.post("/login")
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate_user(db, email=payload.email, password=payload.password)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
        )

    token = create_access_token({"sub": user.id})

    return {
        "access_token": token,
        "token_type": "bearer",
    }


# -------------------- ME ---------------------

@router.get("/me")
def get_me(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    claimed_space_id = None
    if current_user.person_id:
        person = db.query(Person).filter(Person.id == current_user.person_id).first()
        claimed_space_id = person.space_id if person else None

    return {
        "id": current_user.id,
        "email": current_user.email,
        "name": current_user.name,
        "person_id": current_user.person_id,
        "person_space_id": claimed_space_id,
    }
