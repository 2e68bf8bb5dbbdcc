"""
Demo data: one admin user owning a three-generation family space.

    python -m familyspace.seed
"""

import logging
import os

from sqlalchemy.orm import Session

from familyspace.auth import hash_password, normalize_email
from familyspace.database import Base, SessionLocal, engine
from familyspace.models.user import User
from familyspace.models.family_space import FamilySpace
from familyspace.models.membership import Membership
from familyspace.models.person import Person
from familyspace.models.relationship import Relationship
from familyspace.models import claim_request, join_request  # noqa: F401

logger = logging.getLogger(__name__)

ADMIN_EMAIL = "admin@aoudi.family"


def _person(db: Session, space: FamilySpace, **fields) -> Person:
    person = Person(space_id=space.id, last_name="Aoudi", last_name_ar="العودي", **fields)
    db.add(person)
    db.flush()
    return person


def _link(db: Session, space: FamilySpace, type_: str, subtype: str, a: Person, b: Person) -> None:
    db.add(Relationship(space_id=space.id, type=type_, subtype=subtype, from_id=a.id, to_id=b.id))


def seed(db: Session, admin_password: str) -> FamilySpace:
    email = normalize_email(ADMIN_EMAIL)
    admin = db.query(User).filter(User.email == email).first()
    if not admin:
        admin = User(email=email, name="Admin", hashed_password=hash_password(admin_password))
        db.add(admin)
        db.flush()

    space = FamilySpace(name="Aoudi Family", description="عائلة العودي")
    db.add(space)
    db.flush()
    db.add(Membership(user_id=admin.id, space_id=space.id, role="OWNER"))

    # Generation 1
    grandfather = _person(db, space, first_name="Ahmad", first_name_ar="أحمد", gender="male",
                          bio="Family patriarch")
    grandmother = _person(db, space, first_name="Fatima", first_name_ar="فاطمة", gender="female",
                          bio="Family matriarch")
    _link(db, space, "SPOUSE", "married", grandfather, grandmother)

    # Generation 2
    father = _person(db, space, first_name="Mohammed", first_name_ar="محمد", gender="male")
    mother = _person(db, space, first_name="Nour", first_name_ar="نور", gender="female")
    _link(db, space, "PARENT_CHILD", "biological", grandfather, father)
    _link(db, space, "PARENT_CHILD", "biological", grandmother, father)
    _link(db, space, "SPOUSE", "married", father, mother)

    # Generation 3
    for first_name, first_name_ar, gender in (
        ("Wael", "وائل", "male"),
        ("Sara", "سارة", "female"),
    ):
        child = _person(db, space, first_name=first_name, first_name_ar=first_name_ar, gender=gender)
        _link(db, space, "PARENT_CHILD", "biological", father, child)
        _link(db, space, "PARENT_CHILD", "biological", mother, child)

    db.commit()
    db.refresh(space)
    return space


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        logger.info("Seeding database...")
        space = seed(db, os.getenv("SEED_ADMIN_PASSWORD", "changeme123"))
        logger.info('Created family space "%s" with 6 people and relationships.', space.name)
        logger.info("Admin login: %s", ADMIN_EMAIL)
        logger.info("Space ID: %s", space.id)
    finally:
        db.close()


if __name__ == "__main__":
    main()
