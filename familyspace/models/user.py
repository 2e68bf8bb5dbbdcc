import uuid
from datetime import datetime

from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from familyspace.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)

    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)
    hashed_password = Column(String, nullable=False)

    # The person node this user has claimed (set when a claim is approved).
    # Unique: a person can be claimed by at most one user.
    person_id = Column(
        String,
        ForeignKey("people.id", ondelete="SET NULL"),
        unique=True,
        nullable=True,
    )

    created_at = Column(DateTime, default=datetime.utcnow)

    person = relationship("Person", foreign_keys=[person_id])

    memberships = relationship(
        "Membership",
        back_populates="user",
        cascade="all, delete-orphan",
    )
