from sqlalchemy import Column, String, DateTime, Boolean, Text
from sqlalchemy.orm import relationship
from datetime import datetime
from familyspace.database import Base
import uuid


class FamilySpace(Base):
    __tablename__ = "family_spaces"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Archive instead of delete (never drop family data)
    is_archived = Column(Boolean, default=False, nullable=False)
    archived_at = Column(DateTime, nullable=True)

    memberships = relationship(
        "Membership",
        back_populates="space",
        cascade="all, delete-orphan",
    )

    people = relationship(
        "Person",
        back_populates="space",
        cascade="all, delete-orphan",
        order_by="Person.first_name",
    )
