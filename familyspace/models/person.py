from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, Text, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from familyspace.database import Base
import uuid


class Person(Base):
    """
    A node in a family space's tree.
    Exists on its own; a User can attach to it through an approved claim.
    """
    __tablename__ = "people"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    space_id = Column(
        String,
        ForeignKey("family_spaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Latin-script names
    first_name = Column(String, nullable=False)
    middle_name = Column(String, nullable=True)
    last_name = Column(String, nullable=False)

    # Arabic-script names
    first_name_ar = Column(String, nullable=True)
    middle_name_ar = Column(String, nullable=True)
    last_name_ar = Column(String, nullable=True)

    nickname = Column(String, nullable=True)
    gender = Column(String, nullable=True)  # male | female | other

    birth_year = Column(Integer, nullable=True)
    death_year = Column(Integer, nullable=True)

    bio = Column(Text, nullable=True)
    photo_url = Column(String, nullable=True)

    is_private = Column(Boolean, default=False, nullable=False)
    hide_birth_year = Column(Boolean, default=False, nullable=False)

    # free-form labels, stored as a JSON list of strings
    tags = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    space = relationship("FamilySpace", back_populates="people")
