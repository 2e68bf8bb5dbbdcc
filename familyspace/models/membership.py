from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from familyspace.database import Base
import uuid


class Membership(Base):
    __tablename__ = "memberships"
    __table_args__ = (
        UniqueConstraint("user_id", "space_id", name="uq_membership_user_space"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    space_id = Column(String, ForeignKey("family_spaces.id", ondelete="CASCADE"), nullable=False)

    role = Column(String, default="VIEWER", nullable=False)  # OWNER | EDITOR | VIEWER
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="memberships")
    space = relationship("FamilySpace", back_populates="memberships")
