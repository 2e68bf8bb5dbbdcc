from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from familyspace.database import Base
import uuid


class JoinRequest(Base):
    __tablename__ = "join_requests"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    space_id = Column(String, ForeignKey("family_spaces.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    status = Column(String, default="pending")  # pending / accepted / declined / cancelled
    created_at = Column(DateTime, default=datetime.utcnow)
    responded_at = Column(DateTime, nullable=True)

    space = relationship("FamilySpace")
    user = relationship("User")
