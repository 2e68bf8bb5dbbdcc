from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from familyspace.database import Base
import uuid


class ClaimRequest(Base):
    __tablename__ = "claim_requests"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    person_id = Column(String, ForeignKey("people.id", ondelete="CASCADE"), nullable=False)

    status = Column(String, default="PENDING", nullable=False)  # PENDING / APPROVED / REJECTED / CANCELLED

    created_at = Column(DateTime, default=datetime.utcnow)
    responded_at = Column(DateTime, nullable=True)

    user = relationship("User")
    person = relationship("Person")
