from sqlalchemy import Column, String, Integer, DateTime, ForeignKey
from datetime import datetime
from familyspace.database import Base
import uuid


class Relationship(Base):
    """
    A directed edge between two people of the same space.

    PARENT_CHILD: from = parent, to = child.
    SPOUSE: direction carries no meaning.
    """

    __tablename__ = "relationships"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    space_id = Column(
        String,
        ForeignKey("family_spaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # ------------------------------------
    # Relationship semantics
    # ------------------------------------
    # PARENT_CHILD | SPOUSE
    type = Column(String, nullable=False)

    # PARENT_CHILD: biological / adoptive / guardian / step
    # SPOUSE: married / partner
    subtype = Column(String, nullable=True)

    from_id = Column(
        String,
        ForeignKey("people.id", ondelete="CASCADE"),
        nullable=False,
    )

    to_id = Column(
        String,
        ForeignKey("people.id", ondelete="CASCADE"),
        nullable=False,
    )

    start_year = Column(Integer, nullable=True)
    end_year = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
