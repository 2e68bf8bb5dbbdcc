from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import datetime


RelationshipType = Literal["PARENT_CHILD", "SPOUSE"]

SUBTYPES = {
    "PARENT_CHILD": ("biological", "adoptive", "guardian", "step"),
    "SPOUSE": ("married", "partner"),
}

DEFAULT_SUBTYPE = {
    "PARENT_CHILD": "biological",
    "SPOUSE": "married",
}


class RelationshipCreate(BaseModel):
    type: RelationshipType
    subtype: Optional[str] = None

    # PARENT_CHILD: from = parent, to = child
    from_id: str
    to_id: str

    start_year: Optional[int] = Field(None, ge=0, le=9999)
    end_year: Optional[int] = Field(None, ge=0, le=9999)


class RelationshipOut(BaseModel):
    id: str
    space_id: str
    type: str
    subtype: Optional[str] = None
    from_id: str
    to_id: str
    start_year: Optional[int] = None
    end_year: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True
