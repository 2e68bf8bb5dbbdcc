from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class ClaimOut(BaseModel):
    id: str
    user_id: str
    person_id: str
    status: str
    created_at: datetime
    responded_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# --------------------------------------------------
# PENDING CLAIMS (owner review)
# --------------------------------------------------
class ClaimUserBrief(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None


class ClaimPersonBrief(BaseModel):
    id: str
    first_name: str
    last_name: str
    first_name_ar: Optional[str] = None
    last_name_ar: Optional[str] = None


class PendingClaimOut(BaseModel):
    id: str
    status: str
    created_at: datetime
    user: ClaimUserBrief
    person: ClaimPersonBrief


class MyClaimOut(ClaimOut):
    space_id: str
    person_name: str
