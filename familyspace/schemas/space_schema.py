from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime

from familyspace.schemas.person_schema import PersonOut


MemberRole = Literal["OWNER", "EDITOR", "VIEWER"]


# --------------------------------------------------
# CREATE / UPDATE
# --------------------------------------------------
class FamilySpaceCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None


class FamilySpaceUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None


# --------------------------------------------------
# SPACE (LIST / SUMMARY)
# --------------------------------------------------
class FamilySpaceOut(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    created_at: datetime
    is_archived: bool

    class Config:
        from_attributes = True


class MySpaceOut(FamilySpaceOut):
    role: str
    people_count: int
    member_count: int


# --------------------------------------------------
# MEMBERS
# --------------------------------------------------
class SpaceMemberBrief(BaseModel):
    user_id: str
    name: Optional[str] = None
    role: str


class SpaceMemberOut(BaseModel):
    id: str
    user_id: str
    user_name: Optional[str] = None
    email: Optional[str] = None
    role: str
    joined_at: datetime


class MemberRoleUpdate(BaseModel):
    role: MemberRole


# --------------------------------------------------
# SPACE DETAIL (public read)
# --------------------------------------------------
class FamilySpaceDetailOut(FamilySpaceOut):
    people: List[PersonOut] = []
    members: List[SpaceMemberBrief] = []
    people_count: int

    my_role: str
    claimed_person_id: Optional[str] = None
    is_logged_in: bool


# --------------------------------------------------
# JOIN REQUESTS
# --------------------------------------------------
class JoinRequestAccept(BaseModel):
    role: MemberRole = "VIEWER"


class JoinRequestOut(BaseModel):
    request_id: str
    space_id: str
    user_id: str
    user_name: Optional[str] = None
    email: Optional[str] = None
    status: str
    created_at: datetime
