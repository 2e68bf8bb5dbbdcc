from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List, Literal
from datetime import datetime


Gender = Literal["male", "female", "other"]


class PersonBase(BaseModel):
    first_name: str = Field(..., min_length=1)
    middle_name: Optional[str] = None
    last_name: str = Field(..., min_length=1)

    first_name_ar: Optional[str] = None
    middle_name_ar: Optional[str] = None
    last_name_ar: Optional[str] = None

    nickname: Optional[str] = None
    gender: Optional[Gender] = None

    birth_year: Optional[int] = Field(None, ge=0, le=9999)
    death_year: Optional[int] = Field(None, ge=0, le=9999)

    bio: Optional[str] = None
    photo_url: Optional[str] = None

    is_private: bool = False
    hide_birth_year: bool = False

    tags: Optional[List[str]] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name cannot be empty")
        return value

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is None:
            return None
        return [t.strip() for t in value if t and t.strip()]

    @model_validator(mode="after")
    def years_in_order(self):
        if (
            self.birth_year is not None
            and self.death_year is not None
            and self.death_year < self.birth_year
        ):
            raise ValueError("death_year cannot be before birth_year")
        return self


class PersonCreate(PersonBase):
    pass


class PersonUpdate(BaseModel):
    """
    Partial update: only fields present in the payload are applied.
    An explicit null clears birth_year / death_year.
    """
    first_name: Optional[str] = None
    middle_name: Optional[str] = None
    last_name: Optional[str] = None

    first_name_ar: Optional[str] = None
    middle_name_ar: Optional[str] = None
    last_name_ar: Optional[str] = None

    nickname: Optional[str] = None
    gender: Optional[Gender] = None

    birth_year: Optional[int] = Field(None, ge=0, le=9999)
    death_year: Optional[int] = Field(None, ge=0, le=9999)

    bio: Optional[str] = None
    photo_url: Optional[str] = None

    is_private: Optional[bool] = None
    hide_birth_year: Optional[bool] = None

    tags: Optional[List[str]] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def name_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        if not value:
            raise ValueError("Name cannot be empty")
        return value

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is None:
            return None
        return [t.strip() for t in value if t and t.strip()]


class PersonOut(BaseModel):
    id: str
    space_id: str

    first_name: str
    middle_name: Optional[str] = None
    last_name: str
    first_name_ar: Optional[str] = None
    middle_name_ar: Optional[str] = None
    last_name_ar: Optional[str] = None

    full_name: str
    native_name: Optional[str] = None

    nickname: Optional[str] = None
    gender: Optional[str] = None
    birth_year: Optional[int] = None
    death_year: Optional[int] = None
    is_deceased: Optional[bool] = None

    bio: Optional[str] = None
    photo_url: Optional[str] = None

    is_private: bool
    hide_birth_year: bool
    tags: List[str] = []

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Viewer-specific
    can_view: bool = True
    can_edit: bool = False
    claimed_by_user_id: Optional[str] = None
