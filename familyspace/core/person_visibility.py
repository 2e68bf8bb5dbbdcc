from typing import Any, Optional

from familyspace.models.person import Person
from familyspace.utils.names import full_name, native_name
from familyspace.utils.urls import absolute_photo_url

# Stripped from a private person when the viewer is not a member of the space
PRIVATE_FIELDS = ("nickname", "birth_year", "death_year", "bio", "photo_url")


def serialize_person(
    person: Person,
    is_member: bool = False,
    can_edit: bool = False,
    claimed_by_user_id: Optional[str] = None,
) -> dict[str, Any]:
    """
    Person payload as seen by one viewer.

    - private people only show their names to non-members
    - a hidden birth year is only shown to people who may edit the person
    """
    out: dict[str, Any] = {
        "id": person.id,
        "space_id": person.space_id,
        "first_name": person.first_name,
        "middle_name": person.middle_name,
        "last_name": person.last_name,
        "first_name_ar": person.first_name_ar,
        "middle_name_ar": person.middle_name_ar,
        "last_name_ar": person.last_name_ar,
        "full_name": full_name(person),
        "native_name": native_name(person),
        "nickname": person.nickname,
        "gender": person.gender,
        "birth_year": person.birth_year,
        "death_year": person.death_year,
        "is_deceased": person.death_year is not None,
        "bio": person.bio,
        "photo_url": absolute_photo_url(person.photo_url),
        "is_private": bool(person.is_private),
        "hide_birth_year": bool(person.hide_birth_year),
        "tags": list(person.tags or []),
        "created_at": person.created_at,
        "updated_at": person.updated_at,
        "can_view": True,
        "can_edit": can_edit,
        "claimed_by_user_id": claimed_by_user_id,
    }

    if person.is_private and not is_member and not can_edit:
        for field in PRIVATE_FIELDS:
            out[field] = None
        out["tags"] = []
        out["is_deceased"] = None
        out["can_view"] = False

    if person.hide_birth_year and not can_edit:
        out["birth_year"] = None

    return out
