from typing import Optional


def _join(*parts: Optional[str]) -> str:
    return " ".join(p.strip() for p in parts if p and p.strip())


def full_name(person) -> str:
    return _join(person.first_name, person.middle_name, person.last_name)


def native_name(person) -> Optional[str]:
    """Name in the second script, or None when no part of it is set."""
    name = _join(person.first_name_ar, person.middle_name_ar, person.last_name_ar)
    return name or None


def mask_email(email: Optional[str]) -> Optional[str]:
    if not email:
        return None

    local, _, domain = email.partition("@")
    if not domain:
        return "***"

    return f"{local[:1]}***@{domain}"
