from familyspace.config import settings


def absolute_photo_url(path: str | None) -> str | None:
    if not path:
        return None

    # already absolute → leave it
    if path.startswith("http://") or path.startswith("https://"):
        return path

    if not path.startswith("/"):
        path = f"/{path}"

    return f"{settings.BASE_URL}{path}"
