import re
import secrets
import string
import time


_ALPHABET = string.ascii_lowercase + string.digits


def generate_slug(name: str) -> str:
    slug = (name or "").lower()
    slug = re.sub(r"[^a-z0-9 -]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def area_slug(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", (name or "").lower()).strip("-")


def unique_suffix(slug: str) -> str:
    """Append `-<ms timestamp>-<5 random chars>` to a colliding slug."""
    rand = "".join(secrets.choice(_ALPHABET) for _ in range(5))
    return f"{slug}-{int(time.time() * 1000)}-{rand}"
