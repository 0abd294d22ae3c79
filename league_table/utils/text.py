import re


def slugify(name: str) -> str:
    """URL-friendly slug: lowercase, spaces to dashes, everything else non-word dropped."""
    slug = name.strip().lower()
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"[^\w-]+", "", slug)
    return slug
