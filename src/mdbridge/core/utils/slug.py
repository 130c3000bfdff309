"""Slug generation for heading anchors and TOC links"""

import re


def slugify(text: str) -> str:
    """Convert heading text to a lowercase, hyphen-separated anchor id.

    Duplicate headings produce duplicate slugs; callers needing unique ids
    must disambiguate themselves.
    """
    text = text.lower()
    text = re.sub(r'[^\w\s-]', '', text)
    return re.sub(r'\s+', '-', text)
