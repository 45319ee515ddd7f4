"""
Filter predicate construction for image listings.

All active filters are combined with AND. The free-text search is itself an
OR group spanning filename (storage key), caption, tag set and UID.
"""
from typing import List, Optional
import re

from sqlalchemy import and_, or_
from sqlalchemy.sql.elements import ColumnElement

from app.models import Image, ImageTag, CollectionImage
from app.services.query_params import ImageQueryParams

_TOKEN_SEPARATORS = re.compile(r"[\s,]+")


def exact_probe(q: str) -> Optional[str]:
    """
    Return the inner text of a double-quoted query, or None if unquoted.
    An empty string means the quotes held nothing worth matching.
    """
    if len(q) >= 2 and q.startswith('"') and q.endswith('"'):
        return q[1:-1].strip()
    return None


def tokenize(q: str) -> List[str]:
    """
    Split a query on whitespace and commas, then on hyphens.

    >>> tokenize("foo-bar, baz")
    ['foo', 'bar', 'baz']
    """
    tokens = []
    for word in _TOKEN_SEPARATORS.split(q):
        for part in word.split("-"):
            part = part.strip()
            if part:
                tokens.append(part)
    return tokens


def has_tag(tag: str) -> ColumnElement:
    """EXISTS predicate: the image's tag set contains `tag`."""
    return Image.tag_rows.any(ImageTag.tag == tag)


def text_search_clause(q: Optional[str]) -> Optional[ColumnElement]:
    """
    Build the free-text search predicate, or None when it is a no-op.

    Tokens are always sent as bound parameters, and LIKE wildcards inside
    them are escaped, so user input never alters the query structure.
    """
    if not q:
        return None

    exact = exact_probe(q)
    if exact is not None:
        if not exact:
            return None
        return or_(
            Image.uid == exact,
            Image.s3_key == exact,
            Image.caption == exact,
        )

    tokens = tokenize(q)
    if not tokens:
        return None

    clauses = [Image.s3_key.icontains(t, autoescape=True) for t in tokens]
    clauses += [Image.caption.icontains(t, autoescape=True) for t in tokens]
    clauses += [has_tag(t) for t in tokens]
    # A pasted UID may contain hyphens that tokenization would split apart
    clauses.append(Image.uid == q)
    return or_(*clauses)


def build_filters(params: ImageQueryParams) -> List[ColumnElement]:
    """
    Compose every active filter of a listing request.
    The cursor inequality is not included; see app.services.pagination.
    """
    filters: List[ColumnElement] = []

    text_clause = text_search_clause(params.q)
    if text_clause is not None:
        filters.append(text_clause)

    if params.status:
        filters.append(Image.status == params.status)
    if params.format:
        filters.append(Image.format == params.format)
    if params.nsfw is not None:
        filters.append(Image.nsfw.is_(params.nsfw))

    if params.tags:
        # Superset match: every requested tag must be present
        filters.append(and_(*[has_tag(t) for t in params.tags]))

    if params.tagged is True:
        filters.append(Image.tagged.is_(True))
    elif params.tagged is False:
        filters.append(or_(Image.tagged.is_(False), Image.tagged.is_(None)))

    if params.collection_id is not None:
        filters.append(Image.memberships.any(CollectionImage.collection_id == params.collection_id))

    return filters
