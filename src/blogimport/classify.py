"""Decide whether an entry is a post, a comment, or neither."""

from typing import Iterable, List

from .config import COMMENT_KIND, KIND_SCHEME, POST_KIND
from .models import Entry, Role, Tag

_KINDS = {
    POST_KIND: Role.POST,
    COMMENT_KIND: Role.COMMENT,
}


def classify(tags: Iterable[Tag]) -> Role:
    """
    Return the role described by a set of tags.

    The first tag in the kind scheme decides. Kinds other than post and
    comment (templates, settings, pages) and entries without a kind tag
    are Role.OTHER.
    """
    for tag in tags:
        if tag.scheme == KIND_SCHEME:
            return _KINDS.get(tag.name, Role.OTHER)
    return Role.OTHER


def classify_entries(entries: List[Entry]) -> None:
    """Assign a role to every entry."""
    for entry in entries:
        entry.role = classify(entry.tags)
