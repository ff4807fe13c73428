"""
Numeric ID resolution.

Blogger refers to the same entry in three ways: the opaque entry ID
("tag:blogger.com,1999:blog-1.post-42"), the last path segment of a feed URL
in a rel="related" link, and the last path segment of the thr:in-reply-to
source URL. All three end in the same number, which is what comments and
posts are linked by.
"""

import logging
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Dict, List, Optional, Tuple
from urllib.parse import urlsplit

from .config import ID_MARKER
from .models import Entry, Role

logger = logging.getLogger(__name__)

MAX_ID = 2 ** 64


def parse_uint(value: str) -> Optional[int]:
    """Parse an unsigned 64-bit decimal, or return None."""
    if not value or not value.isascii() or not value.isdigit():
        return None
    number = int(value)
    if number >= MAX_ID:
        return None
    return number


def parse_numeric_id(raw_id: str) -> Optional[int]:
    """Return the number after the last ID marker, or None."""
    index = raw_id.rfind(ID_MARKER)
    if index < 0:
        return None
    return parse_uint(raw_id[index + len(ID_MARKER):])


def basename(href: str) -> str:
    """Final path segment of a URL, ignoring query and fragment."""
    path = urlsplit(href).path.rstrip("/")
    return PurePosixPath(path).name if path else ""


def parse_link_id(href: str) -> Optional[int]:
    """Numeric ID at the end of a feed URL, e.g. .../posts/default/42."""
    return parse_uint(basename(href))


def slug_from_href(href: str) -> str:
    """Slug of a post URL: its final path segment without the extension."""
    name = PurePosixPath(basename(href))
    return name.stem if name.suffix else name.name


@dataclass
class Resolution:
    """
    The result of resolving every entry's numeric ID.

    Attributes:
        index_by_id: Numeric ID -> position, for posts and comments only
        unparsable: Positions whose raw ID held no usable number
        collisions: (numeric ID, position) pairs whose ID was already taken
    """
    index_by_id: Dict[int, int] = field(default_factory=dict)
    unparsable: List[int] = field(default_factory=list)
    collisions: List[Tuple[int, int]] = field(default_factory=list)

    def __contains__(self, numeric_id: int) -> bool:
        return numeric_id in self.index_by_id

    def position_of(self, numeric_id: int) -> Optional[int]:
        return self.index_by_id.get(numeric_id)


def resolve(entries: List[Entry]) -> Resolution:
    """
    Resolve numeric IDs, reply targets and slugs for posts and comments.

    Entries must already be classified. Entries of Role.OTHER are left
    alone. When two entries share a numeric ID the first one keeps it.
    """
    resolution = Resolution()

    for position, entry in enumerate(entries):
        if entry.role is Role.OTHER:
            continue

        numeric_id = parse_numeric_id(entry.raw_id)
        if numeric_id is None:
            logger.warning("Can't parse ID of entry %d: %s", position, entry.raw_id)
            resolution.unparsable.append(position)
        else:
            entry.numeric_id = numeric_id
            if numeric_id in resolution.index_by_id:
                logger.warning(
                    "Entry %d reuses ID %d of entry %d",
                    position, numeric_id, resolution.index_by_id[numeric_id],
                )
                resolution.collisions.append((numeric_id, position))
            else:
                resolution.index_by_id[numeric_id] = position

        for link in entry.links:
            rel = link.rel.lower()
            if rel == "related":
                entry.reply_to = parse_link_id(link.href)
            elif rel == "replies":
                entry.slug = slug_from_href(link.href)

    return resolution
