"""
Data models for blogimport.

This module defines typed data structures for the records of a Blogger
export. Each <entry> of the export becomes one Entry; the pipeline then
mutates the list of entries in place as it resolves IDs, links comments and
rewrites content.
"""

import enum
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import List, Optional

from .config import TAG_SCHEME

# Used when an entry carries no timestamp at all
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class Role(enum.Enum):
    """What an entry is. Decided once by the classifier."""
    POST = "post"
    COMMENT = "comment"
    OTHER = "other"


@dataclass
class Tag:
    """
    A category of an entry.

    Attributes:
        name: The category term (a label, or a kind URL)
        scheme: The taxonomy the term belongs to

    Example:
        Tag(name="travel", scheme="http://www.blogger.com/atom/ns#")
    """
    name: str
    scheme: str = ""


@dataclass
class Link:
    """A relational link of an entry (rel="replies", "related", ...)."""
    rel: str
    href: str


@dataclass
class AuthorImage:
    src: str = ""
    width: int = 0
    height: int = 0


@dataclass
class Author:
    """
    Author of a post or comment.

    Attributes:
        name: Display name
        uri: Profile URL (may be empty)
        image: Avatar reference
    """
    name: str = ""
    uri: str = ""
    image: AuthorImage = field(default_factory=AuthorImage)


@dataclass
class Entry:
    """
    A single record of the export: a post, a comment, or something else
    (template, settings, page).

    Attributes:
        raw_id: The opaque ID as found in the export
        published: When the entry was first published
        updated: When the entry was last updated
        draft: True for unpublished posts
        title: Entry title
        content: Raw HTML content, rewritten in place while importing
        tags: All categories, including the kind category
        author: Author block
        thumbnail_url: media:thumbnail URL, empty if the entry has none
        reply_source: Source URL of thr:in-reply-to (comments only)
        links: Outbound links in document order
        role: Role assigned by the classifier
        numeric_id: Number parsed from raw_id, None if it did not parse
        reply_to: Parent ID taken from a rel="related" link
        slug: Slug taken from the rel="replies" link
        children: Positions of direct replies, filled by the tree builder
        comment_ids: Numeric IDs of all comments in display order (posts only)
        extra: Extra frontmatter lines injected by the caller

    Example:
        entry = Entry(
            raw_id="tag:blogger.com,1999:blog-1.post-42",
            published=datetime(2014, 5, 4, tzinfo=timezone.utc),
            updated=datetime(2014, 5, 4, tzinfo=timezone.utc),
            title="Hello",
            content="<p>Hi there</p>",
        )
    """
    raw_id: str
    published: datetime = EPOCH
    updated: datetime = EPOCH
    draft: bool = False
    title: str = ""
    content: str = ""
    tags: List[Tag] = field(default_factory=list)
    author: Author = field(default_factory=Author)
    thumbnail_url: str = ""
    reply_source: str = ""
    links: List[Link] = field(default_factory=list)
    role: Role = Role.OTHER
    numeric_id: Optional[int] = None
    reply_to: Optional[int] = None
    slug: str = ""
    children: List[int] = field(default_factory=list)
    comment_ids: List[int] = field(default_factory=list)
    extra: str = ""

    @property
    def is_post(self) -> bool:
        return self.role is Role.POST

    @property
    def is_comment(self) -> bool:
        return self.role is Role.COMMENT

    @property
    def label_tags(self) -> List[str]:
        """Names of the blog's own labels, in document order."""
        return [t.name for t in self.tags if t.scheme == TAG_SCHEME]

    def to_dict(self) -> dict:
        """Convert the entry to a dictionary (for debugging and reports)."""
        d = asdict(self)
        d["role"] = self.role.value
        d["published"] = self.published.isoformat()
        d["updated"] = self.updated.isoformat()
        return d
