"""
Parse a Blogger Atom export into Entry objects.

The export mixes several XML namespaces (Atom, app, thr, gd, media). Blogger
has not always been consistent about which prefix goes where, so elements
are matched by local name only.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Union

from lxml import etree

from .config import DRAFT_TOKENS, TIMESTAMP_FORMAT
from .exceptions import ExportParseError
from .models import EPOCH, Author, AuthorImage, Entry, Link, Tag

logger = logging.getLogger(__name__)


def _local(el) -> str:
    return etree.QName(el).localname


def _children(el, name: str) -> Iterator:
    for child in el:
        # Skip comments and processing instructions
        if isinstance(child.tag, str) and _local(child) == name:
            yield child


def _child(el, *path: str):
    """Follow a chain of local names, returning None if any step is missing."""
    for name in path:
        if el is None:
            return None
        el = next(_children(el, name), None)
    return el


def _text(el, *path: str) -> str:
    found = _child(el, *path)
    if found is None:
        return ""
    return "".join(found.itertext())


def _int_attr(el, name: str) -> int:
    if el is None:
        return 0
    try:
        return int(el.get(name, "0"))
    except ValueError:
        return 0


def parse_timestamp(value: str) -> datetime:
    """Parse an export timestamp such as 2014-05-04T10:30:00.000-07:00."""
    value = value.strip()
    if not value:
        return EPOCH
    try:
        return datetime.strptime(value, TIMESTAMP_FORMAT)
    except ValueError as e:
        raise ExportParseError(f"Invalid timestamp {value!r}") from e


def parse_draft(value: str) -> bool:
    value = value.strip()
    if not value:
        return False
    try:
        return DRAFT_TOKENS[value]
    except KeyError:
        raise ExportParseError(f"Unknown value for draft boolean: {value}") from None


def parse_entry(el) -> Entry:
    """Build an Entry from a single <entry> element."""
    author_el = _child(el, "author")
    image_el = _child(author_el, "image")
    author = Author(
        name=_text(author_el, "name"),
        uri=_text(author_el, "uri"),
        image=AuthorImage(
            src=image_el.get("src", "") if image_el is not None else "",
            width=_int_attr(image_el, "width"),
            height=_int_attr(image_el, "height"),
        ),
    )

    thumbnail_el = _child(el, "thumbnail")
    reply_el = _child(el, "in-reply-to")

    return Entry(
        raw_id=_text(el, "id").strip(),
        published=parse_timestamp(_text(el, "published")),
        updated=parse_timestamp(_text(el, "updated")),
        draft=parse_draft(_text(el, "control", "draft")),
        title=_text(el, "title"),
        content=_text(el, "content"),
        tags=[
            Tag(name=c.get("term", ""), scheme=c.get("scheme", ""))
            for c in _children(el, "category")
        ],
        author=author,
        thumbnail_url=thumbnail_el.get("url", "") if thumbnail_el is not None else "",
        reply_source=reply_el.get("source", "") if reply_el is not None else "",
        links=[
            Link(rel=l.get("rel", ""), href=l.get("href", ""))
            for l in _children(el, "link")
        ],
    )


def parse_export(source: Union[str, Path, bytes]) -> List[Entry]:
    """
    Parse an export document.

    Args:
        source: Path to the export file, or the raw document bytes

    Returns:
        Entries in document order

    Raises:
        ExportParseError: The document is not well-formed, is not a feed,
                          or holds an invalid timestamp or draft token
    """
    parser = etree.XMLParser(resolve_entities=False, huge_tree=True)
    try:
        if isinstance(source, bytes):
            root = etree.fromstring(source, parser)
        else:
            root = etree.parse(str(source), parser).getroot()
    except (etree.XMLSyntaxError, OSError) as e:
        raise ExportParseError(f"Could not parse export: {e}") from e

    if _local(root) != "feed":
        raise ExportParseError(f"Expected a <feed> document, found <{_local(root)}>")

    entries = [parse_entry(el) for el in _children(root, "entry")]
    logger.debug("Parsed %d entries", len(entries))
    return entries
