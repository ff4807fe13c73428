"""
Render entries as Hugo content.

Posts become Markdown/HTML files with a TOML frontmatter block framed by
"+++" lines; comments become standalone TOML documents. Every field and the
condition under which it is emitted is spelled out below.
"""

from datetime import datetime, timezone
from typing import List

from .config import FRONTMATTER_DELIMITER, FULL_SIZE_TOKEN, THUMBNAIL_SIZE_TOKEN
from .exceptions import RenderError
from .models import Entry
from .utils import make_path

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\b": "\\b",
    "\t": "\\t",
    "\n": "\\n",
    "\f": "\\f",
    "\r": "\\r",
}


def escape(value: str) -> str:
    """Escape a value for use inside a TOML basic string."""
    out = []
    for ch in value:
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            out.append(f"\\u{ord(ch):04X}")
        else:
            out.append(ch)
    return "".join(out)


def quote(value: str) -> str:
    return f'"{escape(value)}"'


def multiline(value: str) -> str:
    """
    A TOML multi-line string holding ``value``.

    Literal strings keep content byte for byte. Values a literal string
    cannot hold (''' inside, a trailing quote, a leading newline, control
    characters) fall back to an escaped basic string.
    """
    literal_ok = (
        "'''" not in value
        and not value.endswith("'")
        and not value.startswith(("\n", "\r"))
        and not any(
            (ord(ch) < 0x20 and ch not in "\t\n\r") or ord(ch) == 0x7F
            for ch in value
        )
    )
    if literal_ok:
        return f"'''{value}'''"
    return f'"""{escape(value)}"""'


def format_date(value: datetime) -> str:
    """UTC timestamp, e.g. 2014-05-04T17:30:00Z."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


def resize_image(url: str) -> str:
    """Ask Blogger for the full-size image instead of the 72px thumbnail."""
    return url.replace(THUMBNAIL_SIZE_TOKEN, FULL_SIZE_TOKEN)


def post_filename(entry: Entry, use_slug: bool = True) -> str:
    """
    File name (without extension) of a post.

    Untitled posts without a slug, such as most drafts, are named after
    their numeric ID instead: post-<id>.

    Raises:
        RenderError: No slug, no usable title and no numeric ID
    """
    name = entry.slug if (use_slug and entry.slug) else make_path(entry.title)
    if not name and entry.numeric_id is not None:
        name = f"post-{entry.numeric_id}"
    if not name:
        raise RenderError(f"Post {entry.raw_id} has no title, slug or ID to name its file")
    return name


def render_post(entry: Entry) -> str:
    """Frontmatter plus content of a post."""
    if not entry.is_post:
        raise RenderError(f"Entry {entry.raw_id} is not a post")

    lines: List[str] = [f"title = {quote(entry.title)}"]
    if entry.slug and entry.slug != make_path(entry.title):
        lines.append(f"slug = {quote(entry.slug)}")
    lines.append(f"date = {format_date(entry.published)}")
    lines.append(f"updated = {format_date(entry.updated)}")

    tags = entry.label_tags
    if tags:
        lines.append(f"tags = [{', '.join(quote(t) for t in tags)}]")
    if entry.draft:
        lines.append("draft = true")
    lines.append("blogimport = true")
    if entry.extra:
        lines.append(entry.extra.rstrip("\n"))
    if entry.comment_ids:
        lines.append(f"comments = [ {', '.join(str(i) for i in entry.comment_ids)} ]")

    lines.extend([
        "[author]",
        f"\tname = {quote(entry.author.name)}",
        f"\turi = {quote(entry.author.uri)}",
        f"\timage = {quote(entry.author.image.src)}",
    ])

    if entry.thumbnail_url:
        lines.extend([
            "[image]",
            f"\tsrc = {quote(resize_image(entry.thumbnail_url))}",
            '\tlink = ""',
            f"\tthumblink = {quote(entry.thumbnail_url)}",
            '\talt = ""',
            '\ttitle = ""',
            '\tauthor = ""',
            '\tlicense = ""',
            '\tlicenseLink = ""',
        ])

    frontmatter = "\n".join(lines) + "\n"
    return (
        FRONTMATTER_DELIMITER
        + frontmatter
        + FRONTMATTER_DELIMITER
        + "\n"
        + entry.content
        + "\n"
    )


def comment_id(entry: Entry) -> str:
    if entry.numeric_id is None:
        raise RenderError(f"Comment {entry.raw_id} has no numeric ID")
    return str(entry.numeric_id)


def render_comment(entry: Entry) -> str:
    """TOML document describing a single comment."""
    if not entry.is_comment:
        raise RenderError(f"Entry {entry.raw_id} is not a comment")

    title = entry.title.replace("\n", "").replace("\r", "")
    lines: List[str] = [
        f"id = {quote(comment_id(entry))}",
        f"date = {format_date(entry.published)}",
        f"updated = {format_date(entry.updated)}",
        f"title = {multiline(title)}",
        f"content = {multiline(entry.content)}",
    ]
    if entry.reply_to:
        lines.append(f"reply = {entry.reply_to}")

    image = entry.author.image
    lines.extend([
        "[author]",
        f"\tname = {quote(entry.author.name)}",
        f"\turi = {quote(entry.author.uri)}",
        "[author.image]",
        f"\tsource = {quote(image.src)}",
        f'\twidth = "{image.width}"',
        f'\theight = "{image.height}"',
    ])
    return "\n".join(lines) + "\n"
