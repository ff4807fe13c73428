"""Configure test paths and shared fixtures."""
import sys
from pathlib import Path

import pytest

# Add src/ to path so tests can import the package
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

KIND = "http://schemas.google.com/g/2005#kind"
POST = "http://schemas.google.com/blogger/2008/kind#post"
COMMENT = "http://schemas.google.com/blogger/2008/kind#comment"
TEMPLATE = "http://schemas.google.com/blogger/2008/kind#template"
LABEL = "http://www.blogger.com/atom/ns#"

FEED_HEAD = (
    "<?xml version='1.0' encoding='UTF-8'?>"
    "<feed xmlns='http://www.w3.org/2005/Atom'"
    " xmlns:app='http://purl.org/atom/app#'"
    " xmlns:thr='http://purl.org/syndication/thread/1.0'"
    " xmlns:gd='http://schemas.google.com/g/2005'"
    " xmlns:media='http://search.yahoo.com/mrss/'>"
)


def _escape(text):
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def entry_xml(
    entry_id,
    kind=POST,
    title="",
    content="",
    published="2014-05-04T10:30:00.000-07:00",
    draft=None,
    labels=(),
    links=(),
    reply_source=None,
    thumbnail=None,
    author="Alice",
):
    """Build one <entry> element the way Blogger exports it."""
    parts = [
        "<entry>",
        f"<id>tag:blogger.com,1999:blog-1.post-{entry_id}</id>",
        f"<published>{published}</published>",
        f"<updated>{published}</updated>",
    ]
    if draft is not None:
        parts.append(f"<app:control><app:draft>{draft}</app:draft></app:control>")
    if kind is not None:
        parts.append(f"<category scheme='{KIND}' term='{kind}'/>")
    for label in labels:
        parts.append(f"<category scheme='{LABEL}' term='{label}'/>")
    parts.append(f"<title type='text'>{_escape(title)}</title>")
    parts.append(f"<content type='html'>{_escape(content)}</content>")
    for rel, href in links:
        parts.append(f"<link rel='{rel}' type='text/html' href='{href}'/>")
    parts.append(
        f"<author><name>{author}</name><uri>http://www.blogger.com/profile/1</uri>"
        "<gd:image rel='http://schemas.google.com/g/2005#thumbnail' width='16'"
        " height='16' src='http://img1.blogblog.com/img/b16-rounded.gif'/></author>"
    )
    if thumbnail:
        parts.append(f"<media:thumbnail url='{thumbnail}' height='72' width='72'/>")
    if reply_source:
        parts.append(
            f"<thr:in-reply-to ref='tag:blogger.com,1999:blog-1.post-x'"
            f" href='http://example.blogspot.com/x.html' source='{reply_source}'"
            " type='text/html'/>"
        )
    parts.append("</entry>")
    return "".join(parts)


def post_source(post_id):
    return f"http://www.blogger.com/feeds/1/posts/default/{post_id}"


def feed_xml(*entries):
    return FEED_HEAD + "".join(entries) + "</feed>"


@pytest.fixture
def write_feed(tmp_path):
    """Write a feed built from entry XML strings and return its path."""
    def _write(*entries):
        path = tmp_path / "export.xml"
        path.write_text(feed_xml(*entries), encoding="utf-8")
        return path
    return _write


class FakeContent:
    def __init__(self, body):
        self._body = body

    async def iter_chunked(self, size):
        for i in range(0, len(self._body), size):
            yield self._body[i:i + size]


class FakeResponse:
    def __init__(self, status=200, body=b"", content_type="image/jpeg"):
        self.status = status
        self.reason = "OK" if status == 200 else "Not Found"
        self.headers = {"Content-Type": content_type}
        self.content = FakeContent(body)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False


class FakeSession:
    """Stands in for aiohttp.ClientSession; serves canned responses by URL."""

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.requested = []

    def get(self, url):
        self.requested.append(url)
        response = self.responses.get(url)
        if response is None:
            return FakeResponse(status=404)
        return response

    async def close(self):
        pass


@pytest.fixture
def fake_session():
    return FakeSession()
