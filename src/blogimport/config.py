"""Constants for the Blogger export format and the import options."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

# Category scheme that carries an entry's kind
KIND_SCHEME = "http://schemas.google.com/g/2005#kind"
POST_KIND = "http://schemas.google.com/blogger/2008/kind#post"
COMMENT_KIND = "http://schemas.google.com/blogger/2008/kind#comment"

# Category scheme for the blog's own labels
TAG_SCHEME = "http://www.blogger.com/atom/ns#"

# Entry IDs look like "tag:blogger.com,1999:blog-123.post-456"
ID_MARKER = "post-"

# Timestamp layout used throughout the export, e.g. 2014-05-04T10:30:00.000-07:00
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%f%z"

DRAFT_TOKENS = {"yes": True, "no": False}

# Thumbnails come as 72px crops; this token asks for the full size instead
THUMBNAIL_SIZE_TOKEN = "s72-c"
FULL_SIZE_TOKEN = "s1600"

BLOGGER_HOST = "blogger.com"

FRONTMATTER_DELIMITER = "+++\n"
COMMENTS_DIR = "comments"

# Image download settings
MAX_CONCURRENT_DOWNLOADS = 4
DOWNLOAD_TIMEOUT = 60.0
STATIC_ROOT_NAME = "static"


@dataclass
class ImportOptions:
    """
    Options for a single import run.

    Attributes:
        static_dir: Directory that receives downloaded images. None disables
                    image localization.
        extra: Raw frontmatter lines added verbatim to every post
        no_blogger: Blank author URI/image values that point at blogger.com
        comments: Link comments to their posts and write comment files
        to_markdown: Convert post content from HTML to Markdown
        use_slug: Name post files after their slug instead of their title
        concurrency: Maximum simultaneous image downloads per post
        timeout: Total timeout in seconds for a single image download
        progress: Show a progress bar while importing posts
    """
    static_dir: Optional[Path] = None
    extra: str = ""
    no_blogger: bool = False
    comments: bool = False
    to_markdown: bool = False
    use_slug: bool = True
    concurrency: int = MAX_CONCURRENT_DOWNLOADS
    timeout: float = DOWNLOAD_TIMEOUT
    progress: bool = True

    def __post_init__(self):
        if self.static_dir is not None:
            self.static_dir = Path(self.static_dir).resolve()
        if self.concurrency < 1:
            raise ValueError("concurrency must be at least 1")
