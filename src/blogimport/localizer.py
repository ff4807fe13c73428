"""
Async image localizer.

Finds <img> tags in post content that point at remote images, downloads
each image into the static directory, and rewrites the content to point at
the local copy.

File naming is deterministic. An image is saved under the last segment of
its URL. If that name is already taken by a file with different bytes, the
name gets a content-hash prefix instead, so two different "photo.jpg"
images never overwrite each other and re-running the import yields the same
names.
"""

import asyncio
import hashlib
import html
import logging
import re
from pathlib import Path, PurePosixPath
from typing import Dict, List, Optional, Tuple
from urllib.parse import unquote_plus, urlsplit

import aiofiles
import aiofiles.os
import aiohttp

from .config import DOWNLOAD_TIMEOUT, MAX_CONCURRENT_DOWNLOADS, STATIC_ROOT_NAME
from .exceptions import DownloadError

logger = logging.getLogger(__name__)

IMG_SRC = re.compile(r'<img[^>]*src="([^"]+)"[^>]*>')

HASH_PREFIX_LENGTH = 12
DEFAULT_IMAGE_NAME = "image"
CHUNK_SIZE = 8192


def find_image_sources(content: str) -> List[str]:
    """Distinct remote image URLs in the content, in order of appearance."""
    seen: Dict[str, None] = {}
    for src in IMG_SRC.findall(content):
        if src.startswith("http"):
            seen.setdefault(src, None)
    return list(seen)


def image_filename(url: str, content_type: str = "") -> str:
    """
    Local file name for an image URL.

    Takes the last path segment, drops the query string, decodes percent
    escapes, and adds an extension from the Content-Type header when the
    name has none.

    Example:
        image_filename("http://x.com/a/My%20Photo.jpg?w=200")  # "My Photo.jpg"
        image_filename("http://x.com/a/pic", "image/png")       # "pic.png"
    """
    path = urlsplit(url).path
    name = PurePosixPath(unquote_plus(path.rsplit("/", 1)[-1])).name
    if not name or name in (".", ".."):
        name = DEFAULT_IMAGE_NAME

    mime = content_type.split(";", 1)[0].strip().lower()
    if mime.startswith("image/") and not PurePosixPath(name).suffix:
        name += "." + mime[len("image/"):]
    return name


def find_static_root(directory: Path) -> Path:
    """Nearest ancestor (or self) named "static"; the directory itself if none."""
    for candidate in (directory, *directory.parents):
        if candidate.name == STATIC_ROOT_NAME:
            return candidate
    return directory


def sha256_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


async def _same_content(path: Path, digest: str) -> bool:
    sha = hashlib.sha256()
    async with aiofiles.open(path, "rb") as f:
        while True:
            chunk = await f.read(CHUNK_SIZE)
            if not chunk:
                break
            sha.update(chunk)
    return sha.hexdigest() == digest


class ImageLocalizer:
    """
    Downloads remote images referenced in HTML and rewrites the references.

    Downloads for one piece of content run concurrently, limited by a
    semaphore. Choosing a file name and creating the file happen under a
    lock, so two downloads finishing together cannot claim the same name.

    Usage:
        async with ImageLocalizer(Path("site/static/img")) as localizer:
            content = await localizer.localize(content)
    """

    def __init__(
        self,
        static_dir: Path,
        session: Optional[aiohttp.ClientSession] = None,
        max_concurrent: int = MAX_CONCURRENT_DOWNLOADS,
        timeout: float = DOWNLOAD_TIMEOUT,
        static_root: Optional[Path] = None,
    ):
        """Initialize the localizer.

        Args:
            static_dir: Directory that receives the images
            session: Optional aiohttp session. If None, creates a new one.
            max_concurrent: Maximum simultaneous downloads
            timeout: Total timeout in seconds for one download
            static_root: Directory the returned paths are relative to.
                         Defaults to the nearest "static" ancestor.
        """
        self.static_dir = Path(static_dir)
        self.static_root = Path(static_root) if static_root else find_static_root(self.static_dir)
        self.session = session
        self._own_session = session is None
        self.timeout = timeout
        self.max_concurrent = max_concurrent
        # Created on entry so they belong to the running event loop
        self.semaphore: Optional[asyncio.Semaphore] = None
        self._name_lock: Optional[asyncio.Lock] = None

    async def __aenter__(self):
        """Async context manager entry."""
        self.semaphore = asyncio.Semaphore(self.max_concurrent)
        self._name_lock = asyncio.Lock()
        if self._own_session:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self._own_session and self.session:
            await self.session.close()

    def public_path(self, path: Path) -> str:
        """Site path of a saved image, e.g. /img/photo.jpg."""
        return "/" + path.relative_to(self.static_root).as_posix()

    async def fetch(self, url: str) -> Tuple[bytes, str]:
        """Download an image, returning its bytes and Content-Type.

        Raises:
            DownloadError: Network failure or a non-200 response
        """
        try:
            async with self.semaphore:
                async with self.session.get(url) as response:
                    if response.status != 200:
                        raise DownloadError(f"Error {response.status} {response.reason}")
                    chunks = []
                    async for chunk in response.content.iter_chunked(CHUNK_SIZE):
                        chunks.append(chunk)
                    return b"".join(chunks), response.headers.get("Content-Type", "")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DownloadError(str(e) or e.__class__.__name__) from e

    async def save(self, name: str, data: bytes) -> Path:
        """
        Store image bytes under ``name`` in the static directory.

        Reuses an existing file with identical bytes. Otherwise picks
        ``name``, then ``<hash>-name``, then ``<hash>-<n>-name``, whichever
        is free first.
        """
        digest = sha256_bytes(data)
        prefix = digest[:HASH_PREFIX_LENGTH]
        candidates = [name, f"{prefix}-{name}"]

        async with self._name_lock:
            await aiofiles.os.makedirs(self.static_dir, exist_ok=True)
            counter = 1
            while True:
                if candidates:
                    candidate = candidates.pop(0)
                else:
                    candidate = f"{prefix}-{counter}-{name}"
                    counter += 1
                path = self.static_dir / candidate
                if not await aiofiles.os.path.exists(path):
                    break
                if await _same_content(path, digest):
                    logger.debug("Reusing %s for identical image", path)
                    return path

            async with aiofiles.open(path, "wb") as f:
                await f.write(data)
        return path

    async def download(self, url: str) -> str:
        """Download one image and return its public path."""
        data, content_type = await self.fetch(url)
        try:
            path = await self.save(image_filename(url, content_type), data)
        except OSError as e:
            raise DownloadError(f"Could not save image: {e}") from e
        logger.debug("Saved %s to %s", url, path)
        return self.public_path(path)

    async def localize(self, content: str) -> str:
        """
        Download every remote image in ``content`` and rewrite its references.

        A failed download is logged and its reference left unchanged.
        """
        sources = find_image_sources(content)
        if not sources:
            return content

        results = await asyncio.gather(
            *[self.download(html.unescape(src)) for src in sources],
            return_exceptions=True,
        )

        local: Dict[str, str] = {}
        for src, result in zip(sources, results):
            if isinstance(result, DownloadError):
                logger.warning("Failed to download image %r: %s", src, result)
                continue
            if isinstance(result, BaseException):
                raise result
            local[src] = result

        if not local:
            return content
        # Longest first so a URL is never rewritten through a shorter prefix of it
        pattern = re.compile("|".join(
            re.escape(src) for src in sorted(local, key=len, reverse=True)
        ))
        return pattern.sub(lambda m: local[m.group(0)], content)
