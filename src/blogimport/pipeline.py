"""
Import pipeline: from an export file to Hugo content on disk.

The phases run strictly one after another over the whole entry list:

    parse -> classify -> resolve IDs -> link comments -> per post:
    flatten comments -> localize images -> convert -> render -> write

Linking has to wait for resolution of *every* entry because a comment may
appear before the post it belongs to.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import aiohttp
from tqdm import tqdm

from .classify import classify_entries
from .config import COMMENTS_DIR, ImportOptions
from .convert import clean_content, html_to_markdown
from .exceptions import ConversionError, NoPostsError
from .localizer import ImageLocalizer
from .models import Entry
from .parser import parse_export
from .render import comment_id, post_filename, render_comment, render_post
from .resolver import Resolution, resolve
from .tree import CommentTree, build_comment_tree, resolve_comment_order
from .utils import ensure_dir, strip_blogger, write_text_file

logger = logging.getLogger(__name__)


@dataclass
class ImportSummary:
    """Counts reported at the end of a run."""
    published: int = 0
    drafts: int = 0
    comments: int = 0
    skipped_comments: int = 0
    written: List[Path] = field(default_factory=list)


class Importer:
    """
    Converts one Blogger export into a directory of Hugo content.

    Usage:
        importer = Importer(Path("blog.xml"), Path("site/content/post"),
                            ImportOptions(comments=True))
        summary = importer.run()
    """

    def __init__(
        self,
        export_path: Path,
        target_dir: Path,
        options: Optional[ImportOptions] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """Initialize the importer.

        Args:
            export_path: Path to the export XML file
            target_dir: Directory that receives the post files
            options: Import options, defaults if None
            session: Optional aiohttp session for image downloads
        """
        self.export_path = Path(export_path)
        self.target_dir = Path(target_dir)
        self.options = options or ImportOptions()
        self.session = session
        self.entries: List[Entry] = []

    @property
    def comments_dir(self) -> Path:
        return self.target_dir / COMMENTS_DIR

    def load(self) -> List[Entry]:
        """Parse the export and classify its entries."""
        entries = parse_export(self.export_path)
        if not entries:
            raise NoPostsError("No blog entries found!")
        classify_entries(entries)
        if not any(e.is_post for e in entries):
            raise NoPostsError("No blog posts found!")
        self.entries = entries
        return entries

    def link(self, entries: List[Entry]) -> Optional[CommentTree]:
        """Resolve IDs and, when comments are imported, build the comment tree."""
        resolution: Resolution = resolve(entries)
        if not self.options.comments:
            return None
        return build_comment_tree(entries, resolution)

    def write_comments(self, entries: List[Entry], tree: CommentTree) -> int:
        """Write one TOML file per linked comment."""
        ensure_dir(self.comments_dir)
        written = 0
        for position in tree.linked:
            entry = entries[position]
            if entry.numeric_id is None:
                logger.warning("Not writing comment %s: no numeric ID", entry.raw_id)
                continue
            path = self.comments_dir / f"c{comment_id(entry)}.toml"
            write_text_file(path, render_comment(entry))
            written += 1
        return written

    async def import_post(
        self,
        entries: List[Entry],
        position: int,
        localizer: Optional[ImageLocalizer],
    ) -> Path:
        """Bring one post into its final shape and write it."""
        entry = entries[position]
        logger.info("Importing post: %s", entry.title)

        if self.options.comments:
            resolve_comment_order(entries, position)
        if self.options.extra:
            entry.extra = self.options.extra
        if self.options.no_blogger:
            strip_blogger(entry)

        if localizer is not None:
            entry.content = await localizer.localize(entry.content)

        if self.options.to_markdown:
            try:
                entry.content = html_to_markdown(entry.content)
            except ConversionError as e:
                logger.warning("Could not convert post %r to Markdown: %s", entry.title, e)

        entry.content = clean_content(entry.content)

        path = self.target_dir / f"{post_filename(entry, self.options.use_slug)}.md"
        write_text_file(path, render_post(entry))
        return path

    async def import_posts(
        self,
        entries: List[Entry],
        localizer: Optional[ImageLocalizer],
        summary: ImportSummary,
    ) -> ImportSummary:
        positions = [i for i, e in enumerate(entries) if e.is_post]
        for position in tqdm(positions, desc="Importing posts", unit="post",
                             disable=not self.options.progress):
            path = await self.import_post(entries, position, localizer)
            summary.written.append(path)
            if entries[position].draft:
                summary.drafts += 1
            else:
                summary.published += 1
        return summary

    async def run_async(self) -> ImportSummary:
        """Run every phase. Fatal problems raise a BlogImportError."""
        entries = self.load()
        ensure_dir(self.target_dir)

        summary = ImportSummary()
        tree = self.link(entries)
        if tree is not None:
            summary.comments = self.write_comments(entries, tree)
            summary.skipped_comments = len(tree.skipped)

        if self.options.static_dir is None:
            await self.import_posts(entries, None, summary)
        else:
            async with ImageLocalizer(
                self.options.static_dir,
                session=self.session,
                max_concurrent=self.options.concurrency,
                timeout=self.options.timeout,
            ) as localizer:
                await self.import_posts(entries, localizer, summary)

        logger.info("Wrote %d published posts to disk.", summary.published)
        logger.info("Wrote %d drafts to disk.", summary.drafts)
        return summary

    def run(self) -> ImportSummary:
        """Synchronous entry point."""
        return asyncio.run(self.run_async())
