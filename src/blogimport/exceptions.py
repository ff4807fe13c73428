"""Exceptions raised by the import pipeline.

Everything derives from :class:`BlogImportError` so the CLI can turn any
fatal condition into a single error line and a non-zero exit status.
Recoverable problems (a single image, a single conversion) use the same
hierarchy but are caught and logged by the pipeline.
"""

from typing import Optional


class BlogImportError(Exception):
    """Base class for all import errors."""


class ExportParseError(BlogImportError):
    """The export document could not be parsed."""


class NoPostsError(BlogImportError):
    """The export holds no entries, or none of them is a post."""


class MissingParentError(BlogImportError):
    """A comment points at a numeric ID that no post or comment carries."""

    def __init__(self, position: int, parent_id: int):
        super().__init__(
            f"entry {position} replies to {parent_id}, which does not exist"
        )
        self.position = position
        self.parent_id = parent_id


class CommentCycleError(BlogImportError):
    """A comment is its own ancestor."""

    def __init__(self, position: int, post_position: Optional[int] = None):
        where = f" under post {post_position}" if post_position is not None else ""
        super().__init__(f"entry {position}{where} is part of a reply cycle")
        self.position = position
        self.post_position = post_position


class DownloadError(BlogImportError):
    """An image could not be downloaded."""


class ConversionError(BlogImportError):
    """HTML content could not be converted to Markdown."""


class RenderError(BlogImportError):
    """An entry could not be rendered to its output format."""


class WriteError(BlogImportError):
    """An output file could not be written."""
