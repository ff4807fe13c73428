"""
blogimport - Blogger export to Hugo content

This package converts a Blogger Atom export into Hugo content files: one
Markdown/HTML file per post with TOML frontmatter, optional comment files,
and optional local copies of the images posts refer to.

Main components:
- Importer: Runs the whole import for one export file
- ImportOptions: Settings for a run
- Entry: Data model for a single export record
- ImageLocalizer: Async image downloader and reference rewriter

Usage:
    from pathlib import Path
    from blogimport import Importer, ImportOptions

    Importer(Path("blog.xml"), Path("content/post"),
             ImportOptions(comments=True)).run()
"""

from .config import ImportOptions
from .localizer import ImageLocalizer
from .models import Author, AuthorImage, Entry, Link, Role, Tag
from .pipeline import Importer, ImportSummary

__all__ = [
    'Importer',
    'ImportOptions',
    'ImportSummary',
    'ImageLocalizer',
    'Entry',
    'Author',
    'AuthorImage',
    'Link',
    'Role',
    'Tag',
]

__version__ = '1.0.0'
