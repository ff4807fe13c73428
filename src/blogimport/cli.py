"""CLI interface for blogimport."""

import logging
import sys
from pathlib import Path

import click

from .config import COMMENTS_DIR, DOWNLOAD_TIMEOUT, MAX_CONCURRENT_DOWNLOADS, ImportOptions
from .exceptions import BlogImportError
from .pipeline import Importer
from .utils import ensure_dir

logger = logging.getLogger("blogimport")


@click.command()
@click.argument('xmlfile', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument('targetdir', type=click.Path(file_okay=True, path_type=Path))
@click.option(
    '--static',
    'static_dir',
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help='Static directory for imported images'
)
@click.option(
    '--extra',
    default='',
    help='Additional metadata to set in frontmatter'
)
@click.option(
    '--no-blogger',
    is_flag=True,
    help='Remove blogger specific URLs from author data'
)
@click.option(
    '--comments',
    is_flag=True,
    help='Import comments'
)
@click.option(
    '--md',
    'to_markdown',
    is_flag=True,
    help='Convert HTML to Markdown'
)
@click.option(
    '--slug/--no-slug',
    'use_slug',
    default=True,
    help='Name post files after their slug (default) or their title'
)
@click.option(
    '--concurrency',
    default=MAX_CONCURRENT_DOWNLOADS,
    type=click.IntRange(min=1),
    help='Simultaneous image downloads per post'
)
@click.option(
    '--timeout',
    default=DOWNLOAD_TIMEOUT,
    type=float,
    help='Timeout in seconds for a single image download'
)
@click.option(
    '--progress/--no-progress',
    default=True,
    help='Show a progress bar'
)
@click.option(
    '-v', '--verbose',
    is_flag=True,
    help='Log debug output'
)
def main(xmlfile, targetdir, static_dir, extra, no_blogger, comments,
         to_markdown, use_slug, concurrency, timeout, progress, verbose):
    """Convert a Blogger export XMLFILE into Hugo content under TARGETDIR."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(message)s',
    )

    options = ImportOptions(
        static_dir=static_dir,
        extra=extra,
        no_blogger=no_blogger,
        comments=comments,
        to_markdown=to_markdown,
        use_slug=use_slug,
        concurrency=concurrency,
        timeout=timeout,
        progress=progress,
    )

    try:
        if not targetdir.exists():
            ensure_dir(targetdir / COMMENTS_DIR)
        ensure_dir(targetdir)
        Importer(xmlfile, targetdir, options).run()
    except BlogImportError as e:
        logger.error("%s", e)
        sys.exit(1)


if __name__ == '__main__':
    main()
