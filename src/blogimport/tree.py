"""
Comment hierarchy: linking comments to their parents and flattening the
result into display order.

Children are stored as positions into the entry list rather than as object
references, so the tree is just a set of integer lists hanging off entries.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from .exceptions import CommentCycleError, MissingParentError
from .models import Entry
from .resolver import Resolution, parse_link_id

logger = logging.getLogger(__name__)


@dataclass
class CommentTree:
    """
    Outcome of linking comments.

    Attributes:
        linked: Positions of comments attached to a parent
        skipped: Positions of comments with no parent identifier at all
    """
    linked: List[int] = field(default_factory=list)
    skipped: List[int] = field(default_factory=list)


def parent_id_of(entry: Entry) -> Optional[int]:
    """
    Numeric ID of the entry a comment replies to.

    A reply to another comment carries a rel="related" link, already
    resolved into entry.reply_to. Top-level comments only name their post
    through the in-reply-to source URL.
    """
    if entry.reply_to:
        return entry.reply_to
    return parse_link_id(entry.reply_source) or None


def build_comment_tree(entries: List[Entry], resolution: Resolution) -> CommentTree:
    """
    Attach every comment to the children of its parent post or comment.

    Must run after every entry has been classified and resolved, since a
    comment may come before its parent in the export.

    Raises:
        MissingParentError: A comment names a parent ID nothing carries
        CommentCycleError: Following parents from a comment loops back
                           instead of reaching a post
    """
    tree = CommentTree()
    parent_of: Dict[int, int] = {}

    for position, entry in enumerate(entries):
        if not entry.is_comment:
            continue

        parent_id = parent_id_of(entry)
        if parent_id is None:
            logger.info("Skipping deleted comment %s", entry.raw_id)
            tree.skipped.append(position)
            continue

        parent = resolution.position_of(parent_id)
        if parent is None:
            raise MissingParentError(position, parent_id)

        parent_of[position] = parent
        entries[parent].children.append(position)
        tree.linked.append(position)

    check_acyclic(parent_of)
    logger.debug("Linked %d comments, skipped %d", len(tree.linked), len(tree.skipped))
    return tree


def check_acyclic(parent_of: Dict[int, int]) -> None:
    """
    Make sure every parent chain ends at a post or a skipped comment.

    A reply loop hangs off no post, so flattening never reaches it.
    """
    settled: Set[int] = set()
    for start in parent_of:
        chain: Set[int] = set()
        position = start
        while position in parent_of and position not in settled:
            if position in chain:
                raise CommentCycleError(position)
            chain.add(position)
            position = parent_of[position]
        settled.update(chain)


def flatten_comments(entries: List[Entry], root: int) -> List[int]:
    """
    Return the positions of every comment below ``root`` in display order.

    Siblings are ordered by publish time; ties keep export order. Each
    comment is followed directly by its own replies. The walk uses an
    explicit stack so deep reply chains cannot hit the recursion limit.

    Raises:
        CommentCycleError: A comment turns out to be its own ancestor
    """
    def sorted_children(position: int) -> List[int]:
        return sorted(entries[position].children, key=lambda i: entries[i].published)

    order: List[int] = []
    visited = {root}
    stack = list(reversed(sorted_children(root)))

    while stack:
        position = stack.pop()
        if position in visited:
            raise CommentCycleError(position, root)
        visited.add(position)
        order.append(position)
        stack.extend(reversed(sorted_children(position)))

    return order


def resolve_comment_order(entries: List[Entry], root: int) -> List[int]:
    """Store the flattened comment IDs of a post in its comment_ids."""
    post = entries[root]
    post.comment_ids = [
        entries[i].numeric_id
        for i in flatten_comments(entries, root)
        if entries[i].numeric_id is not None
    ]
    return post.comment_ids
