"""
Rebuild comment threads from flat storage.

Comments are stored flat with an optional ``parent_comment_id``; replies are
a view-time structure. A comment whose parent is absent from the list is
shown as a root so nothing disappears from the conversation.
"""

from typing import Optional, Sequence

from .schemas import CommentOut


def organize_comments(
    comments: Sequence[CommentOut], block_id: Optional[str] = None
) -> list[CommentOut]:
    """
    Thread a flat comment list into root comments with nested ``replies``.

    When ``block_id`` is given the list is filtered to that block first, so a
    reply whose parent belongs to another block becomes a root. Root order
    and reply order follow the input order. Inputs are not mutated.
    """
    if block_id is not None:
        comments = [comment for comment in comments if comment.block_id == block_id]

    nodes = {comment.id: comment.model_copy(update={"replies": []}) for comment in comments}
    roots: list[CommentOut] = []

    for comment in comments:
        node = nodes[comment.id]
        parent = None
        if comment.parent_comment_id is not None:
            parent = nodes.get(comment.parent_comment_id)
        if parent is None or parent is node:
            roots.append(node)
        else:
            parent.replies.append(node)

    return roots


def flatten_comments(roots: Sequence[CommentOut]) -> list[CommentOut]:
    """Depth-first inverse of organize_comments; returned comments have empty replies"""
    flat: list[CommentOut] = []

    def visit(node: CommentOut) -> None:
        flat.append(node.model_copy(update={"replies": []}))
        for reply in node.replies:
            visit(reply)

    for root in roots:
        visit(root)
    return flat
