from .schemas import CommentCreate, CommentListResponse, CommentOut, CommentResolve
from .service import CommentService
from .tree import flatten_comments, organize_comments

__all__ = [
    "CommentCreate",
    "CommentListResponse",
    "CommentOut",
    "CommentResolve",
    "CommentService",
    "flatten_comments",
    "organize_comments",
]
