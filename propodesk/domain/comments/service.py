"""Comment service - Business logic for document comment threads"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import ContractComment, ProposalComment
from ...shared.validators import to_naive_utc
from ...utils.sanitization import sanitize_html, sanitize_string
from .repository import CommentRepository
from .schemas import CommentCreate, CommentListResponse, CommentOut
from .tree import organize_comments

logger = logging.getLogger(__name__)

MAX_COMMENT_PAGE = 500


class CommentService:
    """Service layer for comments on one document type"""

    def __init__(self, db: Session, repo: CommentRepository):
        self.db = db
        self.repo = repo

    @classmethod
    def for_proposals(cls, db: Session) -> "CommentService":
        return cls(db, CommentRepository(ProposalComment, "proposal_id"))

    @classmethod
    def for_contracts(cls, db: Session) -> "CommentService":
        return cls(db, CommentRepository(ContractComment, "contract_id"))

    def add_comment(self, document_id: int, data: CommentCreate) -> CommentOut:
        """Store a comment; a reply's parent must belong to the same document"""
        if data.parent_comment_id is not None:
            parent = self.repo.get_comment(self.db, document_id, data.parent_comment_id)
            if not parent:
                raise HTTPException(
                    status_code=400, detail="Parent comment not found on this document"
                )

        comment = self.repo.create_comment(
            self.db,
            document_id,
            author_name=sanitize_string(data.author_name.strip()) if data.author_name else "Anonymous",
            content=sanitize_html(data.content),
            highlighted_text=sanitize_string(data.highlighted_text),
            block_id=data.block_id,
            parent_comment_id=data.parent_comment_id,
            is_resolved=False,
        )
        logger.info(f"💬 Comment {comment.id} added to {self.repo.document_field}={document_id}")
        return CommentOut.model_validate(comment)

    def list_comments(
        self,
        document_id: int,
        since: Optional[datetime] = None,
        limit: int = 100,
        block_id: Optional[str] = None,
    ) -> CommentListResponse:
        """Flat comment list plus the threaded view, optionally narrowed to one block"""
        limit = max(1, min(limit, MAX_COMMENT_PAGE))
        rows = self.repo.list_comments(
            self.db, document_id, since=to_naive_utc(since), limit=limit, block_id=block_id
        )
        flat = [CommentOut.model_validate(row) for row in rows]
        return CommentListResponse(comments=flat, threads=organize_comments(flat))

    def resolve_comment(
        self, document_id: int, comment_id: int, is_resolved: Optional[bool] = None
    ) -> CommentOut:
        """Toggle (or set) the resolved flag on a root comment"""
        comment = self.repo.get_comment(self.db, document_id, comment_id)
        if not comment:
            raise HTTPException(status_code=404, detail="Comment not found")
        if comment.parent_comment_id is not None:
            raise HTTPException(status_code=400, detail="Only top-level comments can be resolved")

        new_value = (not comment.is_resolved) if is_resolved is None else is_resolved
        comment = self.repo.set_resolved(self.db, comment, new_value)
        logger.info(f"✅ Comment {comment_id} resolved={new_value}")
        return CommentOut.model_validate(comment)
