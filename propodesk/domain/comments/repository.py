"""Comment repository - Database operations shared by proposal and contract comments"""

from datetime import datetime
from typing import Optional, Union

from sqlalchemy.orm import Session

from ...models import ContractComment, ProposalComment

CommentModel = Union[type[ProposalComment], type[ContractComment]]


class CommentRepository:
    """Repository for flat comment storage keyed by a document foreign key"""

    def __init__(self, model: CommentModel, document_field: str):
        self.model = model
        self.document_field = document_field

    def _document_column(self):
        return getattr(self.model, self.document_field)

    def list_comments(
        self,
        db: Session,
        document_id: int,
        since: Optional[datetime] = None,
        limit: int = 100,
        block_id: Optional[str] = None,
    ) -> list:
        """Comments of a document in creation order"""
        query = db.query(self.model).filter(self._document_column() == document_id)
        if since is not None:
            query = query.filter(self.model.created_at > since)
        if block_id is not None:
            query = query.filter(self.model.block_id == block_id)
        return query.order_by(self.model.created_at.asc(), self.model.id.asc()).limit(limit).all()

    def get_comment(self, db: Session, document_id: int, comment_id: int):
        return (
            db.query(self.model)
            .filter(self.model.id == comment_id, self._document_column() == document_id)
            .first()
        )

    def create_comment(self, db: Session, document_id: int, **comment_data):
        comment = self.model(**{self.document_field: document_id}, **comment_data)
        db.add(comment)
        db.commit()
        db.refresh(comment)
        return comment

    def set_resolved(self, db: Session, comment, is_resolved: bool):
        comment.is_resolved = is_resolved
        db.commit()
        db.refresh(comment)
        return comment
