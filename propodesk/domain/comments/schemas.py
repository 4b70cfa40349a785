"""Comment domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class CommentCreate(BaseModel):
    """Schema for posting a comment or reply"""

    author_name: Optional[str] = Field(None, max_length=255)
    content: str = Field(..., min_length=1, max_length=10000)
    highlighted_text: Optional[str] = Field(None, max_length=5000)
    block_id: Optional[str] = Field(None, max_length=100)
    parent_comment_id: Optional[int] = None


class CommentResolve(BaseModel):
    """Omit is_resolved to toggle the current value"""

    is_resolved: Optional[bool] = None


class CommentOut(BaseModel):
    id: int
    proposal_id: Optional[int] = None
    contract_id: Optional[int] = None
    author_name: str
    content: str
    highlighted_text: Optional[str] = None
    block_id: Optional[str] = None
    parent_comment_id: Optional[int] = None
    is_resolved: bool = False
    created_at: Optional[datetime] = None
    replies: list["CommentOut"] = Field(default_factory=list)

    class Config:
        from_attributes = True


class CommentListResponse(BaseModel):
    comments: list[CommentOut]
    threads: list[CommentOut]
