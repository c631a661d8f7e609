from pydantic import BaseModel, Field
from typing import List, Optional


class CommentAuthor(BaseModel):
    full_name: str = "Anonymous"
    avatar_url: Optional[str] = None


class Comment(BaseModel):
    id: str
    report_id: str
    user_id: str
    content: str
    parent_comment_id: Optional[str] = None
    is_edited: bool = False
    created_at: str
    updated_at: Optional[str] = None
    user: CommentAuthor = Field(default_factory=CommentAuthor)
    likes_count: int = 0
    is_liked: bool = False
    replies: List["Comment"] = Field(default_factory=list)


class CommentPage(BaseModel):
    comments: List[Comment]
    total: int  # top-level comments only
    limit: int
    offset: int
    hasMore: bool


class CommentCreate(BaseModel):
    content: str
    parent_comment_id: Optional[str] = None


class CommentUpdate(BaseModel):
    comment_id: str
    content: str


class CommentResult(BaseModel):
    success: bool = True
    comment: Comment


class LikeRequest(BaseModel):
    comment_id: str
