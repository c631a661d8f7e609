"""
Defines the data models and enums for user notifications.
"""

from pydantic import BaseModel, Field
from enum import Enum
from typing import Optional, List, Dict, Any


class NotificationType(str, Enum):
    REPORT_ACCEPTED = "REPORT_ACCEPTED"
    REPORT_REJECTED = "REPORT_REJECTED"
    comment = "comment"
    reply = "reply"
    like = "like"
    reaction = "reaction"
    generic = "generic"


class Notification(BaseModel):
    id: str
    user_id: str
    type: str
    title: str
    message: str
    data: Dict[str, Any] = Field(default_factory=dict)
    is_read: bool = False
    created_at: str


class Pagination(BaseModel):
    limit: int
    offset: int
    hasMore: bool


class NotificationPage(BaseModel):
    success: bool = True
    notifications: List[Notification]
    count: int
    pagination: Pagination


class UnreadCount(BaseModel):
    count: int


class NotificationResult(BaseModel):
    success: bool = True
    notification: Optional[Notification] = None
    updated: Optional[int] = None
