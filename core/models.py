"""
Core data models for the Novel Comments service

Defines the `Comment` table stored in SQLite plus the request and response
shapes used by the HTTP API. Field names match the JSON wire format.
"""

from typing import Optional, List
from sqlmodel import SQLModel, Field
from pydantic import BaseModel

REQUIRED_FIELDS = ("username", "novelName", "readTime", "content")


class CommentBase(SQLModel):
    username: str
    novelName: str
    readTime: str
    content: str


class Comment(CommentBase, table=True):
    """
    A reader's comment about a novel, stored in the `comments` table.

    `date` is the creation instant in ISO-8601 UTC; `displayDate` is the same
    instant rendered for display. Both are assigned by the store on insert.
    AUTOINCREMENT keeps ids from being reused after deletes.
    """

    __tablename__ = "comments"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    date: str
    displayDate: str


class CommentRead(CommentBase):
    """Comment as returned by the API"""

    id: int
    date: str
    displayDate: str


class CommentCreate(BaseModel):
    """
    Body of a create request. Fields are optional here so that missing values
    can be reported with the service's own validation message.
    """

    username: Optional[str] = None
    novelName: Optional[str] = None
    readTime: Optional[str] = None
    content: Optional[str] = None

    def missing_fields(self) -> List[str]:
        return [name for name in REQUIRED_FIELDS if not getattr(self, name)]


class MessageResponse(BaseModel):
    message: str
