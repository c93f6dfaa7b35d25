"""
API Endpoints for the Novel Comments service.

Endpoints Provided:
- `GET /api/comments`: every comment, newest first.
- `POST /api/comments`: create a comment from `username`, `novelName`,
  `readTime` and `content`. All four are required and must be non-empty.
- `DELETE /api/comments/{id}`: delete one comment.
- `DELETE /api/comments`: delete every comment.

Each endpoint is a thin adapter around `CommentStore`, which is injected per
request from `app.state`. Failures are raised as `CommentAPIException`
subclasses and rendered as `{"error": <message>}` by the handlers registered in
`core.exceptions`.
"""

import logging
from typing import List
from fastapi import APIRouter, Depends

from core.exceptions import CommentNotFoundError, ValidationError
from core.models import CommentCreate, CommentRead, MessageResponse
from services.comment_store import CommentStore
from .dependencies import get_comment_store

logger = logging.getLogger(__name__)

COMMENT_DELETED_MESSAGE = "评论删除成功"
COMMENTS_CLEARED_MESSAGE = "所有评论已清空"

# SQLite INTEGER is a signed 64-bit value
MIN_COMMENT_ID = -(2 ** 63)
MAX_COMMENT_ID = 2 ** 63 - 1

router = APIRouter(prefix="/api/comments", tags=["Comments"])


@router.get("", response_model=List[CommentRead])
async def list_comments(store: CommentStore = Depends(get_comment_store)):
    """List all comments, newest first"""
    return await store.list_all()


@router.post("", response_model=CommentRead)
async def create_comment(
    request: CommentCreate,
    store: CommentStore = Depends(get_comment_store),
):
    """Create a comment"""
    missing = request.missing_fields()
    if missing:
        raise ValidationError(fields=missing)

    return await store.insert(
        username=request.username,
        novel_name=request.novelName,
        read_time=request.readTime,
        content=request.content,
    )


@router.delete("/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    comment_id: str, store: CommentStore = Depends(get_comment_store)
):
    """Delete a single comment by id"""
    try:
        numeric_id = int(comment_id)
    except ValueError:
        # Non-numeric ids can never match a row
        raise CommentNotFoundError(comment_id)

    if not MIN_COMMENT_ID <= numeric_id <= MAX_COMMENT_ID:
        raise CommentNotFoundError(comment_id)

    if not await store.delete_one(numeric_id):
        raise CommentNotFoundError(comment_id)

    return MessageResponse(message=COMMENT_DELETED_MESSAGE)


@router.delete("", response_model=MessageResponse)
async def clear_comments(store: CommentStore = Depends(get_comment_store)):
    """Delete every comment"""
    removed = await store.delete_all()
    logger.info(f"Clear requested, {removed} comments removed")
    return MessageResponse(message=COMMENTS_CLEARED_MESSAGE)
