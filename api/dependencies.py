from fastapi import Request

from services.comment_store import CommentStore


def get_comment_store(request: Request) -> CommentStore:
    return request.app.state.store
