"""
Comment Store.

`CommentStore` mediates every read and write to the `comments` table. It owns
one async engine and hands out short-lived sessions per operation; concurrency
control is left to the database engine itself.

The store does not validate input. Callers (the HTTP handlers) make sure all
fields are present before calling `insert`. Any SQLAlchemy failure is reported
as `StoreError` carrying the operation name and the driver's message.
"""

import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy import delete, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlmodel import select, col

from core.database import (
    create_db_and_tables,
    create_engine_for,
    create_session_factory,
    describe_url,
)
from core.exceptions import StoreError
from core.logging_config import log_function_call
from core.models import Comment
from core.timestamps import comment_timestamps

logger = logging.getLogger(__name__)


def _reason(error: SQLAlchemyError) -> str:
    # Prefer the DBAPI message over SQLAlchemy's wrapped text
    orig = getattr(error, "orig", None)
    return str(orig) if orig is not None else str(error)


class CommentStore:
    """Persistence for comments"""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._session_factory = create_session_factory(engine)
        self._closed = False

    @classmethod
    def open(cls, database_url: str) -> "CommentStore":
        """Create a store with its own engine for `database_url`"""
        logger.info(f"Opening comment store at {describe_url(database_url)['url']}")
        return cls(create_engine_for(database_url))

    @property
    def closed(self) -> bool:
        return self._closed

    async def bootstrap(self):
        """Ensure the comments table exists"""
        try:
            await create_db_and_tables(self.engine)
        except SQLAlchemyError as e:
            raise StoreError("bootstrap", _reason(e)) from e

    @log_function_call(logger)
    async def list_all(self) -> List[Comment]:
        """All comments, newest first"""
        statement = select(Comment).order_by(col(Comment.id).desc())
        try:
            async with self._session_factory() as session:
                result = await session.execute(statement)
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise StoreError("list_all", _reason(e)) from e

    @log_function_call(logger)
    async def insert(
        self,
        username: str,
        novel_name: str,
        read_time: str,
        content: str,
        now: Optional[datetime] = None,
    ) -> Comment:
        """
        Store a new comment and return it with its assigned id, `date` and
        `displayDate`. `now` overrides the creation instant.
        """
        date, display_date = comment_timestamps(now)
        comment = Comment(
            username=username,
            novelName=novel_name,
            readTime=read_time,
            content=content,
            date=date,
            displayDate=display_date,
        )
        try:
            async with self._session_factory() as session:
                session.add(comment)
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError("insert", _reason(e)) from e

        logger.info(
            f"Stored comment {comment.id} by {username}",
            extra={"comment_id": comment.id, "novel": novel_name},
        )
        return comment

    @log_function_call(logger)
    async def delete_one(self, comment_id: int) -> bool:
        """Delete one comment. Returns False when no row has that id."""
        statement = delete(Comment).where(col(Comment.id) == comment_id)
        try:
            async with self._session_factory() as session:
                result = await session.execute(statement)
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError("delete_one", _reason(e)) from e

        deleted = result.rowcount > 0
        if deleted:
            logger.info(f"Deleted comment {comment_id}", extra={"comment_id": comment_id})
        return deleted

    @log_function_call(logger)
    async def delete_all(self) -> int:
        """Delete every comment and return how many rows were removed"""
        try:
            async with self._session_factory() as session:
                result = await session.execute(delete(Comment))
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError("delete_all", _reason(e)) from e

        logger.info(f"Cleared {result.rowcount} comments")
        return result.rowcount

    async def count(self) -> int:
        statement = select(func.count()).select_from(Comment)
        try:
            async with self._session_factory() as session:
                result = await session.execute(statement)
                return result.scalar_one()
        except SQLAlchemyError as e:
            raise StoreError("count", _reason(e)) from e

    async def close(self):
        """Release the engine's connections. Safe to call more than once."""
        if self._closed:
            return
        await self.engine.dispose()
        self._closed = True
        logger.info("Database connection closed")
