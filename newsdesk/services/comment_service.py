"""
Comment service: storage access for the Comment collection.

Comments reference their article and author by id only.  Neither
reference is checked or cascaded, so a thread can outlive the account
that wrote it.
"""
from typing import Optional

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.models import Comment


async def list_comments(db: AsyncSession, article_id: int) -> list[Comment]:
    """Return the thread for *article_id*, newest first."""
    q = (
        select(Comment)
        .where(Comment.article_id == article_id)
        .order_by(desc(Comment.created_at), desc(Comment.id))
    )
    result = await db.execute(q)
    return list(result.scalars().all())


async def get_comment(db: AsyncSession, comment_id: int) -> Optional[Comment]:
    return await db.get(Comment, comment_id)


async def create_comment(db: AsyncSession, fields: dict) -> Comment:
    comment = Comment(**fields)
    db.add(comment)
    await db.flush()
    return comment


async def update_comment(db: AsyncSession, comment: Comment, content: str, updated_at) -> Comment:
    comment.content = content
    comment.updated_at = updated_at
    await db.flush()
    return comment


async def delete_comment(db: AsyncSession, comment: Comment) -> None:
    await db.delete(comment)
    await db.flush()


async def count_comments(db: AsyncSession) -> int:
    return (await db.execute(select(func.count()).select_from(Comment))).scalar_one()
