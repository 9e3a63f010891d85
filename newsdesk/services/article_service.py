"""
Article service: storage access for the Article collection.

Design notes
------------
- Functions take fully derived column values; read time, timestamps and
  defaults are computed by the operation layer before anything is
  written here.
- Only published articles are visible through the listing and search
  paths.  ``get_article`` returns drafts too so editors can preview
  them.
- The view counter is bumped with a single ``UPDATE ... SET views =
  views + 1`` so concurrent readers never overwrite each other's
  increment with a stale value read earlier.
- Service functions flush but do not commit; the transaction boundary
  is owned by the ``get_db`` dependency.
"""
import logging
from typing import Optional

from sqlalchemy import desc, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.models import Article, ArticleTag, Category

logger = logging.getLogger(__name__)


def _published_feed():
    return (
        select(Article)
        .where(Article.is_published.is_(True))
        .order_by(desc(Article.published_at), desc(Article.id))
    )


async def list_articles(
    db: AsyncSession,
    *,
    category: Optional[Category] = None,
    is_featured: Optional[bool] = None,
    skip: int = 0,
    limit: int = 12,
) -> list[Article]:
    """Return published articles, newest first, filtered and sliced."""
    q = _published_feed()
    if category is not None:
        q = q.where(Article.category == category)
    if is_featured is not None:
        q = q.where(Article.is_featured.is_(is_featured))

    result = await db.execute(q.offset(skip).limit(limit))
    return list(result.scalars().all())


async def find_article(db: AsyncSession, article_id: int) -> Optional[Article]:
    """Plain lookup by id with no side effects."""
    return await db.get(Article, article_id)


async def get_article(db: AsyncSession, article_id: int) -> Optional[Article]:
    """
    Fetch *article_id* and count the read.

    Returns None when the article does not exist.  The increment is a
    single atomic statement; the row is then re-read so the returned
    instance carries the new counter even if the session already held
    an older copy.
    """
    bumped = await db.execute(
        update(Article)
        .where(Article.id == article_id)
        .values(views=Article.views + 1)
        .execution_options(synchronize_session=False)
    )
    if bumped.rowcount == 0:
        return None

    result = await db.execute(
        select(Article)
        .where(Article.id == article_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def search_articles(db: AsyncSession, text: str, limit: int = 20) -> list[Article]:
    """
    Case-insensitive substring search over the title, the content and
    each individual tag of published articles.  A blank query matches
    nothing.
    """
    # Lowercased here as well: SQLite's lower() only folds ASCII.
    text = (text or "").strip().lower()
    if not text:
        return []

    q = _published_feed().where(
        or_(
            Article.title.icontains(text, autoescape=True),
            Article.content.icontains(text, autoescape=True),
            Article.tag_rows.any(ArticleTag.name.icontains(text, autoescape=True)),
        )
    )
    result = await db.execute(q.limit(limit))
    return list(result.scalars().all())


async def create_article(db: AsyncSession, fields: dict) -> Article:
    article = Article(**fields)
    db.add(article)
    await db.flush()
    logger.info("Created article id=%s category=%s", article.id, article.category.value)
    return article


async def update_article(db: AsyncSession, article: Article, fields: dict) -> Article:
    for name, value in fields.items():
        setattr(article, name, value)
    await db.flush()
    return article


async def delete_article(db: AsyncSession, article_id: int) -> bool:
    """
    Delete the article identified by *article_id*.

    Returns True on success, False when the article does not exist.
    Comments that reference it are left in place.
    """
    article = await db.get(Article, article_id)
    if article is None:
        return False

    await db.delete(article)
    await db.flush()
    logger.info("Deleted article id=%s", article_id)
    return True


async def count_articles(db: AsyncSession) -> int:
    return (await db.execute(select(func.count()).select_from(Article))).scalar_one()
