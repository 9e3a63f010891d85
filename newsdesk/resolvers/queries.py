from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.config import settings
from newsdesk.errors import AuthenticationFailed, NotFound
from newsdesk.policy import Action, Actor
from newsdesk.resolvers.access import NOT_AUTHENTICATED, authenticate, authorize
from newsdesk.resolvers.registry import operation
from newsdesk.resolvers.shaping import article_to_dict, comments_to_dicts, user_to_dict
from newsdesk.schemas import ArticlesArgs, CommentsArgs, IdArgs, NoArgs, SearchArgs
from newsdesk.services import article_service, comment_service, user_service


@operation("articles", "query", ArticlesArgs)
async def articles(db: AsyncSession, actor: Optional[Actor], args: ArticlesArgs) -> list[dict]:
    authorize(actor, Action.READ_ARTICLES)
    rows = await article_service.list_articles(
        db,
        category=args.category,
        is_featured=args.is_featured,
        skip=args.skip,
        limit=min(args.limit, settings.MAX_PAGE_SIZE),
    )
    return [article_to_dict(a) for a in rows]


@operation("article", "query", IdArgs)
async def article(db: AsyncSession, actor: Optional[Actor], args: IdArgs) -> dict:
    """Single article; every successful fetch counts as a view."""
    authorize(actor, Action.READ_ARTICLE)
    row = await article_service.get_article(db, args.id)
    if row is None:
        raise NotFound("Article not found")
    return article_to_dict(row)


@operation("featuredArticles", "query")
async def featured_articles(db: AsyncSession, actor: Optional[Actor], args: NoArgs) -> list[dict]:
    authorize(actor, Action.READ_FEATURED)
    rows = await article_service.list_articles(db, is_featured=True, limit=settings.FEATURED_LIMIT)
    return [article_to_dict(a) for a in rows]


@operation("comments", "query", CommentsArgs)
async def comments(db: AsyncSession, actor: Optional[Actor], args: CommentsArgs) -> list[dict]:
    authorize(actor, Action.READ_COMMENTS)
    rows = await comment_service.list_comments(db, args.article_id)
    return await comments_to_dicts(db, rows)


@operation("searchArticles", "query", SearchArgs)
async def search_articles(db: AsyncSession, actor: Optional[Actor], args: SearchArgs) -> list[dict]:
    authorize(actor, Action.SEARCH_ARTICLES)
    rows = await article_service.search_articles(db, args.query or "", limit=settings.SEARCH_LIMIT)
    return [article_to_dict(a) for a in rows]


@operation("me", "query")
async def me(db: AsyncSession, actor: Optional[Actor], args: NoArgs) -> dict:
    actor = authenticate(actor, Action.READ_PROFILE)
    user = await user_service.get_user(db, actor.id)
    if user is None:
        # Token outlived the account.
        raise AuthenticationFailed(NOT_AUTHENTICATED)
    authorize(actor, Action.READ_PROFILE, user)
    return user_to_dict(user)
