from typing import Optional

from fastapi import APIRouter, Depends, Path
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.database import get_db
from newsdesk.dependencies import ArticleListParams, get_actor
from newsdesk.errors import OperationError
from newsdesk.policy import Action, Actor
from newsdesk.resolvers import mutations
from newsdesk.resolvers.access import authorize
from newsdesk.resolvers.shaping import article_to_dict
from newsdesk.schemas import MAX_INT, IdArgs
from newsdesk.services import article_service

router = APIRouter(prefix="/api/v1/articles", tags=["articles"])


@router.get("")
async def list_articles(
    params: ArticleListParams = Depends(),
    actor: Optional[Actor] = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    authorize(actor, Action.READ_ARTICLES)
    articles = await article_service.list_articles(
        db,
        category=params.category,
        is_featured=params.is_featured,
        skip=params.skip,
        limit=params.limit,
    )
    return {"success": True, "articles": [article_to_dict(a) for a in articles]}


@router.delete("/{article_id}")
async def delete_article(
    article_id: int = Path(ge=1, le=MAX_INT),
    actor: Optional[Actor] = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    try:
        result = await mutations.delete_article(db, actor, IdArgs(id=article_id))
    except OperationError as exc:
        return JSONResponse(
            status_code=exc.http_status,
            content={"success": False, "error": exc.message},
        )
    return {"success": True, "message": result["message"]}
