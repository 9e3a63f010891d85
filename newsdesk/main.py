import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk import __version__
from newsdesk.config import settings
from newsdesk.database import get_db
from newsdesk.errors import ValidationFailed
from newsdesk.middleware import TimingMiddleware
from newsdesk.routers import articles, query
from newsdesk.services import article_service, comment_service, user_service

logger = logging.getLogger(__name__)

QUERY_PATH = query.router.prefix + "/query"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting newsdesk %s (%s)", __version__, settings.APP_ENV)
    yield
    logger.info("Shutting down")


app = FastAPI(
    title="Newsdesk API",
    description="Articles, comments and reader accounts behind a typed operation endpoint",
    version=__version__,
    lifespan=lifespan,
)

# Middleware
app.add_middleware(TimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)

# Routers
app.include_router(query.router)
app.include_router(articles.router)


@app.exception_handler(RequestValidationError)
async def malformed_request(request: Request, exc: RequestValidationError):
    """
    Keep each surface's response shape when FastAPI rejects the request
    itself (bad body, query string or path) before a handler runs.
    """
    path = request.url.path
    if path != QUERY_PATH and not path.startswith(articles.router.prefix):
        return await request_validation_exception_handler(request, exc)

    # Drop the "body" / "query" / "path" prefix from each location; a
    # JSON syntax error only carries a character offset.
    errors = [
        {**e, "loc": () if e["type"] == "json_invalid" else e["loc"][1:]}
        for e in exc.errors()
    ]
    error = ValidationFailed.from_errors(errors)
    logger.info("Rejected malformed request to %s: %s", path, error.message)
    if path == QUERY_PATH:
        content = {"data": None, "errors": [error.to_dict()]}
    else:
        content = {"success": False, "error": error.message}
    return JSONResponse(status_code=error.http_status, content=content)


@app.get("/health")
async def health(db: AsyncSession = Depends(get_db)):
    try:
        await db.execute(text("SELECT 1"))
        counts = {
            "articles": await article_service.count_articles(db),
            "users": await user_service.count_users(db),
            "comments": await comment_service.count_comments(db),
        }
    except SQLAlchemyError:
        logger.exception("Health check could not reach the database")
        return {"status": "degraded", "database": "unavailable", "counts": None, "version": __version__}

    return {"status": "healthy", "database": "connected", "counts": counts, "version": __version__}
