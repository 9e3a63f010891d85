from typing import Optional

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from newsdesk.config import settings
from newsdesk.models import Category
from newsdesk.policy import Actor
from newsdesk.schemas import MAX_INT
from newsdesk.security import verify_token

# auto_error=False: a missing or non-bearer Authorization header is an
# anonymous request, not a 403.
bearer_scheme = HTTPBearer(auto_error=False)


async def get_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[Actor]:
    """
    Decode the request's bearer token into an Actor, once per request.

    Any token that fails verification (expired, tampered, wrong secret,
    garbage) yields None exactly like a request without a token.
    """
    if credentials is None:
        return None
    claims = verify_token(credentials.credentials, settings.SECRET_KEY)
    if claims is None:
        return None
    return Actor.from_claims(claims)


class ArticleListParams:
    """
    Reusable FastAPI dependency for the REST article listing.

    Attributes
    ----------
    limit:
        Number of articles to return, clamped to ``settings.MAX_PAGE_SIZE``
        regardless of the value supplied by the caller.
    skip:
        Number of articles to skip from the newest.
    category:
        Optional category filter.
    is_featured:
        Optional featured-flag filter (``?isFeatured=true``).
    """

    def __init__(
        self,
        limit: int = Query(
            settings.DEFAULT_PAGE_SIZE,
            ge=1,
            description="Number of articles to return.",
        ),
        skip: int = Query(
            0,
            ge=0,
            le=MAX_INT,
            description="Number of articles to skip.",
        ),
        category: Optional[Category] = Query(None, description="Category filter."),
        is_featured: Optional[bool] = Query(
            None,
            alias="isFeatured",
            description="Only featured (true) or non-featured (false) articles.",
        ),
    ) -> None:
        self.limit = min(limit, settings.MAX_PAGE_SIZE)
        self.skip = skip
        self.category = category
        self.is_featured = is_featured
