from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.database import get_db
from newsdesk.dependencies import get_actor
from newsdesk.policy import Actor
from newsdesk.resolvers import execute
from newsdesk.schemas import OperationRequest

router = APIRouter(prefix="/api/v1", tags=["query"])


@router.post("/query")
async def run_operation(
    request: OperationRequest,
    actor: Optional[Actor] = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    """
    Run one named query or mutation.

    Answers 200 for any well-formed request; failures travel in the
    ``errors`` list next to a null ``data`` entry for the operation.  A
    body that is not an operation request gets the same envelope with
    status 400 and ``data: null``.
    """
    return await execute(db, request.operation, request.arguments, actor)
