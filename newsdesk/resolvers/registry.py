"""
Named-operation registry and dispatcher.

Resolvers register themselves with ``@operation(name, kind, args)``.
``execute`` parses the raw argument mapping into the registered
pydantic model, runs the resolver with an explicit actor and wraps the
outcome in the ``{"data": ..., "errors": [...]}`` envelope.
"""
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.errors import OperationError, UnknownOperation, ValidationFailed
from newsdesk.policy import Actor
from newsdesk.schemas import NoArgs

logger = logging.getLogger(__name__)

Resolver = Callable[[AsyncSession, Optional[Actor], BaseModel], Awaitable[Any]]


@dataclass(frozen=True)
class Operation:
    name: str
    kind: str  # "query" or "mutation"
    args_model: type[BaseModel]
    resolve: Resolver


OPERATIONS: dict[str, Operation] = {}


def operation(name: str, kind: str, args_model: type[BaseModel] = NoArgs):
    def register(func: Resolver) -> Resolver:
        if name in OPERATIONS:
            raise RuntimeError(f"Operation {name!r} registered twice")
        OPERATIONS[name] = Operation(name, kind, args_model, func)
        return func

    return register


def parse_arguments(args_model: type[BaseModel], arguments: dict) -> BaseModel:
    """Validate *arguments*, reporting the first problem as ValidationFailed."""
    try:
        return args_model.model_validate(arguments)
    except ValidationError as exc:
        raise ValidationFailed.from_errors(exc.errors()) from exc


async def execute(
    db: AsyncSession,
    name: str,
    arguments: Optional[dict],
    actor: Optional[Actor],
) -> dict:
    op = OPERATIONS.get(name)
    try:
        if op is None:
            raise UnknownOperation(f"Unknown operation {name!r}")
        args = parse_arguments(op.args_model, arguments or {})
        result = await op.resolve(db, actor, args)
    except OperationError as exc:
        await db.rollback()
        logger.info(
            "Operation %s failed for actor=%s: %s (%s)",
            name,
            actor.id if actor else None,
            exc.code,
            exc.message,
        )
        return {"data": {name: None}, "errors": [exc.to_dict()]}

    return {"data": {name: result}}
