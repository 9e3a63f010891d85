"""
Operation layer: the named queries and mutations behind ``/api/v1/query``.

Importing this package registers every resolver in ``OPERATIONS``.
"""
from newsdesk.resolvers import mutations, queries  # noqa: F401
from newsdesk.resolvers.registry import OPERATIONS, execute

__all__ = ["OPERATIONS", "execute"]
