"""Turn policy decisions into the matching operation failures."""
from typing import Any, Optional

from newsdesk.errors import AuthenticationFailed, PermissionDenied
from newsdesk.policy import Action, Actor, allow

ADMIN_REQUIRED = "Admin access required"
NOT_AUTHENTICATED = "Not authenticated"

# action -> (anonymous message, denied message)
_MESSAGES = {
    Action.CREATE_ARTICLE: (ADMIN_REQUIRED, ADMIN_REQUIRED),
    Action.UPDATE_ARTICLE: (ADMIN_REQUIRED, ADMIN_REQUIRED),
    Action.DELETE_ARTICLE: (ADMIN_REQUIRED, ADMIN_REQUIRED),
    Action.ADD_COMMENT: ("Please login to comment", "You cannot comment"),
    Action.EDIT_COMMENT: ("Please login to update comment", "You can only edit your own comments"),
    Action.DELETE_COMMENT: ("Please login to delete comment", "You can only delete your own comments"),
}
_DEFAULT_MESSAGES = (NOT_AUTHENTICATED, "You can only modify your own account")


def authenticate(actor: Optional[Actor], action: Action) -> Actor:
    """Reject anonymous callers before any resource is loaded."""
    if actor is None:
        raise AuthenticationFailed(_MESSAGES.get(action, _DEFAULT_MESSAGES)[0])
    return actor


def authorize(actor: Optional[Actor], action: Action, resource: Any = None) -> None:
    if allow(actor, action, resource):
        return
    anonymous, denied = _MESSAGES.get(action, _DEFAULT_MESSAGES)
    if actor is None:
        raise AuthenticationFailed(anonymous)
    raise PermissionDenied(denied)
