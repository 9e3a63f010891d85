"""
Authorization rules.

``allow`` is a pure function of the actor, the action and (for
ownership rules) the resource being acted on.  It never touches the
database; the operation layer loads the resource first and turns a
False into the matching failure.
"""
import enum
from dataclasses import dataclass
from typing import Any, Optional

from newsdesk.models import Comment, Role, User


class Action(str, enum.Enum):
    READ_ARTICLES = "read_articles"
    READ_ARTICLE = "read_article"
    READ_FEATURED = "read_featured"
    READ_COMMENTS = "read_comments"
    SEARCH_ARTICLES = "search_articles"
    CREATE_ARTICLE = "create_article"
    UPDATE_ARTICLE = "update_article"
    DELETE_ARTICLE = "delete_article"
    ADD_COMMENT = "add_comment"
    EDIT_COMMENT = "edit_comment"
    DELETE_COMMENT = "delete_comment"
    READ_PROFILE = "read_profile"
    UPDATE_PROFILE = "update_profile"
    CHANGE_PASSWORD = "change_password"
    UPDATE_AVATAR = "update_avatar"
    DELETE_ACCOUNT = "delete_account"


@dataclass(frozen=True)
class Actor:
    """Identity decoded from a request's bearer token."""

    id: int
    email: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @classmethod
    def from_claims(cls, claims: dict) -> Optional["Actor"]:
        try:
            role = Role(claims["role"])
        except ValueError:
            return None
        return cls(id=claims["user_id"], email=claims["email"], role=role)


PUBLIC_ACTIONS = frozenset({
    Action.READ_ARTICLES,
    Action.READ_ARTICLE,
    Action.READ_FEATURED,
    Action.READ_COMMENTS,
    Action.SEARCH_ARTICLES,
})

ADMIN_ACTIONS = frozenset({
    Action.CREATE_ARTICLE,
    Action.UPDATE_ARTICLE,
    Action.DELETE_ARTICLE,
})

# Any signed-in actor, whatever the role.
MEMBER_ACTIONS = frozenset({Action.ADD_COMMENT})

OWNER_ACTIONS = frozenset({Action.EDIT_COMMENT})

OWNER_OR_ADMIN_ACTIONS = frozenset({Action.DELETE_COMMENT})

# The actor may only act on their own account.
SELF_ACTIONS = frozenset({
    Action.READ_PROFILE,
    Action.UPDATE_PROFILE,
    Action.CHANGE_PASSWORD,
    Action.UPDATE_AVATAR,
    Action.DELETE_ACCOUNT,
})


def _owner_id(resource: Any) -> Optional[int]:
    if isinstance(resource, Comment):
        return resource.user_id
    if isinstance(resource, User):
        return resource.id
    return None


def allow(actor: Optional[Actor], action: Action, resource: Any = None) -> bool:
    if action in PUBLIC_ACTIONS:
        return True
    if actor is None:
        return False
    if action in ADMIN_ACTIONS:
        return actor.is_admin
    if action in MEMBER_ACTIONS:
        return True
    if action in OWNER_ACTIONS:
        return _owner_id(resource) == actor.id
    if action in OWNER_OR_ADMIN_ACTIONS:
        return actor.is_admin or _owner_id(resource) == actor.id
    if action in SELF_ACTIONS:
        return resource is None or _owner_id(resource) == actor.id
    return False


def requires_actor(action: Action) -> bool:
    """True when *action* is never allowed for an anonymous request."""
    return action not in PUBLIC_ACTIONS
