"""
Mutation resolvers.

Each resolver receives the request's actor explicitly, consults the
policy through ``access``, derives every computed field up front and
then hands plain column values to the store.  A mutation touches at most
one record, so a failure leaves nothing half-written.
"""
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.derivations import (
    DEFAULT_AUTHOR,
    DEFAULT_FEATURED_IMAGE,
    default_avatar_url,
    normalize_tags,
    read_time,
    utcnow,
)
from newsdesk.errors import INVALID_CREDENTIALS, AuthenticationFailed, NotFound, ValidationFailed
from newsdesk.models import Role, User
from newsdesk.policy import Action, Actor
from newsdesk.resolvers.access import NOT_AUTHENTICATED, authenticate, authorize
from newsdesk.resolvers.registry import operation
from newsdesk.resolvers.shaping import article_to_dict, comment_to_dict, dump, user_model
from newsdesk.schemas import (
    AddCommentArgs,
    ArticleCreate,
    AuthPayload,
    ChangePasswordArgs,
    DeleteAccountArgs,
    IdArgs,
    LoginArgs,
    MutationResult,
    RegisterArgs,
    UpdateArticleArgs,
    UpdateAvatarArgs,
    UpdateCommentArgs,
    UpdateProfileArgs,
)
from newsdesk.security import hash_password, token_for, verify_password
from newsdesk.services import article_service, comment_service, user_service
from newsdesk.services.user_service import DUPLICATE_EMAIL

logger = logging.getLogger(__name__)


def _auth_payload(user: User) -> dict:
    return dump(AuthPayload(token=token_for(user), user=user_model(user)))


def _result(message: str, user: Optional[User] = None) -> dict:
    return dump(
        MutationResult(
            success=True,
            message=message,
            user=user_model(user) if user is not None else None,
        )
    )


async def _own_account(db: AsyncSession, actor: Optional[Actor], action: Action) -> User:
    actor = authenticate(actor, action)
    user = await user_service.get_user(db, actor.id)
    if user is None:
        raise AuthenticationFailed(NOT_AUTHENTICATED)
    authorize(actor, action, user)
    return user


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------

@operation("register", "mutation", RegisterArgs)
async def register(db: AsyncSession, actor: Optional[Actor], args: RegisterArgs) -> dict:
    if await user_service.find_user_by_email(db, args.email) is not None:
        raise ValidationFailed(DUPLICATE_EMAIL, field="email")

    now = utcnow()
    user = await user_service.create_user(db, {
        "first_name": args.first_name,
        "last_name": args.last_name,
        "email": args.email,
        "password_hash": hash_password(args.password),
        "avatar": default_avatar_url(args.first_name, args.last_name),
        "role": Role.READER,
        "email_verified": False,
        "created_at": now,
        "updated_at": now,
        "last_login": None,
    })
    return _auth_payload(user)


@operation("login", "mutation", LoginArgs)
async def login(db: AsyncSession, actor: Optional[Actor], args: LoginArgs) -> dict:
    user = await user_service.find_user_by_email(db, args.email)
    if not verify_password(args.password, user.password_hash if user else None):
        raise AuthenticationFailed(INVALID_CREDENTIALS)

    user = await user_service.update_user(db, user, {"last_login": utcnow()})
    return _auth_payload(user)


@operation("updateProfile", "mutation", UpdateProfileArgs)
async def update_profile(db: AsyncSession, actor: Optional[Actor], args: UpdateProfileArgs) -> dict:
    user = await _own_account(db, actor, Action.UPDATE_PROFILE)

    # Keys absent from the input keep their stored values.
    changes = args.input.model_dump(exclude_unset=True)
    if "email" in changes and changes["email"] != user.email:
        if await user_service.find_user_by_email(db, changes["email"]) is not None:
            raise ValidationFailed(DUPLICATE_EMAIL, field="email")

    changes["updated_at"] = utcnow()
    user = await user_service.update_user(db, user, changes)
    return _result("Profile updated successfully", user)


@operation("changePassword", "mutation", ChangePasswordArgs)
async def change_password(db: AsyncSession, actor: Optional[Actor], args: ChangePasswordArgs) -> dict:
    user = await _own_account(db, actor, Action.CHANGE_PASSWORD)
    if not verify_password(args.current_password, user.password_hash):
        raise ValidationFailed("Current password is incorrect", field="currentPassword")

    await user_service.update_user(db, user, {
        "password_hash": hash_password(args.new_password),
        "updated_at": utcnow(),
    })
    return _result("Password changed successfully")


@operation("updateAvatar", "mutation", UpdateAvatarArgs)
async def update_avatar(db: AsyncSession, actor: Optional[Actor], args: UpdateAvatarArgs) -> dict:
    """Set a custom avatar URL; null falls back to the generated identicon."""
    user = await _own_account(db, actor, Action.UPDATE_AVATAR)
    user = await user_service.update_user(db, user, {
        "avatar": args.avatar_url,
        "updated_at": utcnow(),
    })
    message = "Avatar updated successfully" if args.avatar_url else "Avatar reset to default"
    return _result(message, user)


@operation("deleteAccount", "mutation", DeleteAccountArgs)
async def delete_account(db: AsyncSession, actor: Optional[Actor], args: DeleteAccountArgs) -> dict:
    user = await _own_account(db, actor, Action.DELETE_ACCOUNT)
    if not verify_password(args.password, user.password_hash):
        raise ValidationFailed("Password is incorrect", field="password")

    # TODO: decide whether the user's comments should be reassigned to a
    # "deleted user" placeholder; for now they keep the dangling user id.
    await user_service.delete_user(db, user.id)
    return _result("Account deleted successfully")


# ---------------------------------------------------------------------------
# Articles
# ---------------------------------------------------------------------------

@operation("createArticle", "mutation", ArticleCreate)
async def create_article(db: AsyncSession, actor: Optional[Actor], args: ArticleCreate) -> dict:
    authorize(actor, Action.CREATE_ARTICLE)

    now = utcnow()
    article = await article_service.create_article(db, {
        "title": args.title,
        "excerpt": args.excerpt,
        "content": args.content,
        "category": args.category,
        "author": (args.author or "").strip() or DEFAULT_AUTHOR,
        "featured_image": args.featured_image or DEFAULT_FEATURED_IMAGE,
        "tags": normalize_tags(args.tags),
        "views": 0,
        "read_time": read_time(args.content, args.read_time),
        "is_featured": args.is_featured,
        "is_published": args.is_published,
        "published_at": now,
        "created_at": now,
        "updated_at": now,
    })
    return article_to_dict(article)


@operation("updateArticle", "mutation", UpdateArticleArgs)
async def update_article(db: AsyncSession, actor: Optional[Actor], args: UpdateArticleArgs) -> dict:
    authorize(actor, Action.UPDATE_ARTICLE)
    article = await article_service.find_article(db, args.id)
    if article is None:
        raise NotFound("Article not found")

    # Every article column is required, so an explicit null means "leave it".
    changes = {
        name: value
        for name, value in args.input.model_dump(exclude_unset=True).items()
        if value is not None
    }
    if "tags" in changes:
        changes["tags"] = normalize_tags(changes["tags"])
    if "content" in changes and "read_time" not in changes:
        changes["read_time"] = read_time(changes["content"])
    changes["updated_at"] = utcnow()

    article = await article_service.update_article(db, article, changes)
    return article_to_dict(article)


@operation("deleteArticle", "mutation", IdArgs)
async def delete_article(db: AsyncSession, actor: Optional[Actor], args: IdArgs) -> dict:
    authorize(actor, Action.DELETE_ARTICLE)
    if not await article_service.delete_article(db, args.id):
        raise NotFound("Article not found")
    return _result("Article deleted successfully")


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------

@operation("addComment", "mutation", AddCommentArgs)
async def add_comment(db: AsyncSession, actor: Optional[Actor], args: AddCommentArgs) -> dict:
    actor = authenticate(actor, Action.ADD_COMMENT)
    authorize(actor, Action.ADD_COMMENT)

    now = utcnow()
    comment = await comment_service.create_comment(db, {
        "article_id": args.article_id,
        "user_id": actor.id,
        "content": args.content,
        "created_at": now,
        "updated_at": now,
    })
    return await comment_to_dict(db, comment)


@operation("updateComment", "mutation", UpdateCommentArgs)
async def update_comment(db: AsyncSession, actor: Optional[Actor], args: UpdateCommentArgs) -> dict:
    actor = authenticate(actor, Action.EDIT_COMMENT)
    comment = await comment_service.get_comment(db, args.id)
    if comment is None:
        raise NotFound("Comment not found")
    authorize(actor, Action.EDIT_COMMENT, comment)

    comment = await comment_service.update_comment(db, comment, args.content, utcnow())
    return await comment_to_dict(db, comment)


@operation("deleteComment", "mutation", IdArgs)
async def delete_comment(db: AsyncSession, actor: Optional[Actor], args: IdArgs) -> dict:
    actor = authenticate(actor, Action.DELETE_COMMENT)
    comment = await comment_service.get_comment(db, args.id)
    if comment is None:
        raise NotFound("Comment not found")
    authorize(actor, Action.DELETE_COMMENT, comment)

    # Shape the response before the row is gone.
    data = await comment_to_dict(db, comment)
    if actor.id != comment.user_id:
        logger.info("Admin id=%s removed comment id=%s", actor.id, comment.id)
    await comment_service.delete_comment(db, comment)
    return data
